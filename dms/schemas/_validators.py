"""Field normalisers shared by request schemas."""


def clean_name(v: str) -> str:
    """Strip surrounding whitespace and reject empty names."""
    v = v.strip()
    if not v:
        raise ValueError("Name cannot be empty")
    return v


def clean_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Content cannot be empty")
    return v


def clean_file_ref(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("File reference cannot be empty")
    return v
