"""String helpers."""


def is_blank_string(value: str | None) -> bool:
    """Check if a string is blank (None, empty or whitespace only)."""
    if value is None:
        return True
    return value.strip() == ""


def include_ignore_case(text: str, query: str) -> bool:
    """Check if query occurs in text, ignoring case."""
    return query.casefold() in text.casefold()
