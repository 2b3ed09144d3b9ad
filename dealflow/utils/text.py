"""Display text helpers."""


def humanize_status(value: str | None) -> str:
    """``final_underwriting`` -> ``Final Underwriting``."""
    if not value:
        return ""
    return " ".join(word.capitalize() for word in str(value).split("_") if word)


def display_name(
    first_name: str | None,
    last_name: str | None,
    email: str | None = None,
    fallback: str = "Unknown user",
) -> str:
    full = " ".join(part for part in (first_name, last_name) if part).strip()
    if full:
        return full
    return email or fallback
