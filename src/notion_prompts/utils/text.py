"""Text helpers."""


def truncate_text(text: str, max_length: int = 30) -> str:
    """Shorten text for log previews.

    Args:
        text: The text to shorten
        max_length: Characters kept before the ellipsis

    Returns:
        ``text`` unchanged if short enough, else its prefix followed by ``...``
    """
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."
