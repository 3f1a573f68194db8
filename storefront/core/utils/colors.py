"""
Color names
===========
Maps free-text product color names to display hex values.
"""

COLOR_HEX = {
    "white": "#FFFFFF",
    "black": "#000000",
    "red": "#FF0000",
    "blue": "#0000FF",
    "green": "#008000",
    "yellow": "#FFFF00",
    "orange": "#FFA500",
    "purple": "#800080",
    "pink": "#FFC0CB",
    "brown": "#A52A2A",
    "gray": "#808080",
    "grey": "#808080",
    "navy": "#000080",
    "beige": "#F5F5DC",
    "cream": "#FFFDD0",
    "gold": "#FFD700",
    "silver": "#C0C0C0",
    "burgundy": "#800020",
    "maroon": "#800000",
    "coral": "#FF7F50",
    "turquoise": "#40E0D0",
    "mint": "#98FF98",
    "lavender": "#E6E6FA",
}


def color_hex(name: str) -> str:
    """
    Returns the hex value for a color name.

    Lookup is trimmed and case-insensitive. Unknown names come back
    unchanged and are NOT sanitized: callers using the result as a CSS
    value must treat it as untrusted.

    Examples:
        >>> color_hex(" Navy ")
        '#000080'
        >>> color_hex("#123456")
        '#123456'
    """
    return COLOR_HEX.get(name.strip().lower(), name)
