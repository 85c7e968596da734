"""Console styles for the reclaim CLI.

Tables and messages refer to styles by role ("size", "kept", ...) so the
palette lives in one place. Every cleanup category also gets its own
style, named ``category.<value>``, so a category is rendered in the same
color in every table.
"""

from functools import cache

from rich.theme import Theme

from reclaim.models.file_record import SAFE_AUTOMATED_CATEGORIES, CleanupCategory

# Role -> Rich style definition
ROLE_STYLES: dict[str, str] = {
    "bold_header": "bold #69b9a1",
    "border": "#29526d",
    "muted": "#b2bec3",
    "dim": "#b2bec3",
    "file.path": "default",
    "size": "#0ec1c8",
    "kept": "#c1ff62",
    "info": "#0ec1c8",
    "success": "#03b971",
    "warning": "#f5b332",
    "error": "bold #f53263",
}

# Categories a user must confirm stand out; automated ones stay calm.
REVIEW_CATEGORY_COLOR = "#f5b332"
AUTOMATED_CATEGORY_COLOR = "#69b9a1"
DUPLICATES_COLOR = "#d44ebc"


def category_style(category: CleanupCategory) -> str:
    """Return the style name used to render a category."""
    return f"category.{category.value}"


def _category_color(category: CleanupCategory) -> str:
    if category == CleanupCategory.DUPLICATES:
        return DUPLICATES_COLOR
    if category in SAFE_AUTOMATED_CATEGORIES:
        return AUTOMATED_CATEGORY_COLOR
    return REVIEW_CATEGORY_COLOR


def build_styles() -> dict[str, str]:
    """Return every style name the CLI uses mapped to its definition."""
    styles = dict(ROLE_STYLES)
    for category in CleanupCategory:
        styles[category_style(category)] = f"bold {_category_color(category)}"
    return styles


@cache
def get_theme() -> Theme:
    """Get the Rich theme shared by the stdout and stderr consoles."""
    return Theme(build_styles())
