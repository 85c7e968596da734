"""Unit tests for the console styles."""

import re
from pathlib import Path

import pytest
from reclaim.cli import display
from reclaim.core.theme import build_styles, category_style, get_theme
from reclaim.models.file_record import SAFE_AUTOMATED_CATEGORIES, CleanupCategory
from reclaim.utils import formatting
from rich.console import Console
from rich.style import Style


class TestStyles:
    """Tests for the style table."""

    def test_every_category_has_a_style(self) -> None:
        """Each cleanup category renders with its own named style."""
        styles = build_styles()
        for category in CleanupCategory:
            assert category_style(category) in styles

    def test_all_definitions_parse(self) -> None:
        """Every definition is a valid Rich style."""
        for definition in build_styles().values():
            Style.parse(definition)

    def test_confirmation_categories_stand_out(self) -> None:
        """Categories needing review differ from the automated ones."""
        styles = build_styles()
        automated = {styles[category_style(c)] for c in SAFE_AUTOMATED_CATEGORIES}
        review = styles[category_style(CleanupCategory.OLD_FILES)]

        assert len(automated) == 1
        assert review not in automated
        assert styles[category_style(CleanupCategory.DUPLICATES)] not in {*automated, review}

    @pytest.mark.parametrize(
        "module",
        [display, formatting],
    )
    def test_styles_referenced_by_cli_are_defined(self, module) -> None:
        """Style names used in the CLI modules all exist in the theme."""
        source = Path(module.__file__).read_text(encoding="utf-8")
        names = set(re.findall(r'style="([a-z_.]+)"', source))
        names |= set(re.findall(r"\[([a-z_.]+)\][^\[]", source))

        assert names
        assert names <= set(build_styles())


class TestGetTheme:
    """Tests for the shared Rich theme."""

    def test_is_cached(self) -> None:
        """Both consoles share one theme instance."""
        assert get_theme() is get_theme()

    def test_renders_category_markup(self) -> None:
        """Category markup resolves through the theme without errors."""
        console = Console(theme=get_theme(), record=True, width=80, force_terminal=True)
        console.print(f"[{category_style(CleanupCategory.LOG_FILES)}]log_files[/]")

        assert "log_files" in console.export_text()
