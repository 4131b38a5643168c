"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

from pathlib import Path

import pytest
from craftbrew.core.theme import (
    ThemeColors,
    get_rich_theme,
    get_theme,
    load_theme,
    read_color_overrides,
)
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.success == "#03b971"
        assert colors.error == "#f53263"

    def test_valid_hex_colors(self) -> None:
        """ThemeColors accepts valid hex color codes."""
        colors = ThemeColors(text="#AABBCC", muted="#abc")
        assert colors.text == "#AABBCC"
        assert colors.muted == "#abc"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValueError, match="expected a hex color"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_wrong_length(self) -> None:
        """ThemeColors rejects colors with wrong length."""
        with pytest.raises(ValueError, match="expected a hex color"):
            ThemeColors(text="#ff")

    def test_invalid_hex_chars(self) -> None:
        """ThemeColors rejects non-hex characters."""
        with pytest.raises(ValueError, match="expected a hex color"):
            ThemeColors(text="#gggggg")

    def test_unknown_color_rejected(self) -> None:
        """Unknown color names are rejected."""
        with pytest.raises(ValueError):
            ThemeColors(sparkle="#ffffff")  # type: ignore[call-arg]


class TestLoadTheme:
    """Tests for theme file loading."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """A missing theme file yields the defaults."""
        assert load_theme(tmp_path / "theme.toml") == ThemeColors()

    def test_overrides_applied(self, tmp_path: Path) -> None:
        """Colors from the file override the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nadded = "#00ff00"\n')

        colors = load_theme(path)

        assert colors.added == "#00ff00"
        assert colors.removed == ThemeColors().removed

    def test_invalid_toml_gives_defaults(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Broken TOML is ignored with a warning."""
        path = tmp_path / "theme.toml"
        path.write_text("[colors\n")

        assert load_theme(path) == ThemeColors()
        assert "Ignoring theme file" in caplog.text

    def test_invalid_color_gives_defaults(self, tmp_path: Path) -> None:
        """Invalid colors fall back to the defaults."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nadded = "green"\n')

        assert load_theme(path) == ThemeColors()

    def test_non_string_values_dropped(self, tmp_path: Path) -> None:
        """Only string values are read from the colors table."""
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\nadded = 5\ninfo = "#123456"\n')

        assert read_color_overrides(path) == {"info": "#123456"}


class TestRichTheme:
    """Tests for Rich theme generation."""

    def test_styles_present(self) -> None:
        """Every style used by the CLI is defined."""
        theme = get_rich_theme(ThemeColors())

        for name in ("added", "removed", "protected", "muted", "bold_header", "border"):
            assert name in theme.styles

    def test_get_theme_cached(self) -> None:
        """get_theme returns the same instance on repeated calls."""
        first = get_theme()

        assert isinstance(first, Theme)
        assert get_theme() is first

    def test_error_style_is_bold(self) -> None:
        """Errors render bold in the configured color."""
        theme = get_rich_theme(ThemeColors(error="#ff0000"))

        assert theme.styles["error"].bold
        assert theme.styles["error"].color is not None
        assert theme.styles["error"].color.name == "#ff0000"
