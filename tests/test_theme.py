"""Tests for theme and color-map parsing."""

import pytest

from conftest import xml

THEME = """
<a:theme name="Office Theme">
  <a:themeElements>
    <a:clrScheme name="Office">
      <a:dk1><a:sysClr val="windowText" lastClr="000000"/></a:dk1>
      <a:lt1><a:sysClr val="window" lastClr="ffffff"/></a:lt1>
      <a:dk2><a:srgbClr val="44546A"/></a:dk2>
      <a:accent1><a:srgbClr val="4472c4"/></a:accent1>
    </a:clrScheme>
    <a:fontScheme name="Office">
      <a:majorFont><a:latin typeface="Calibri Light"/></a:majorFont>
      <a:minorFont><a:latin typeface="Calibri"/></a:minorFont>
    </a:fontScheme>
    <a:fmtScheme name="Office">
      <a:fillStyleLst><a:solidFill><a:schemeClr val="phClr"/></a:solidFill></a:fillStyleLst>
      <a:bgFillStyleLst><a:solidFill><a:schemeClr val="phClr"/></a:solidFill></a:bgFillStyleLst>
    </a:fmtScheme>
  </a:themeElements>
</a:theme>
"""


class TestParseTheme:
    def test_colors(self):
        from src.parsers.theme import parse_theme

        theme = parse_theme(xml(THEME))
        assert theme.colors == {"dk1": "000000", "lt1": "FFFFFF", "dk2": "44546A", "accent1": "4472C4"}

    def test_fonts(self):
        from src.parsers.theme import parse_theme

        theme = parse_theme(xml(THEME))
        assert theme.fonts.heading == "Calibri Light"
        assert theme.fonts.body == "Calibri"

    def test_format_scheme(self):
        from src.parsers.theme import parse_theme

        theme = parse_theme(xml(THEME))
        assert theme.format_scheme.fill_style_lst is not None
        assert theme.format_scheme.bg_fill_style_lst is not None
        assert theme.format_scheme.ln_style_lst is None

    def test_missing_sections_are_empty(self):
        from src.parsers.theme import parse_theme

        theme = parse_theme(xml("<a:theme><a:themeElements/></a:theme>"))
        assert theme.colors == {}
        assert theme.fonts.heading == ""
        assert theme.format_scheme is None

    def test_wrong_root_raises(self):
        from src.parsers.theme import parse_theme

        with pytest.raises(ValueError, match="missing a:theme root element"):
            parse_theme(xml("<p:sldMaster/>"))
        with pytest.raises(ValueError, match="missing a:theme root element"):
            parse_theme(None)

    def test_missing_theme_elements_raises(self):
        from src.parsers.theme import parse_theme

        with pytest.raises(ValueError, match="missing a:themeElements"):
            parse_theme(xml("<a:theme/>"))


class TestParseClrMap:
    def test_attributes(self):
        from src.parsers.theme import parse_clr_map

        clr_map = parse_clr_map(xml('<p:clrMap bg1="lt1" tx1="dk1" accent1="accent1"/>'))
        assert clr_map == {"bg1": "lt1", "tx1": "dk1", "accent1": "accent1"}

    def test_none(self):
        from src.parsers.theme import parse_clr_map

        assert parse_clr_map(None) == {}
