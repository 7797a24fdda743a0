"""Tests for slide-number and footer extraction."""

import pytest

from conftest import xml

# 12.5", 7.13", 0.34" x 0.13"
NUMBER_XFRM = '<a:xfrm><a:off x="11430000" y="6519672"/><a:ext cx="310896" cy="118872"/></a:xfrm>'
SLIDENUM_FIELD = '<a:fld id="{B6F15528-21DE-4FAA-801E-634DDDAF4B2B}" type="slidenum"><a:rPr sz="800"/><a:t>&#8249;#&#8250;</a:t></a:fld>'


def _text_box(paragraph_content: str):
    from src.parsers.shape_tree import parse_sp

    return parse_sp(xml(
        '<p:sp><p:nvSpPr><p:cNvPr id="7" name="TextBox 6"/><p:cNvSpPr txBox="1"/><p:nvPr/></p:nvSpPr>'
        f'<p:spPr>{NUMBER_XFRM}</p:spPr>'
        f'<p:txBody><a:bodyPr lIns="0" tIns="0" rIns="0" bIns="0"/><a:p>{paragraph_content}</a:p></p:txBody></p:sp>'
    ))


def _placeholder(ph_type: str, body: str = "", xfrm: str = NUMBER_XFRM):
    from src.parsers.shape_tree import parse_sp

    return parse_sp(xml(
        f'<p:sp><p:nvSpPr><p:cNvPr id="8" name="{ph_type} 1"/><p:cNvSpPr/><p:nvPr><p:ph type="{ph_type}"/></p:nvPr></p:nvSpPr>'
        f"<p:spPr>{xfrm}</p:spPr>{body}</p:sp>"
    ))


class TestEmbeddedSlideNumber:
    def test_lone_field_detected_and_height_normalized(self):
        from src.mappers.slide_number import extract_slide_number_from_shape

        spec = extract_slide_number_from_shape(_text_box(SLIDENUM_FIELD))
        assert (spec.x, spec.y, spec.w) == (12.5, 7.13, 0.34)
        assert spec.font_size == 8
        assert spec.h == pytest.approx(8 * 2.5 / 72, abs=1e-4)
        assert spec.margin == (0.0, 0.0, 0.0, 0.0)

    def test_extra_literal_text_disqualifies(self):
        from src.mappers.slide_number import extract_slide_number_from_shape

        shape = _text_box('<a:r><a:t>Page </a:t></a:r>' + SLIDENUM_FIELD)
        assert extract_slide_number_from_shape(shape) is None

    def test_whitespace_and_breaks_are_ignored(self):
        from src.mappers.slide_number import extract_slide_number_from_shape

        shape = _text_box('<a:r><a:t> </a:t></a:r><a:br/>' + SLIDENUM_FIELD)
        assert extract_slide_number_from_shape(shape) is not None

    def test_other_field_disqualifies(self):
        from src.mappers.slide_number import extract_slide_number_from_shape

        shape = _text_box(SLIDENUM_FIELD + '<a:fld id="{1}" type="datetime1"><a:t>1/1/2024</a:t></a:fld>')
        assert extract_slide_number_from_shape(shape) is None

    def test_two_slide_number_fields_disqualify(self):
        from src.mappers.slide_number import extract_slide_number_from_shape

        assert extract_slide_number_from_shape(_text_box(SLIDENUM_FIELD + SLIDENUM_FIELD)) is None

    def test_plain_text_shape(self):
        from src.mappers.slide_number import extract_slide_number_from_shape

        assert extract_slide_number_from_shape(_text_box("<a:r><a:t>Hello</a:t></a:r>")) is None
        assert extract_slide_number_from_shape(None) is None

    def test_custom_height_factor(self):
        from src.mappers.slide_number import extract_slide_number_from_shape

        spec = extract_slide_number_from_shape(_text_box(SLIDENUM_FIELD), height_factor=3.6)
        assert spec.h == pytest.approx(0.4)


class TestPlaceholderFooters:
    def test_slide_number_placeholder(self):
        from src.mappers.slide_number import map_slide_number_and_footers

        body = '<p:txBody><a:bodyPr/><a:lstStyle/><a:p><a:pPr algn="r"/>' + SLIDENUM_FIELD + "</a:p></p:txBody>"
        slide_number, footers = map_slide_number_and_footers([_placeholder("sldNum", body)])
        assert slide_number.align == "right"
        assert slide_number.font_size == 8
        assert slide_number.margin is None
        assert footers == []

    def test_zero_size_slide_number_is_dropped(self):
        from src.mappers.slide_number import map_slide_number_and_footers

        zero = '<a:xfrm><a:off x="0" y="0"/><a:ext cx="0" cy="0"/></a:xfrm>'
        slide_number, _ = map_slide_number_and_footers([_placeholder("sldNum", xfrm=zero)])
        assert slide_number is None

    def test_footer_text_is_top_anchored(self):
        from src.mappers.slide_number import map_slide_number_and_footers

        body = '<p:txBody><a:bodyPr anchor="ctr"/><a:p><a:r><a:rPr sz="900"/><a:t>Confidential</a:t></a:r></a:p></p:txBody>'
        _, footers = map_slide_number_and_footers([_placeholder("ftr", body)])
        assert len(footers) == 1
        assert footers[0].text == "Confidential"
        assert footers[0].options.valign == "top"
        assert footers[0].options.font_size == 9

    def test_empty_footer_without_position_dropped(self):
        from src.mappers.slide_number import map_slide_number_and_footers

        _, footers = map_slide_number_and_footers([_placeholder("dt", xfrm="")])
        assert footers == []

    def test_copyright_in_untyped_placeholder(self):
        from src.mappers.slide_number import map_slide_number_and_footers
        from src.schemas.template_model import ParsedPlaceholder

        ph = ParsedPlaceholder(idx="12", name="Copyright", text_props=_text_box("<a:r><a:t>© 2024 Acme</a:t></a:r>").text_props)
        _, footers = map_slide_number_and_footers([ph])
        assert [f.text for f in footers] == ["© 2024 Acme"]

    def test_height_is_not_shrunk(self):
        from src.mappers.slide_number import normalize_slide_number_height
        from src.schemas.master_data import SlideNumberSpec

        spec = SlideNumberSpec(h=1.0, font_size=8)
        normalize_slide_number_height(spec)
        assert spec.h == 1.0
