"""End-to-end tests for master extraction, the generators and the preview."""

import base64
import json
import sys
import zipfile

import pytest
from pptx import Presentation
from pptx.util import Inches

from conftest import A_NS, P_NS, PKG_REL_NS, R_NS

NS = f'xmlns:a="{A_NS}" xmlns:p="{P_NS}" xmlns:r="{R_NS}"'
REL_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

# 1x1 transparent PNG
PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

STANDARD_CLR_MAP = (
    'bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" accent2="accent2" accent3="accent3" '
    'accent4="accent4" accent5="accent5" accent6="accent6" hlink="hlink" folHlink="folHlink"'
)


def _rels(*rels: tuple[str, str, str]) -> str:
    body = "".join(
        f'<Relationship Id="{rid}" Type="{REL_BASE}/{rtype}" Target="{target}"/>'
        for rid, rtype, target in rels
    )
    return f'<Relationships xmlns="{PKG_REL_NS}">{body}</Relationships>'


def _srgb_slot(name: str, val: str) -> str:
    return f'<a:{name}><a:srgbClr val="{val}"/></a:{name}>'


THEME = (
    f'<a:theme {NS} name="Brand"><a:themeElements><a:clrScheme name="Brand">'
    '<a:dk1><a:sysClr val="windowText" lastClr="000000"/></a:dk1>'
    '<a:lt1><a:sysClr val="window" lastClr="FFFFFF"/></a:lt1>'
    + _srgb_slot("dk2", "1F1F1F") + _srgb_slot("lt2", "EEEEEE")
    + "".join(_srgb_slot(f"accent{i}", "FFFFFF") for i in range(1, 7))
    + _srgb_slot("hlink", "0563C1") + _srgb_slot("folHlink", "954F72")
    + '</a:clrScheme><a:fontScheme name="Brand">'
    '<a:majorFont><a:latin typeface="Georgia"/></a:majorFont>'
    '<a:minorFont><a:latin typeface="Arial"/></a:minorFont>'
    "</a:fontScheme></a:themeElements></a:theme>"
)

PRESENTATION = f'<p:presentation {NS}><p:sldSz cx="12192000" cy="6858000"/></p:presentation>'


def _nv_sp(shape_id: int, name: str, ph: str = "") -> str:
    return f'<p:nvSpPr><p:cNvPr id="{shape_id}" name="{name}"/><p:cNvSpPr/><p:nvPr>{ph}</p:nvPr></p:nvSpPr>'


def _xfrm(x: float, y: float, w: float, h: float) -> str:
    e = lambda v: int(round(v * 914400))  # noqa: E731
    return f'<a:xfrm><a:off x="{e(x)}" y="{e(y)}"/><a:ext cx="{e(w)}" cy="{e(h)}"/></a:xfrm>'


MASTER = (
    f"<p:sldMaster {NS}><p:cSld>"
    '<p:bg><p:bgPr><a:solidFill><a:schemeClr val="bg1"/></a:solidFill><a:effectLst/></p:bgPr></p:bg>'
    "<p:spTree>"
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr><p:grpSpPr/>'
    "<p:sp>" + _nv_sp(2, "Title Placeholder 1", '<p:ph type="title"/>')
    + f"<p:spPr>{_xfrm(1, 0.5, 11, 1.25)}</p:spPr>"
    '<p:txBody><a:bodyPr anchor="b"/><a:p><a:r><a:t>Click to edit Master title style</a:t></a:r></a:p></p:txBody></p:sp>'
    "<p:sp>" + _nv_sp(3, "Text Placeholder 2", '<p:ph type="body" idx="1"/>')
    + f"<p:spPr>{_xfrm(1, 2, 11, 4)}</p:spPr></p:sp>"
    "<p:sp>" + _nv_sp(4, "Page Number")
    + f"<p:spPr>{_xfrm(12.5, 7.13, 0.34, 0.13)}</p:spPr>"
    '<p:txBody><a:bodyPr lIns="0" tIns="0" rIns="0" bIns="0"/><a:p>'
    '<a:fld id="{00000000-0000-0000-0000-000000000001}" type="slidenum"><a:rPr sz="800"/><a:t>&#8249;#&#8250;</a:t></a:fld>'
    "</a:p></p:txBody></p:sp>"
    '<p:pic><p:nvPicPr><p:cNvPr id="5" name="Logo"/><p:cNvPicPr/><p:nvPr/></p:nvPicPr>'
    f'<p:blipFill><a:blip r:embed="rId1"/></p:blipFill><p:spPr>{_xfrm(12, 0.2, 1, 0.5)}</p:spPr></p:pic>'
    "</p:spTree></p:cSld>"
    f"<p:clrMap {STANDARD_CLR_MAP}/>"
    "<p:txStyles>"
    '<p:titleStyle><a:lvl1pPr><a:defRPr sz="4400"><a:solidFill><a:schemeClr val="tx1"/></a:solidFill></a:defRPr></a:lvl1pPr></p:titleStyle>'
    "<p:bodyStyle/><p:otherStyle/></p:txStyles>"
    "</p:sldMaster>"
)

LAYOUT_TITLE = (
    f'<p:sldLayout {NS} type="title"><p:cSld name="Title Slide">'
    '<p:bg><p:bgPr><a:solidFill><a:srgbClr val="002060"/></a:solidFill><a:effectLst/></p:bgPr></p:bg>'
    "<p:spTree>"
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr><p:grpSpPr/>'
    "<p:sp>" + _nv_sp(2, "Title 1", '<p:ph type="ctrTitle"/>')
    + f"<p:spPr>{_xfrm(1, 2, 11, 1.5)}</p:spPr>"
    "<p:txBody><a:bodyPr/><a:p/></p:txBody></p:sp>"
    "<p:sp>" + _nv_sp(3, "Subtitle 2", '<p:ph type="body" idx="1"/>') + "<p:spPr/></p:sp>"
    "<p:sp>" + _nv_sp(4, "Copyright")
    + f"<p:spPr>{_xfrm(0.5, 7, 4, 0.3)}</p:spPr>"
    '<p:txBody><a:bodyPr/><a:p><a:pPr><a:spcBef><a:spcPts val="600"/></a:spcBef></a:pPr>'
    "<a:r><a:t>© Acme Corp</a:t></a:r></a:p></p:txBody></p:sp>"
    "</p:spTree></p:cSld>"
    '<p:clrMapOvr><a:overrideClrMapping bg1="dk1" tx1="lt1" bg2="dk2" tx2="lt2" accent1="accent1" '
    'accent2="accent2" accent3="accent3" accent4="accent4" accent5="accent5" accent6="accent6" '
    'hlink="hlink" folHlink="folHlink"/></p:clrMapOvr>'
    "</p:sldLayout>"
)

LAYOUT_BLANK = (
    f'<p:sldLayout {NS} type="blank" showMasterSp="0"><p:cSld name="Blank">'
    '<p:spTree><p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr><p:grpSpPr/>'
    "<p:grpSp/></p:spTree></p:cSld>"
    "<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>"
    "</p:sldLayout>"
)

LAYOUT_RELS = _rels(("rId1", "slideMaster", "../slideMasters/slideMaster1.xml"))


@pytest.fixture
def brand_template(tmp_path):
    path = tmp_path / "brand.potx"
    parts = {
        "ppt/presentation.xml": PRESENTATION,
        "ppt/_rels/presentation.xml.rels": _rels(
            ("rId1", "slideMaster", "slideMasters/slideMaster1.xml"),
            ("rId2", "theme", "theme/theme1.xml"),
        ),
        "ppt/theme/theme1.xml": THEME,
        "ppt/slideMasters/slideMaster1.xml": MASTER,
        "ppt/slideMasters/_rels/slideMaster1.xml.rels": _rels(
            ("rId1", "image", "../media/image1.png"),
            ("rId2", "theme", "../theme/theme1.xml"),
        ),
        # stored out of order on purpose: parts are sorted by number
        "ppt/slideLayouts/slideLayout2.xml": LAYOUT_BLANK,
        "ppt/slideLayouts/_rels/slideLayout2.xml.rels": LAYOUT_RELS,
        "ppt/slideLayouts/slideLayout1.xml": LAYOUT_TITLE,
        "ppt/slideLayouts/_rels/slideLayout1.xml.rels": LAYOUT_RELS,
    }
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in parts.items():
            zf.writestr(name, data)
        zf.writestr("ppt/media/image1.png", PNG)
    return path


def _by_kind(layout, kind):
    return [obj for obj in layout.objects if obj.kind == kind]


class TestExtractMasters:
    def test_theme_and_dimensions(self, brand_template):
        from src.pptx_engine.master_extractor import extract_masters

        result = extract_masters(brand_template)
        assert result.template_name == "brand.potx"
        assert result.theme_colors["dk2"] == "1F1F1F"
        assert result.theme_fonts.heading == "Georgia"
        assert result.dimensions.width == 13.3333
        assert result.dimensions.height == 7.5

    def test_layouts_in_numeric_order(self, brand_template):
        from src.pptx_engine.master_extractor import extract_masters

        result = extract_masters(brand_template)
        assert [l.name for l in result.layouts] == ["Title Slide", "Blank"]
        assert [l.title for l in result.layouts] == ["TITLE_SLIDE", "BLANK"]
        assert len(result.parsed_layouts) == 2

    def test_title_layout_objects(self, brand_template):
        from src.pptx_engine.master_extractor import extract_masters

        layout = extract_masters(brand_template).layouts[0]
        assert layout.background.color == "002060"
        assert [obj.kind for obj in layout.objects] == ["text", "placeholder", "placeholder", "image"]

        title, subtitle = _by_kind(layout, "placeholder")
        assert title.options.type == "title"
        assert title.options.align == "center"
        # subtitle has no xfrm of its own
        assert (subtitle.options.x, subtitle.options.y, subtitle.options.w, subtitle.options.h) == (1.0, 2.0, 11.0, 4.0)

        (logo,) = _by_kind(layout, "image")
        assert logo.path == "./media/image1.png"

    def test_layout_color_map_override(self, brand_template):
        from src.pptx_engine.master_extractor import extract_masters

        result = extract_masters(brand_template)
        title_layout = result.layouts[0]
        # the master's title color is tx1, which this layout maps to lt1
        for ph in _by_kind(title_layout, "placeholder"):
            assert ph.options.color == "FFFFFF"
        assert result.parsed_layouts[0].clr_map_override["tx1"] == "lt1"
        assert result.parsed_layouts[1].clr_map_override is None

    def test_footer_zone_cleanup(self, brand_template):
        from src.pptx_engine.master_extractor import extract_masters

        (copyright_text,) = _by_kind(extract_masters(brand_template).layouts[0], "text")
        assert copyright_text.text == "© Acme Corp"
        assert copyright_text.options.para_space_before is None
        assert copyright_text.options.color == "FFFFFF"

    def test_slide_number_from_master_shape(self, brand_template):
        from src.pptx_engine.master_extractor import extract_masters

        sn = extract_masters(brand_template).layouts[0].slide_number
        assert (sn.x, sn.y, sn.w) == (12.5, 7.13, 0.34)
        assert sn.h == pytest.approx(0.2778, abs=1e-4)
        assert sn.font_size == 8
        assert sn.color == "FFFFFF"

    def test_blank_layout_hides_master_shapes(self, brand_template):
        from src.pptx_engine.master_extractor import extract_masters

        blank = extract_masters(brand_template).layouts[1]
        assert blank.background.color == "FFFFFF"
        assert blank.objects == []
        assert blank.slide_number is None
        assert blank.warnings == ["Found 1 grouped shape(s) (not supported in v1)"]

    def test_warnings_prefixed_and_media_collected(self, brand_template):
        from src.pptx_engine.master_extractor import extract_masters

        result = extract_masters(brand_template)
        assert result.warnings == ["[Blank] Found 1 grouped shape(s) (not supported in v1)"]
        assert [(m.archive_path, m.filename) for m in result.media_files] == [("ppt/media/image1.png", "image1.png")]

    @pytest.mark.parametrize("filters, expected", [
        (["2"], ["Blank"]),
        (["title"], ["Title Slide"]),
        (["1", "blank"], ["Title Slide", "Blank"]),
        (["nothing"], []),
    ])
    def test_layout_filter(self, brand_template, filters, expected):
        from src.pptx_engine.master_extractor import extract_masters
        from src.schemas.config import ExtractionConfig

        result = extract_masters(brand_template, ExtractionConfig(layouts=filters))
        assert [l.name for l in result.layouts] == expected

    def test_yaml_dump(self, brand_template, tmp_path):
        import yaml

        from src.pptx_engine.master_extractor import extract_masters

        out = tmp_path / "masters.yaml"
        extract_masters(brand_template).to_yaml(out)
        data = yaml.safe_load(out.read_text())
        assert "parsed_layouts" not in data
        assert data["layouts"][0]["objects"][1]["kind"] == "placeholder"
        assert "transparency" not in data["layouts"][0]["background"]

    def test_missing_theme_part(self, tmp_path):
        from src.parsers.archive import ArchiveEntryNotFoundError
        from src.pptx_engine.master_extractor import extract_masters

        path = tmp_path / "broken.pptx"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("ppt/presentation.xml", PRESENTATION)
        with pytest.raises(ArchiveEntryNotFoundError):
            extract_masters(path)


class TestPythonPptxTemplate:
    def test_default_template(self, tmp_path):
        from src.pptx_engine.master_extractor import extract_masters

        path = tmp_path / "default.pptx"
        Presentation().save(str(path))

        result = extract_masters(path)
        assert result.layouts[0].name == "Title Slide"
        assert len(result.layouts) == 11
        assert len(result.theme_colors) == 12
        assert (result.dimensions.width, result.dimensions.height) == (10.0, 7.5)
        placeholders = _by_kind(result.layouts[0], "placeholder")
        assert [p.options.type for p in placeholders] == ["title", "body"]
        assert all(p.options.w > 0 and p.options.h > 0 for p in placeholders)


class TestHelpers:
    def test_upper_snake_case(self):
        from src.pptx_engine.master_extractor import to_upper_snake_case

        assert to_upper_snake_case("Title Slide - Dark") == "TITLE_SLIDE_DARK"
        assert to_upper_snake_case("1_Title & Content") == "1_TITLE_CONTENT"

    def test_rels_path(self):
        from src.pptx_engine.master_extractor import rels_path_for

        assert rels_path_for("ppt/slideLayouts/slideLayout3.xml") == "ppt/slideLayouts/_rels/slideLayout3.xml.rels"

    def test_deduplicate_keeps_placeholders(self):
        from src.pptx_engine.master_extractor import deduplicate_objects
        from src.schemas.master_data import PlaceholderObject, PlaceholderOptions, RectObject

        ph = PlaceholderObject(options=PlaceholderOptions(name="Title"))
        objects = [RectObject(x=1.001, y=1), RectObject(x=1.0, y=1), ph, ph]
        assert deduplicate_objects(objects) == [objects[0], ph, ph]

    def test_override_keeps_default_map_without_master_map(self, theme_colors):
        from src.pptx_engine.master_extractor import _layout_resolver
        from src.schemas.template_model import ParsedMaster, Theme

        theme = Theme(colors={**theme_colors, "dk1": "111111"})
        master = ParsedMaster(clr_map={})
        resolver = _layout_resolver(theme, master, {"bg1": "dk1"})
        assert resolver.resolve_scheme_color("bg1") == "111111"
        assert resolver.resolve_scheme_color("tx1") == "111111"
        assert resolver.resolve_scheme_color("tx2") == theme_colors["dk2"]
        assert resolver.resolve_scheme_color("bg2") == theme_colors["lt2"]
        assert resolver.resolve_scheme_color("tx2") == _layout_resolver(theme, master, None).resolve_scheme_color("tx2")


class TestGenerators:
    def test_theme_json_background_fallback(self, brand_template):
        from src.generators.theme_json import generate_theme_json
        from src.pptx_engine.master_extractor import extract_masters

        result = extract_masters(brand_template)
        data = generate_theme_json(result.theme_colors, result.theme_fonts, result.dimensions, result.layouts)
        assert data["colors"]["accent1"] == "FFFFFF"
        assert data["palette"]["accent1"]["base"] == "002060"
        assert data["slideColors"] == ["002060"]
        assert data["paletteSource"] == "background-fallback"
        assert data["fonts"] == {"heading": "Georgia", "body": "Arial"}
        assert json.dumps(data)

    def test_theme_json_defaults(self, theme_colors):
        from src.generators.theme_json import generate_theme_json

        data = generate_theme_json(theme_colors)
        assert data["fonts"] == {"heading": "Calibri", "body": "Calibri"}
        assert data["dimensions"] == {"width": 10.0, "height": 7.5}
        assert "slideColors" not in data
        assert data["palette"]["accent1"]["base"] == "4472C4"

    def test_report(self, brand_template):
        from datetime import date

        from src.generators.report import generate_report
        from src.pptx_engine.master_extractor import extract_masters

        report = generate_report(extract_masters(brand_template), report_date=date(2024, 5, 1))
        assert report.startswith("# pptx-masters Extraction Report")
        assert "**Date:** 2024-05-01" in report
        assert "(Widescreen 16:9)" in report
        assert "| accent1 | #FFFFFF | ⬜ |" in report
        assert "### 1. Title Slide" in report
        assert "- **Background:** Solid #002060" in report
        assert "- **Static Shapes:** 1" in report
        assert "  - [Blank] Found 1 grouped shape(s) (not supported in v1)" not in report
        assert "- [Blank] Found 1 grouped shape(s) (not supported in v1)" in report
        assert "## What's Not Supported (v1)" in report

    def test_report_without_warnings(self):
        from src.generators.report import generate_report
        from src.schemas.master_data import ExtractionResult

        report = generate_report(ExtractionResult(template_name="empty.pptx"))
        assert "No warnings." in report
        assert "(Standard 4:3)" in report

    def test_aspect_label(self):
        from src.generators.report import aspect_label

        assert aspect_label(10, 7.5) == "Standard 4:3"
        assert aspect_label(13.3333, 7.5) == "Widescreen 16:9"
        assert aspect_label(7.5, 10) == "Portrait"
        assert aspect_label(11, 8.5) == "Custom"

    def test_color_emoji(self):
        from src.generators.report import color_emoji

        assert color_emoji("000000") == "⬛"
        assert color_emoji("FFFFFF") == "⬜"
        assert color_emoji("C00000") == "\U0001F7E5"
        assert color_emoji("") == ""


class TestPreview:
    def test_one_slide_per_layout(self, brand_template, tmp_path):
        from src.parsers.archive import open_template
        from src.pptx_engine.master_extractor import extract_masters
        from src.pptx_engine.preview import save_preview
        from src.utils.file_utils import copy_media

        result = extract_masters(brand_template)
        media_dir = tmp_path / "out" / "media"
        copy_media(open_template(brand_template), result.media_files, media_dir)
        out = save_preview(result, tmp_path / "out" / "preview.pptx", media_dir)

        prs = Presentation(str(out))
        assert len(prs.slides) == 2
        assert prs.slide_width == Inches(13.3333)
        # copyright text, 2 placeholder outlines, logo, slide number
        assert len(prs.slides[0].shapes) == 5

    def test_missing_media_is_skipped(self, brand_template, tmp_path):
        from src.pptx_engine.master_extractor import extract_masters
        from src.pptx_engine.preview import build_preview

        prs = build_preview(extract_masters(brand_template), tmp_path / "no-media")
        assert len(prs.slides[0].shapes) == 4


class TestCli:
    def test_writes_outputs(self, brand_template, tmp_path, monkeypatch):
        from scripts.extract_masters import main

        out = tmp_path / "out"
        monkeypatch.setattr(sys, "argv", ["extract_masters.py", str(brand_template), "-o", str(out)])
        main()

        for name in ("theme.json", "masters.yaml", "report.md", "preview.pptx", "media/image1.png"):
            assert (out / name).exists()
        assert json.loads((out / "theme.json").read_text())["paletteSource"] == "background-fallback"

    def test_list(self, brand_template, monkeypatch, capsys):
        from scripts.extract_masters import main

        monkeypatch.setattr(sys, "argv", ["extract_masters.py", str(brand_template), "--list"])
        main()
        assert capsys.readouterr().out.splitlines() == ["1. Title Slide", "2. Blank"]

    def test_rejects_other_extensions(self, tmp_path, monkeypatch, capsys):
        from scripts.extract_masters import main

        f = tmp_path / "notes.docx"
        f.write_text("x")
        monkeypatch.setattr(sys, "argv", ["extract_masters.py", str(f)])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
        assert capsys.readouterr().err.startswith("Error:")
