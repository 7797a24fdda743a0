"""Color resolution engine for theme colors.

Resolution chain for a scheme reference:

    schemeClr val -> color map -> scheme slot -> hex -> modifiers -> final hex

Modifier values use the OOXML integer scale (100000 = 100%).
"""

import logging
import math
import re

from pptx.oxml.ns import qn

from src.schemas.template_model import ResolvedColor, ThemeFonts

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Preset color table (ST_PresetColorVal)
# ---------------------------------------------------------------------------

PRESET_COLORS: dict[str, str] = {
    "aliceBlue": "F0F8FF",
    "antiqueWhite": "FAEBD7",
    "aqua": "00FFFF",
    "aquamarine": "7FFFD4",
    "azure": "F0FFFF",
    "beige": "F5F5DC",
    "bisque": "FFE4C4",
    "black": "000000",
    "blanchedAlmond": "FFEBCD",
    "blue": "0000FF",
    "blueViolet": "8A2BE2",
    "brown": "A52A2A",
    "burlyWood": "DEB887",
    "cadetBlue": "5F9EA0",
    "chartreuse": "7FFF00",
    "chocolate": "D2691E",
    "coral": "FF7F50",
    "cornflowerBlue": "6495ED",
    "cornsilk": "FFF8DC",
    "crimson": "DC143C",
    "cyan": "00FFFF",
    "dkBlue": "00008B",
    "dkCyan": "008B8B",
    "dkGoldenrod": "B8860B",
    "dkGray": "A9A9A9",
    "dkGreen": "006400",
    "dkKhaki": "BDB76B",
    "dkMagenta": "8B008B",
    "dkOliveGreen": "556B2F",
    "dkOrange": "FF8C00",
    "dkOrchid": "9932CC",
    "dkRed": "8B0000",
    "dkSalmon": "E9967A",
    "dkSeaGreen": "8FBC8F",
    "dkSlateBlue": "483D8B",
    "dkSlateGray": "2F4F4F",
    "dkTurquoise": "00CED1",
    "dkViolet": "9400D3",
    "deepPink": "FF1493",
    "deepSkyBlue": "00BFFF",
    "dimGray": "696969",
    "dodgerBlue": "1E90FF",
    "firebrick": "B22222",
    "floralWhite": "FFFAF0",
    "forestGreen": "228B22",
    "fuchsia": "FF00FF",
    "gainsboro": "DCDCDC",
    "ghostWhite": "F8F8FF",
    "gold": "FFD700",
    "goldenrod": "DAA520",
    "gray": "808080",
    "green": "008000",
    "greenYellow": "ADFF2F",
    "honeydew": "F0FFF0",
    "hotPink": "FF69B4",
    "indianRed": "CD5C5C",
    "indigo": "4B0082",
    "ivory": "FFFFF0",
    "khaki": "F0E68C",
    "lavender": "E6E6FA",
    "lavenderBlush": "FFF0F5",
    "lawnGreen": "7CFC00",
    "lemonChiffon": "FFFACD",
    "ltBlue": "ADD8E6",
    "ltCoral": "F08080",
    "ltCyan": "E0FFFF",
    "ltGoldenrodYellow": "FAFAD2",
    "ltGray": "D3D3D3",
    "ltGreen": "90EE90",
    "ltPink": "FFB6C1",
    "ltSalmon": "FFA07A",
    "ltSeaGreen": "20B2AA",
    "ltSkyBlue": "87CEFA",
    "ltSlateGray": "778899",
    "ltSteelBlue": "B0C4DE",
    "ltYellow": "FFFFE0",
    "lime": "00FF00",
    "limeGreen": "32CD32",
    "linen": "FAF0E6",
    "magenta": "FF00FF",
    "maroon": "800000",
    "medAquamarine": "66CDAA",
    "medBlue": "0000CD",
    "medOrchid": "BA55D3",
    "medPurple": "9370DB",
    "medSeaGreen": "3CB371",
    "medSlateBlue": "7B68EE",
    "medSpringGreen": "00FA9A",
    "medTurquoise": "48D1CC",
    "medVioletRed": "C71585",
    "midnightBlue": "191970",
    "mintCream": "F5FFFA",
    "mistyRose": "FFE4E1",
    "moccasin": "FFE4B5",
    "navajoWhite": "FFDEAD",
    "navy": "000080",
    "oldLace": "FDF5E6",
    "olive": "808000",
    "oliveDrab": "6B8E23",
    "orange": "FFA500",
    "orangeRed": "FF4500",
    "orchid": "DA70D6",
    "paleGoldenrod": "EEE8AA",
    "paleGreen": "98FB98",
    "paleTurquoise": "AFEEEE",
    "paleVioletRed": "DB7093",
    "papayaWhip": "FFEFD5",
    "peachPuff": "FFDAB9",
    "peru": "CD853F",
    "pink": "FFC0CB",
    "plum": "DDA0DD",
    "powderBlue": "B0E0E6",
    "purple": "800080",
    "red": "FF0000",
    "rosyBrown": "BC8F8F",
    "royalBlue": "4169E1",
    "saddleBrown": "8B4513",
    "salmon": "FA8072",
    "sandyBrown": "F4A460",
    "seaGreen": "2E8B57",
    "seaShell": "FFF5EE",
    "sienna": "A0522D",
    "silver": "C0C0C0",
    "skyBlue": "87CEEB",
    "slateBlue": "6A5ACD",
    "slateGray": "708090",
    "snow": "FFFAFA",
    "springGreen": "00FF7F",
    "steelBlue": "4682B4",
    "tan": "D2B48C",
    "teal": "008080",
    "thistle": "D8BFD8",
    "tomato": "FF6347",
    "turquoise": "40E0D0",
    "violet": "EE82EE",
    "wheat": "F5DEB3",
    "white": "FFFFFF",
    "whiteSmoke": "F5F5F5",
    "yellow": "FFFF00",
    "yellowGreen": "9ACD32",
}

# Spellings added in later revisions of the vocabulary
_PRESET_ALIASES = {
    "dkGrey": "dkGray", "grey": "gray", "ltGrey": "ltGray", "dimGrey": "dimGray",
    "dkSlateGrey": "dkSlateGray", "ltSlateGrey": "ltSlateGray", "slateGrey": "slateGray",
    "darkBlue": "dkBlue", "darkCyan": "dkCyan", "darkGoldenrod": "dkGoldenrod",
    "darkGray": "dkGray", "darkGrey": "dkGray", "darkGreen": "dkGreen",
    "darkKhaki": "dkKhaki", "darkMagenta": "dkMagenta", "darkOliveGreen": "dkOliveGreen",
    "darkOrange": "dkOrange", "darkOrchid": "dkOrchid", "darkRed": "dkRed",
    "darkSalmon": "dkSalmon", "darkSeaGreen": "dkSeaGreen", "darkSlateBlue": "dkSlateBlue",
    "darkSlateGray": "dkSlateGray", "darkSlateGrey": "dkSlateGray",
    "darkTurquoise": "dkTurquoise", "darkViolet": "dkViolet",
    "lightBlue": "ltBlue", "lightCoral": "ltCoral", "lightCyan": "ltCyan",
    "lightGoldenrodYellow": "ltGoldenrodYellow", "lightGray": "ltGray",
    "lightGrey": "ltGray", "lightGreen": "ltGreen", "lightPink": "ltPink",
    "lightSalmon": "ltSalmon", "lightSeaGreen": "ltSeaGreen", "lightSkyBlue": "ltSkyBlue",
    "lightSlateGray": "ltSlateGray", "lightSlateGrey": "ltSlateGray",
    "lightSteelBlue": "ltSteelBlue", "lightYellow": "ltYellow",
    "mediumAquamarine": "medAquamarine", "mediumBlue": "medBlue",
    "mediumOrchid": "medOrchid", "mediumPurple": "medPurple",
    "mediumSeaGreen": "medSeaGreen", "mediumSlateBlue": "medSlateBlue",
    "mediumSpringGreen": "medSpringGreen", "mediumTurquoise": "medTurquoise",
    "mediumVioletRed": "medVioletRed",
}
PRESET_COLORS.update({alias: PRESET_COLORS[name] for alias, name in _PRESET_ALIASES.items()})


# ---------------------------------------------------------------------------
# RGB / HSL conversion
# ---------------------------------------------------------------------------

def _round(v: float) -> int:
    # Half-up rounding, so 127.5 -> 128 like the format's reference renderers
    return math.floor(v + 0.5)


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """'RRGGBB' (no hash) -> (r, g, b), each 0-255."""
    return (
        int(hex_color[0:2], 16),
        int(hex_color[2:4], 16),
        int(hex_color[4:6], 16),
    )


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """(r, g, b) -> 'RRGGBB' uppercase, clamping each channel to 0-255."""
    def channel(v):
        return f"{_round(max(0, min(255, v))):02X}"

    return channel(r) + channel(g) + channel(b)


def rgb_to_hsl(r: float, g: float, b: float) -> tuple[float, float, float]:
    """(r, g, b) 0-255 -> (h, s, l) with h in [0, 360) and s, l in [0, 1]."""
    r, g, b = r / 255, g / 255, b / 255
    hi = max(r, g, b)
    lo = min(r, g, b)
    lum = (hi + lo) / 2

    if hi == lo:
        return 0.0, 0.0, lum

    d = hi - lo
    sat = d / (2 - hi - lo) if lum > 0.5 else d / (hi + lo)

    if hi == r:
        hue = ((g - b) / d + (6 if g < b else 0)) / 6
    elif hi == g:
        hue = ((b - r) / d + 2) / 6
    else:
        hue = ((r - g) / d + 4) / 6

    return hue * 360, sat, lum


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    """(h, s, l) -> (r, g, b) 0-255."""
    h /= 360

    if s == 0:
        v = _round(l * 255)
        return v, v, v

    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q

    return (
        _round(_hue_to_rgb(p, q, h + 1 / 3) * 255),
        _round(_hue_to_rgb(p, q, h) * 255),
        _round(_hue_to_rgb(p, q, h - 1 / 3) * 255),
    )


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------

MODIFIER_NAMES = ("tint", "shade", "hueMod", "hueOff", "satMod", "satOff", "lumMod", "lumOff", "alpha")

_COLOR_MODIFIERS = ("tint", "shade", "hueMod", "hueOff", "satMod", "satOff", "lumMod", "lumOff")

_HEX6 = re.compile(r"^[0-9A-Fa-f]{6}$")


def _clamp01(v: float) -> float:
    return max(0.0, min(1.0, v))


def apply_color_modifiers(hex_color: str, modifiers: dict[str, float]) -> str:
    """Apply OOXML color modifiers to 'RRGGBB' and return the modified hex.

    Order is fixed: shade, tint, then in HSL space hue (mod, off),
    saturation (mod, off) and luminance (mod, off).
    """
    r, g, b = hex_to_rgb(hex_color)

    shade = modifiers.get("shade")
    if shade is not None:
        s = shade / 100000
        r, g, b = _round(r * s), _round(g * s), _round(b * s)

    tint = modifiers.get("tint")
    if tint is not None:
        t = tint / 100000
        r = _round(r + (255 - r) * t)
        g = _round(g + (255 - g) * t)
        b = _round(b + (255 - b) * t)

    hue, sat, lum = rgb_to_hsl(r, g, b)

    if modifiers.get("hueMod") is not None:
        hue = (hue * (modifiers["hueMod"] / 100000)) % 360
    if modifiers.get("hueOff") is not None:
        # hueOff is in 60000ths of a degree
        hue = (hue + modifiers["hueOff"] / 60000) % 360

    if modifiers.get("satMod") is not None:
        sat = _clamp01(sat * (modifiers["satMod"] / 100000))
    if modifiers.get("satOff") is not None:
        sat = _clamp01(sat + modifiers["satOff"] / 100000)

    if modifiers.get("lumMod") is not None:
        lum = lum * (modifiers["lumMod"] / 100000)
    if modifiers.get("lumOff") is not None:
        lum = lum + modifiers["lumOff"] / 100000
    lum = _clamp01(lum)

    return rgb_to_hex(*hsl_to_rgb(hue, sat, lum))


def extract_modifiers(color_el) -> dict[str, float]:
    """Modifier children (a:tint, a:lumMod, a:alpha, ...) of a color element."""
    mods = {}
    for name in MODIFIER_NAMES:
        child = color_el.find(qn(f"a:{name}"))
        if child is None:
            continue
        raw = child.get("val")
        try:
            mods[name] = float(raw)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring malformed {name} modifier: {raw!r}")
    return mods


def has_color_modifiers(mods: dict[str, float]) -> bool:
    """True when any color-altering modifier (alpha excluded) is present."""
    return any(mods.get(name) is not None for name in _COLOR_MODIFIERS)


def alpha_to_transparency(alpha: float) -> int:
    """Alpha (100000 = opaque) -> percent transparent (0-100)."""
    return _round(100 - alpha / 1000)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

DEFAULT_CLR_MAP = {
    "bg1": "lt1",
    "tx1": "dk1",
    "bg2": "lt2",
    "tx2": "dk2",
    "accent1": "accent1",
    "accent2": "accent2",
    "accent3": "accent3",
    "accent4": "accent4",
    "accent5": "accent5",
    "accent6": "accent6",
    "hlink": "hlink",
    "folHlink": "folHlink",
}

DEFAULT_THEME_FONTS = ThemeFonts(heading="Calibri Light", body="Calibri")

_MAJOR_FONT_REFS = {"+mj-lt", "+mj-ea", "+mj-cs"}
_MINOR_FONT_REFS = {"+mn-lt", "+mn-ea", "+mn-cs"}

# Placeholder color: only resolvable with the referencing shape's fill
PLACEHOLDER_COLOR = "phClr"


def resolve_theme_font(ref: str, theme_fonts: ThemeFonts | None) -> str:
    """'+mj-*' -> heading font, '+mn-*' -> body font, anything else unchanged."""
    if theme_fonts is None:
        return ref
    if ref in _MAJOR_FONT_REFS:
        return theme_fonts.heading
    if ref in _MINOR_FONT_REFS:
        return theme_fonts.body
    return ref


class ColorResolver:
    """Resolves color and font references against one theme and color map.

    Instances are never mutated. Build a new one whenever the effective
    color map changes (e.g. a layout with a color-map override).
    """

    def __init__(
        self,
        theme_colors: dict[str, str],
        clr_map: dict[str, str] | None = None,
        theme_fonts: ThemeFonts | None = None,
    ):
        self._theme_colors = dict(theme_colors or {})
        self._clr_map = dict(clr_map) if clr_map is not None else dict(DEFAULT_CLR_MAP)
        self._fonts = theme_fonts or DEFAULT_THEME_FONTS

    @property
    def clr_map(self) -> dict[str, str]:
        return dict(self._clr_map)

    def resolve_scheme_color(self, name: str) -> str:
        """Scheme name (e.g. 'tx1') -> 'RRGGBB'; '000000' when nothing matches."""
        slot = self._clr_map.get(name) or name
        hex_color = self._theme_colors.get(slot)
        if not hex_color:
            # Some fragments name a slot directly (e.g. 'dk1') instead of a mapped role
            return self._theme_colors.get(name) or "000000"
        return hex_color

    def resolve_font_ref(self, ref: str) -> str:
        return resolve_theme_font(ref, self._fonts)

    def resolve(self, color_parent) -> ResolvedColor | None:
        """Resolve the color child of ``color_parent`` (a:solidFill, a:gs, a:buClr, ...).

        Returns None when there is no element or it holds no color,
        meaning "no explicit color here".
        """
        if color_parent is None:
            return None

        el = color_parent.find(qn("a:srgbClr"))
        if el is not None:
            return self._finish(el.get("val") or "000000", el)

        el = color_parent.find(qn("a:schemeClr"))
        if el is not None:
            name = el.get("val")
            if name == PLACEHOLDER_COLOR:
                return ResolvedColor(color="000000")
            return self._finish(self.resolve_scheme_color(name), el)

        el = color_parent.find(qn("a:sysClr"))
        if el is not None:
            return self._finish(el.get("lastClr") or "000000", el)

        el = color_parent.find(qn("a:prstClr"))
        if el is not None:
            name = el.get("val")
            base = PRESET_COLORS.get(name)
            if base is None:
                logger.debug(f"Unknown preset color {name!r}, using black")
                base = "000000"
            return self._finish(base, el)

        return None

    def _finish(self, hex_color: str, color_el) -> ResolvedColor:
        if not _HEX6.match(hex_color):
            logger.debug(f"Malformed color value {hex_color!r}, using black")
            hex_color = "000000"
        mods = extract_modifiers(color_el)
        if has_color_modifiers(mods):
            hex_color = apply_color_modifiers(hex_color, mods)
        result = ResolvedColor(color=hex_color.upper())
        if mods.get("alpha") is not None:
            result.transparency = alpha_to_transparency(mods["alpha"])
        return result


def create_color_resolver(
    theme_colors: dict[str, str],
    clr_map: dict[str, str] | None = None,
    theme_fonts: ThemeFonts | None = None,
) -> ColorResolver:
    return ColorResolver(theme_colors, clr_map, theme_fonts)
