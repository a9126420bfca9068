"""Color parsing and conversion for palette-extractor.

Every input is converted to 8-bit RGB plus alpha (``Color``) first; hex, rgb,
hsl and oklch strings are all emitted from that one form, so the four formats
of a palette entry always describe the same color.
"""
import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import webcolors

from models.palette import ColorFormats
from utils.errors import InvalidColorFormat, UnsupportedColorSpace


@dataclass(frozen=True)
class Color:
    """Canonical color: channels 0-255, alpha 0-1."""
    red: int
    green: int
    blue: int
    alpha: float = 1.0

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    @property
    def is_opaque(self) -> bool:
        return self.alpha >= 1.0


HEX_PATTERN = re.compile(r'^#([0-9a-f]{3}|[0-9a-f]{4}|[0-9a-f]{6}|[0-9a-f]{8})$')
FUNCTION_PATTERN = re.compile(r'^([a-z][a-z-]*)\(\s*(.*?)\s*\)$', re.S)
NUMBER_PATTERN = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?')
NAME_PATTERN = re.compile(r'^[a-z]+$')

# CSS Color 4 names missing from webcolors' css3 table
EXTRA_NAMED_COLORS = {
    'rebeccapurple': (102, 51, 153),
}

# Real CSS color functions we recognize but do not convert
UNSUPPORTED_FUNCTIONS = {'lab', 'lch', 'oklab', 'oklch', 'hwb', 'color', 'color-mix'}

# Hue units -> degrees multiplier ('grad' must be tested before 'rad')
HUE_UNITS = (
    ('deg', 1.0),
    ('grad', 0.9),
    ('rad', 180.0 / math.pi),
    ('turn', 360.0),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _number(token: str, raw: str) -> float:
    if not NUMBER_PATTERN.fullmatch(token):
        raise InvalidColorFormat(raw)
    return float(token)


def _split_arguments(body: str, raw: str) -> Tuple[list, Optional[str]]:
    """Split a color function body into three components and an optional alpha.

    Accepts the legacy comma syntax ``r, g, b[, a]`` and the space syntax
    ``r g b[ / a]``.
    """
    alpha = None
    if ',' in body:
        if '/' in body:
            raise InvalidColorFormat(raw)
        parts = [part.strip() for part in body.split(',')]
        if len(parts) == 4:
            alpha = parts.pop()
    else:
        if '/' in body:
            body, alpha = body.split('/', 1)
            alpha = alpha.strip()
        parts = body.split()

    if len(parts) != 3 or not all(parts) or alpha == '':
        raise InvalidColorFormat(raw)
    return parts, alpha


def _parse_alpha(token: Optional[str], raw: str) -> float:
    if token is None:
        return 1.0
    if token.endswith('%'):
        value = _number(token[:-1], raw) / 100.0
    else:
        value = _number(token, raw)
    return round(_clamp(value, 0.0, 1.0), 3)


def _parse_channel(token: str, raw: str) -> int:
    if token.endswith('%'):
        value = _number(token[:-1], raw) * 255 / 100.0
    else:
        value = _number(token, raw)
    return _round_half_up(_clamp(value, 0.0, 255.0))


def _parse_hue(token: str, raw: str) -> float:
    for unit, factor in HUE_UNITS:
        if token.endswith(unit):
            return (_number(token[:-len(unit)], raw) * factor) % 360.0
    return _number(token, raw) % 360.0


def _parse_percent(token: str, raw: str) -> float:
    """Saturation/lightness as a 0-1 fraction ('%' optional, as in CSS Color 4)."""
    if token.endswith('%'):
        token = token[:-1]
    return _clamp(_number(token, raw), 0.0, 100.0) / 100.0


def _parse_hex(digits: str) -> Color:
    if len(digits) in (3, 4):
        digits = ''.join(c * 2 for c in digits)
    alpha = 1.0
    if len(digits) == 8:
        alpha = round(int(digits[6:8], 16) / 255.0, 3)
    return Color(
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
        alpha,
    )


def parse_color(raw: str) -> Color:
    """Parse a CSS color literal into a Color.

    Handles: #rgb, #rgba, #rrggbb, #rrggbbaa, rgb(), rgba(), hsl(), hsla()
    and CSS named colors.

    Raises:
        InvalidColorFormat: no supported grammar matches
        UnsupportedColorSpace: a CSS color function we do not convert
    """
    if not isinstance(raw, str):
        raise InvalidColorFormat(repr(raw))
    color = raw.strip().lower()

    if color.startswith('#'):
        match = HEX_PATTERN.match(color)
        if not match:
            raise InvalidColorFormat(raw)
        return _parse_hex(match.group(1))

    match = FUNCTION_PATTERN.match(color)
    if match:
        function, body = match.groups()
        if function in ('rgb', 'rgba'):
            parts, alpha = _split_arguments(body, raw)
            red, green, blue = (_parse_channel(part, raw) for part in parts)
            return Color(red, green, blue, _parse_alpha(alpha, raw))
        if function in ('hsl', 'hsla'):
            parts, alpha = _split_arguments(body, raw)
            hue = _parse_hue(parts[0], raw)
            sat = _parse_percent(parts[1], raw)
            light = _parse_percent(parts[2], raw)
            red, green, blue = hsl_to_rgb(hue, sat, light)
            return Color(red, green, blue, _parse_alpha(alpha, raw))
        if function in UNSUPPORTED_FUNCTIONS:
            raise UnsupportedColorSpace(raw, function)
        raise InvalidColorFormat(raw)

    if NAME_PATTERN.match(color):
        if color == 'transparent':
            return Color(0, 0, 0, 0.0)
        if color in EXTRA_NAMED_COLORS:
            return Color(*EXTRA_NAMED_COLORS[color])
        try:
            red, green, blue = webcolors.name_to_rgb(color)
        except ValueError:
            raise InvalidColorFormat(raw) from None
        return Color(red, green, blue)

    raise InvalidColorFormat(raw)


def is_color(token: str) -> bool:
    """True if token is a color literal parse_color accepts."""
    try:
        color = parse_color(token)
    except InvalidColorFormat:
        return False
    return bool(to_hex(color))


def normalize_color(color: str) -> Optional[str]:
    """Normalize any supported color format to lowercase hex, or None."""
    try:
        return to_hex(parse_color(color))
    except InvalidColorFormat:
        return None


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert a hex color to an (R, G, B) tuple."""
    return parse_color(hex_color).rgb


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB values to hex color string."""
    return f"#{r:02x}{g:02x}{b:02x}"


def rgb_to_hsl(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """Convert 8-bit RGB to (hue degrees, saturation %, lightness %)."""
    r_norm, g_norm, b_norm = r / 255.0, g / 255.0, b / 255.0
    max_c = max(r_norm, g_norm, b_norm)
    min_c = min(r_norm, g_norm, b_norm)
    light = (max_c + min_c) / 2

    if max_c == min_c:
        return 0.0, 0.0, light * 100

    d = max_c - min_c
    sat = d / (2 - max_c - min_c) if light > 0.5 else d / (max_c + min_c)

    if max_c == r_norm:
        hue = (g_norm - b_norm) / d + (6 if g_norm < b_norm else 0)
    elif max_c == g_norm:
        hue = (b_norm - r_norm) / d + 2
    else:
        hue = (r_norm - g_norm) / d + 4

    return (hue * 60) % 360, sat * 100, light * 100


def _hue_to_channel(p: float, q: float, t: float) -> float:
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


def hsl_to_rgb(hue: float, sat: float, light: float) -> Tuple[int, int, int]:
    """Convert HSL (degrees, 0-1, 0-1) to 8-bit RGB."""
    if sat == 0:
        value = _round_half_up(light * 255)
        return value, value, value

    q = light * (1 + sat) if light < 0.5 else light + sat - light * sat
    p = 2 * light - q
    h = (hue % 360) / 360.0

    return tuple(
        _round_half_up(_clamp(_hue_to_channel(p, q, h + offset), 0.0, 1.0) * 255)
        for offset in (1 / 3, 0, -1 / 3)
    )


def _fmt(value: float, places: int) -> str:
    """Fixed-point with trailing zeros dropped ('42.0' -> '42')."""
    text = f"{value:.{places}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return '0' if text == '-0' else text


def to_hex(color: Color) -> str:
    """#rrggbb, or #rrggbbaa when not fully opaque."""
    text = rgb_to_hex(*color.rgb)
    if not color.is_opaque:
        text += f"{_round_half_up(color.alpha * 255):02x}"
    return text


def to_rgb_string(color: Color) -> str:
    if color.is_opaque:
        return f"rgb({color.red}, {color.green}, {color.blue})"
    return f"rgba({color.red}, {color.green}, {color.blue}, {_fmt(color.alpha, 3)})"


def to_hsl_string(color: Color) -> str:
    hue, sat, light = rgb_to_hsl(*color.rgb)
    if round(hue, 1) >= 360:
        hue = 0.0
    body = f"{_fmt(hue, 1)}, {_fmt(sat, 1)}%, {_fmt(light, 1)}%"
    if color.is_opaque:
        return f"hsl({body})"
    return f"hsla({body}, {_fmt(color.alpha, 3)})"


def oklch_approximate(color: Color) -> Tuple[float, float, float]:
    """Cheap OKLCH stand-in. NOT the OKLab transform.

    Lightness is the Rec. 709 luma of the gamma-encoded channels, chroma and
    hue come from two opponent-channel differences:
        L = 0.2126 r + 0.7152 g + 0.0722 b
        a = 0.4 (r - g)
        b = 0.2 (r + g - 2 b)
        C = sqrt(a^2 + b^2), H = atan2(b, a)
    Kept for output compatibility with palettes produced by earlier releases.
    """
    r, g, b = (channel / 255.0 for channel in color.rgb)
    lightness = 0.2126 * r + 0.7152 * g + 0.0722 * b
    a_axis = 0.4 * (r - g)
    b_axis = 0.2 * (r + g - 2 * b)
    chroma = math.hypot(a_axis, b_axis)
    hue = math.degrees(math.atan2(b_axis, a_axis)) % 360
    return lightness, chroma, hue


def _srgb_to_linear(channel: float) -> float:
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def oklch_exact(color: Color) -> Tuple[float, float, float]:
    """sRGB -> OKLab -> LCh (Ottosson's matrices)."""
    r, g, b = (_srgb_to_linear(channel / 255.0) for channel in color.rgb)

    l = 0.4122214708 * r + 0.5363325363 * g + 0.0514459929 * b
    m = 0.2119034982 * r + 0.6806995451 * g + 0.1073969566 * b
    s = 0.0883024619 * r + 0.2817188376 * g + 0.6299787005 * b

    l_, m_, s_ = (math.copysign(abs(v) ** (1 / 3), v) for v in (l, m, s))

    lightness = 0.2104542553 * l_ + 0.7936177850 * m_ - 0.0040720468 * s_
    a_axis = 1.9779984951 * l_ - 2.4285922050 * m_ + 0.4505937099 * s_
    b_axis = 0.0259040371 * l_ + 0.7827717662 * m_ - 0.8086757660 * s_

    chroma = math.hypot(a_axis, b_axis)
    hue = math.degrees(math.atan2(b_axis, a_axis)) % 360
    return lightness, chroma, hue


OKLCH_CONVERTERS = {
    'approximate': oklch_approximate,
    'exact': oklch_exact,
}


def to_oklch_string(color: Color, mode: str = 'approximate') -> str:
    """oklch(L% C H[ / A]) using the approximate or exact conversion."""
    try:
        converter = OKLCH_CONVERTERS[mode]
    except KeyError:
        raise ValueError(f"Unknown OKLCH mode '{mode}'") from None

    lightness, chroma, hue = converter(color)
    # Achromatic: hue is meaningless
    if chroma < 1e-4:
        chroma, hue = 0.0, 0.0
    text = f"oklch({lightness * 100:.2f}% {chroma:.4f} {hue:.2f}"
    if not color.is_opaque:
        text += f" / {_fmt(color.alpha, 3)}"
    return text + ")"


def color_formats(color: Color, oklch_mode: str = 'approximate') -> ColorFormats:
    """Bundle all four notations of one color."""
    return ColorFormats(
        hex=to_hex(color),
        rgb=to_rgb_string(color),
        hsl=to_hsl_string(color),
        oklch=to_oklch_string(color, oklch_mode),
    )


def luminance(color: Color) -> float:
    """Relative luminance (0-1), WCAG formula."""
    r, g, b = (_srgb_to_linear(channel / 255.0) for channel in color.rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def get_text_color(background: Color) -> Tuple[int, int, int]:
    """White on dark backgrounds, black on light ones."""
    return (255, 255, 255) if luminance(background) < 0.5 else (0, 0, 0)
