"""Render a PaletteData as Tailwind config, CSS variables, JSON or a table."""
import json
from typing import Callable, Dict

from models.palette import PaletteData

EXPORT_FORMATS = {
    'tailwind': 'tailwind.config.js theme extension',
    'css': 'CSS custom properties on :root',
    'json': 'JSON document with source URL and timestamp',
    'table': 'Plain-text table with hex, rgb, hsl and oklch',
}


def _hex_map(palette: PaletteData) -> Dict[str, str]:
    return {color.name: color.value.hex for color in palette.colors}


def to_tailwind_config(palette: PaletteData) -> str:
    colors = json.dumps(_hex_map(palette), indent=2)
    # Indent the object to sit under "colors:"
    colors = colors.replace('\n', '\n      ')
    return (
        "// tailwind.config.js\n"
        "module.exports = {\n"
        "  theme: {\n"
        "    extend: {\n"
        f"      colors: {colors}\n"
        "    }\n"
        "  }\n"
        "}\n"
    )


def to_css_variables(palette: PaletteData) -> str:
    lines = [f"  --color-{color.name}: {color.value.hex};" for color in palette.colors]
    return ":root {\n" + "\n".join(lines) + "\n}\n"


def to_json(palette: PaletteData) -> str:
    return json.dumps(
        {
            'source': palette.url,
            'colors': _hex_map(palette),
            'timestamp': palette.timestamp.isoformat(),
        },
        indent=2,
    )


def to_format_table(palette: PaletteData) -> str:
    """One row per color, one column per notation."""
    headers = ('name', 'hex', 'rgb', 'hsl', 'oklch')
    rows = [
        (c.name, c.value.hex, c.value.rgb, c.value.hsl, c.value.oklch)
        for c in palette.colors
    ]
    widths = [max(len(row[i]) for row in [headers] + rows) for i in range(len(headers))]

    def line(cells):
        return '  '.join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    out = [line(headers), line('-' * w for w in widths)]
    out.extend(line(row) for row in rows)
    return '\n'.join(out) + '\n'


EXPORTERS: Dict[str, Callable[[PaletteData], str]] = {
    'tailwind': to_tailwind_config,
    'css': to_css_variables,
    'json': to_json,
    'table': to_format_table,
}


def export_palette(palette: PaletteData, fmt: str) -> str:
    """Render palette in one of EXPORT_FORMATS."""
    try:
        exporter = EXPORTERS[fmt]
    except KeyError:
        raise ValueError(f"Unknown export format '{fmt}'") from None
    return exporter(palette)
