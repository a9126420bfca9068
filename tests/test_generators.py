"""
Tests for the text exporters and the PNG swatch sheet.
"""

import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from PIL import Image

from generators.export_generator import (
    EXPORT_FORMATS, export_palette, to_css_variables, to_format_table, to_json,
    to_tailwind_config,
)
from generators.swatch_generator import SwatchGenerator
from models.palette import PaletteColor, PaletteData
from utils.color_utils import color_formats, parse_color


def make_palette(*pairs):
    colors = tuple(PaletteColor(name, color_formats(parse_color(value))) for name, value in pairs)
    return PaletteData(
        url='https://example.com',
        colors=colors,
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


PALETTE = make_palette(
    ('primary', '#0366d6'),
    ('secondary', '#6b7280'),
    ('accent', '#f59e0b'),
    ('background', '#ffffff'),
    ('text', '#24292e'),
    ('neutral', '#9ca3af'),
)


class TestExporters(unittest.TestCase):

    def test_css_variables(self):
        css = to_css_variables(make_palette(('primary', '#0366d6'), ('text', '#24292e')))
        self.assertEqual(
            css,
            ":root {\n  --color-primary: #0366d6;\n  --color-text: #24292e;\n}\n",
        )

    def test_tailwind_config(self):
        config = to_tailwind_config(make_palette(('primary', '#0366d6')))
        self.assertTrue(config.startswith("// tailwind.config.js\nmodule.exports = {"))
        self.assertIn('      colors: {\n        "primary": "#0366d6"\n      }\n', config)

    def test_json(self):
        data = json.loads(to_json(PALETTE))
        self.assertEqual(data['source'], 'https://example.com')
        self.assertEqual(data['timestamp'], '2024-05-01T12:00:00+00:00')
        self.assertEqual(list(data['colors']), list(PALETTE.names))
        self.assertEqual(data['colors']['accent'], '#f59e0b')

    def test_table_lists_every_notation(self):
        table = to_format_table(PALETTE)
        lines = table.splitlines()
        self.assertEqual(lines[0].split(), ['name', 'hex', 'rgb', 'hsl', 'oklch'])
        self.assertEqual(len(lines), 2 + len(PALETTE.colors))
        self.assertTrue(lines[2].startswith('primary'))
        self.assertIn('rgb(3, 102, 214)', lines[2])
        self.assertIn('hsl(211.8, 97.2%, 42.5%)', lines[2])

    def test_export_palette_dispatch(self):
        for fmt in EXPORT_FORMATS:
            with self.subTest(fmt=fmt):
                self.assertTrue(export_palette(PALETTE, fmt))
        with self.assertRaises(ValueError):
            export_palette(PALETTE, 'scss')

    def test_palette_to_dict(self):
        data = PALETTE.to_dict()
        self.assertEqual(data['colors'][0], {
            'name': 'primary',
            'value': {
                'hex': '#0366d6',
                'rgb': 'rgb(3, 102, 214)',
                'hsl': 'hsl(211.8, 97.2%, 42.5%)',
                'oklch': PALETTE.get('primary').oklch,
            },
        })
        self.assertIn("colors=6", repr(PALETTE))


class TestSwatchGenerator(unittest.TestCase):

    def test_grid_dimensions_and_fill(self):
        img = SwatchGenerator(PALETTE).generate(columns=3, swatch_size=100, padding=10)
        self.assertEqual(img.size, (340, 230))
        self.assertEqual(img.getpixel((60, 30)), (3, 102, 214))
        # gap between swatches keeps the sheet background
        self.assertEqual(img.getpixel((5, 5)), (255, 255, 255))

    def test_single_color(self):
        img = SwatchGenerator(make_palette(('primary', '#ff0000'))).generate(columns=3, swatch_size=50, padding=5)
        self.assertEqual(img.size, (60, 60))

    def test_save_png(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = SwatchGenerator(PALETTE).save(Path(tmp) / 'out' / 'palette.png', swatch_size=60)
            self.assertTrue(path.exists())
            with Image.open(path) as img:
                self.assertEqual(img.format, 'PNG')


if __name__ == "__main__":
    unittest.main()
