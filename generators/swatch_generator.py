"""PIL-based swatch sheet for an extracted palette."""
import math
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageDraw, ImageFont

from models.palette import PaletteData
from utils.color_utils import get_text_color, parse_color


# Font paths on macOS and common Linux distros
FONT_PATHS = [
    '/System/Library/Fonts/Helvetica.ttc',
    '/System/Library/Fonts/Supplemental/Arial.ttf',
    '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf',
    '/usr/share/fonts/dejavu/DejaVuSans.ttf',
]


def get_font(size: int) -> ImageFont.ImageFont:
    """Get a font at specified size, with fallback."""
    for font_path in FONT_PATHS:
        if Path(font_path).exists():
            try:
                return ImageFont.truetype(font_path, size)
            except OSError:
                continue
    return ImageFont.load_default()


class SwatchGenerator:
    """Draw one labelled rounded square per palette color."""

    def __init__(self, palette: PaletteData, background: Tuple[int, int, int] = (255, 255, 255)):
        self.palette = palette
        self.background = background

    def generate(self, columns: int = 3, swatch_size: int = 160, padding: int = 24) -> Image.Image:
        """Render the swatch sheet.

        Args:
            columns: Swatches per row
            swatch_size: Edge length of each swatch in pixels
            padding: Gap around and between swatches

        Returns:
            PIL Image (RGB)
        """
        count = max(len(self.palette.colors), 1)
        columns = max(1, min(columns, count))
        rows = math.ceil(count / columns)

        width = columns * swatch_size + (columns + 1) * padding
        height = rows * swatch_size + (rows + 1) * padding
        img = Image.new('RGB', (width, height), self.background)
        draw = ImageDraw.Draw(img)

        name_font = get_font(max(swatch_size // 9, 10))
        value_font = get_font(max(swatch_size // 11, 9))

        for index, entry in enumerate(self.palette.colors):
            row, col = divmod(index, columns)
            x0 = padding + col * (swatch_size + padding)
            y0 = padding + row * (swatch_size + padding)

            color = parse_color(entry.value.hex)
            draw.rounded_rectangle(
                (x0, y0, x0 + swatch_size, y0 + swatch_size),
                radius=swatch_size // 10,
                fill=color.rgb,
                outline=(220, 220, 220),
            )

            # Labels sit in the lower part of the swatch
            label_color = get_text_color(color)
            draw.text((x0 + 10, y0 + swatch_size - 44), entry.name, font=name_font, fill=label_color)
            draw.text((x0 + 10, y0 + swatch_size - 24), entry.value.hex, font=value_font, fill=label_color)

        return img

    def save(self, path, **kwargs) -> Path:
        """Render and write a PNG."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.generate(**kwargs).save(path, 'PNG', optimize=True)
        return path
