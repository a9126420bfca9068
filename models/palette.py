"""Palette dataclasses and extractor configuration."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Tuple


class SemanticRole(str, Enum):
    """The six palette slots every complete palette fills."""
    PRIMARY = 'primary'
    SECONDARY = 'secondary'
    ACCENT = 'accent'
    BACKGROUND = 'background'
    TEXT = 'text'
    NEUTRAL = 'neutral'


REQUIRED_ROLES: Tuple[str, ...] = tuple(role.value for role in SemanticRole)

# Used when a required role is missing and no base color is preferred
DEFAULT_COLORS = {
    'primary': '#3b82f6',
    'secondary': '#6b7280',
    'accent': '#f59e0b',
    'background': '#ffffff',
    'text': '#000000',
    'neutral': '#9ca3af',
}


# Name -> description registries (CLI choices, /formats endpoint)
NORMALIZATION_POLICIES = {
    'pattern': 'Keyword matching onto the six roles, unknown names kept (default)',
    'allowlist': 'Only recognized design-token names, unknown names dropped',
}

FALLBACK_STRATEGIES = {
    'defaults': 'Fill missing roles with fixed default colors (default)',
    'base': 'Fill missing roles with the primary or first discovered color',
}

OKLCH_MODES = {
    'approximate': 'Luma/opponent-channel approximation, non-standard (default)',
    'exact': 'True OKLab conversion from linear sRGB',
}

SCAN_STRATEGIES = {
    'soup': 'Walk the parsed document with BeautifulSoup (default)',
    'regex': 'Scan the raw markup with regular expressions',
}


@dataclass
class ExtractorConfig:
    """Knobs for one ColorExtractor."""
    policy: str = 'pattern'
    fallback: str = 'defaults'
    oklch_mode: str = 'approximate'
    scan: str = 'soup'
    include_inline_styles: bool = True
    include_extras: bool = True     # keep pass-through names (pattern policy)
    max_stylesheets: Optional[int] = None
    timeout: int = 10
    user_agent: str = 'Mozilla/5.0 (compatible; PaletteExtractor/1.0)'

    def validate(self) -> 'ExtractorConfig':
        """Raise ValueError on unknown option names; return self."""
        checks = [
            ('policy', self.policy, NORMALIZATION_POLICIES),
            ('fallback', self.fallback, FALLBACK_STRATEGIES),
            ('oklch_mode', self.oklch_mode, OKLCH_MODES),
            ('scan', self.scan, SCAN_STRATEGIES),
        ]
        for option, value, known in checks:
            if value not in known:
                raise ValueError(
                    f"Unknown {option} '{value}' (expected one of: {', '.join(known)})"
                )
        if self.max_stylesheets is not None and self.max_stylesheets < 0:
            raise ValueError("max_stylesheets must be >= 0")
        return self


@dataclass(frozen=True)
class ColorFormats:
    """One color in every output notation."""
    hex: str
    rgb: str
    hsl: str
    oklch: str

    def to_dict(self) -> Dict[str, str]:
        return {'hex': self.hex, 'rgb': self.rgb, 'hsl': self.hsl, 'oklch': self.oklch}


@dataclass(frozen=True)
class PaletteColor:
    """A named palette entry."""
    name: str
    value: ColorFormats

    def to_dict(self) -> dict:
        return {'name': self.name, 'value': self.value.to_dict()}


@dataclass(frozen=True)
class PaletteData:
    """Result of one extraction request. Never mutated after creation."""

    url: str
    colors: Tuple[PaletteColor, ...]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(color.name for color in self.colors)

    def get(self, name: str) -> Optional[ColorFormats]:
        """Formats for a palette name, or None."""
        for color in self.colors:
            if color.name == name:
                return color.value
        return None

    def to_dict(self) -> dict:
        return {
            'url': self.url,
            'colors': [color.to_dict() for color in self.colors],
            'timestamp': self.timestamp.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"PaletteData(url='{self.url}', colors={len(self.colors)}, "
            f"names={list(self.names)})"
        )
