"""Map raw CSS property/variable names onto palette names.

Two policies, picked explicitly through ExtractorConfig.policy:

* PatternNormalizer - keyword match onto the six semantic roles; names that
  match nothing are passed through unchanged. Palettes built with it are
  always completed to all six roles.
* AllowListNormalizer - only names from a fixed design-token vocabulary
  survive; everything else is dropped. No completion guarantee.
"""
import re
from typing import FrozenSet, Iterable, Optional

from models.palette import REQUIRED_ROLES

# Role -> synonyms, checked in this order (first hit wins)
ROLE_SYNONYMS = {
    'primary': ['primary', 'main', 'brand'],
    'secondary': ['secondary', 'accent-1'],
    'accent': ['accent', 'highlight', 'accent-2'],
    'background': ['background', 'bg', 'surface'],
    'text': ['text', 'font', 'foreground', 'fg'],
    'neutral': ['neutral', 'gray', 'grey'],
}

DESIGN_TOKEN_NAMES = frozenset([
    'background', 'foreground',
    'card', 'card-foreground',
    'popover', 'popover-foreground',
    'primary', 'primary-foreground',
    'secondary', 'secondary-foreground',
    'muted', 'muted-foreground',
    'accent', 'accent-foreground',
    'destructive', 'destructive-foreground',
    'border', 'input', 'ring',
    'chart-1', 'chart-2', 'chart-3', 'chart-4', 'chart-5',
    'sidebar-background', 'sidebar-foreground',
    'sidebar-primary', 'sidebar-primary-foreground',
    'sidebar-accent', 'sidebar-accent-foreground',
    'sidebar-border', 'sidebar-ring',
])


def clean_name(raw_name: str) -> str:
    """Strip whitespace and a leading '--' from a property name."""
    name = raw_name.strip()
    if name.startswith('--'):
        name = name[2:]
    return name


class PatternNormalizer:
    """Keyword-based mapping onto the six semantic roles."""

    name = 'pattern'
    guarantees_completion = True

    def __init__(self):
        self._patterns = [
            (role, re.compile('|'.join(re.escape(s) for s in synonyms), re.I))
            for role, synonyms in ROLE_SYNONYMS.items()
        ]

    def normalize(self, raw_name: str) -> Optional[str]:
        name = clean_name(raw_name)
        if not name:
            return None
        for role, pattern in self._patterns:
            if pattern.search(name):
                return role
        return name

    def counts_toward_threshold(self, name: str) -> bool:
        return name in REQUIRED_ROLES


class AllowListNormalizer:
    """Accept only a fixed set of design-token names."""

    name = 'allowlist'
    guarantees_completion = False

    def __init__(self, allowed: Optional[Iterable[str]] = None):
        self.allowed: FrozenSet[str] = frozenset(
            n.lower() for n in (allowed if allowed is not None else DESIGN_TOKEN_NAMES)
        )

    def normalize(self, raw_name: str) -> Optional[str]:
        name = clean_name(raw_name).lower()
        return name if name in self.allowed else None

    def counts_toward_threshold(self, name: str) -> bool:
        return True


NORMALIZERS = {
    'pattern': PatternNormalizer,
    'allowlist': AllowListNormalizer,
}


def get_normalizer(policy: str):
    """Instantiate the normalizer for a policy name."""
    try:
        return NORMALIZERS[policy]()
    except KeyError:
        raise ValueError(f"Unknown normalization policy '{policy}'") from None
