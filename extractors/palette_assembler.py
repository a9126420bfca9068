"""Turn candidates into a palette: first match per name wins, then fill gaps."""
import logging
from typing import Dict, Iterable, Optional

from extractors.candidate_extractor import Candidate
from models.palette import DEFAULT_COLORS, REQUIRED_ROLES
from utils.color_utils import Color, parse_color, to_hex
from utils.errors import InvalidColorFormat

logger = logging.getLogger(__name__)


class PaletteAssembler:
    """Build an ordered name -> Color mapping from candidates.

    Args:
        normalizer: PatternNormalizer, AllowListNormalizer or compatible
        fallback: 'defaults' or 'base' (see FALLBACK_STRATEGIES)
        include_extras: keep names outside the six roles
    """

    def __init__(self, normalizer, fallback: str = 'defaults', include_extras: bool = True):
        self.normalizer = normalizer
        self.fallback = fallback
        self.include_extras = include_extras

    def assemble(self, candidates: Iterable[Candidate]) -> Optional[Dict[str, Color]]:
        """Return the palette, or None when nothing was found and the policy
        does not promise completion."""
        palette: Dict[str, Color] = {}

        for candidate in candidates:
            name = self.normalizer.normalize(candidate.raw_name)
            if name is None or name in palette:
                continue
            if not self.include_extras and name not in REQUIRED_ROLES:
                continue
            palette[name] = candidate.value

        if not self.normalizer.guarantees_completion:
            return palette or None

        missing = [role for role in REQUIRED_ROLES if role not in palette]
        if missing:
            logger.debug("Filling missing roles %s (%s)", missing, self.fallback)
        base = self._base_color(palette)
        for role in missing:
            palette[role] = base if base is not None else self._default(role)

        return palette

    def _base_color(self, palette: Dict[str, Color]) -> Optional[Color]:
        """Color reused for every missing role in 'base' mode."""
        if self.fallback != 'base' or not palette:
            return None
        found = palette.get('primary') or next(iter(palette.values()))
        # Round-trip through the parser so the fallback is a clean copy
        try:
            return parse_color(to_hex(found))
        except InvalidColorFormat:
            return None

    @staticmethod
    def _default(role: str) -> Color:
        return parse_color(DEFAULT_COLORS[role])
