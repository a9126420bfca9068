"""Scan CSS text for (name, color) candidates.

Pass 1 reads custom properties (``--name: <color>``). Pass 2 reads plain
declarations and bare color literals, and only runs when pass 1 resolved fewer
names than there are required roles.

Compiled patterns are module constants and are only used through finditer();
all scanning state (claimed spans, results) is local to one extract() call.
"""
import bisect
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from models.palette import REQUIRED_ROLES
from utils.color_utils import Color, is_color, parse_color

logger = logging.getLogger(__name__)


class Specificity(Enum):
    VARIABLE = 'variable'
    DECLARATION = 'declaration'


@dataclass(frozen=True)
class Candidate:
    raw_name: str
    value: Color
    specificity: Specificity


HEX = r'#[0-9a-fA-F]{3,8}\b'
FUNCTION = r'(?:rgba?|hsla?)\(\s*[^()]*\)'
COLOR_LITERAL = f'(?:{HEX}|{FUNCTION})'
# Declarations may also use named colors; validity is checked afterwards
COLOR_VALUE = f'(?:{HEX}|{FUNCTION}|[a-zA-Z]+\\b)'

VARIABLE_PATTERN = re.compile(r'(?<![\w-])--([\w-]+)\s*:\s*([^;{}]*)')
BACKGROUND_PATTERN = re.compile(
    rf'(?<![\w-])background(?:-color)?\s*:\s*({COLOR_VALUE})', re.I
)
COLOR_PROPERTY_PATTERN = re.compile(rf'(?<![\w-])color\s*:\s*({COLOR_VALUE})', re.I)
PAIR_PATTERN = re.compile(
    rf'(?<![\w-])([a-zA-Z][\w-]*)\s*(?::\s*|\s+)({COLOR_VALUE})(?![\w-])'
)
LITERAL_PATTERN = re.compile(COLOR_LITERAL)

# Bare "H S% L%" triplets, the design-token convention (--primary: 221 83% 53%)
HSL_TRIPLET_PATTERN = re.compile(
    r'^[+-]?\d*\.?\d+(?:deg)?\s+\d*\.?\d+%\s+\d*\.?\d+%(?:\s*/\s*\d*\.?\d+%?)?$'
)
IMPORTANT_PATTERN = re.compile(r'\s*!\s*important\s*$', re.I)
DELIMITER_PATTERN = re.compile(r'[{};]')

CONTEXT_WINDOW = 30
CONTEXT_KEYWORDS = [
    ('primary', re.compile(r'primary|brand', re.I)),
    ('secondary', re.compile(r'secondary', re.I)),
    ('accent', re.compile(r'accent|highlight', re.I)),
    ('background', re.compile(r'background|bg', re.I)),
    ('text', re.compile(r'text|font', re.I)),
    ('neutral', re.compile(r'neutral|gray|grey', re.I)),
]


def _variable_value(value: str) -> str:
    value = IMPORTANT_PATTERN.sub('', value.strip())
    if HSL_TRIPLET_PATTERN.match(value):
        return f'hsl({value})'
    return value


def _property_name(identifier: str) -> str:
    """'border-color' -> 'border'."""
    name = identifier.lower()
    if name.endswith('-color') and len(name) > len('-color'):
        name = name[:-len('-color')]
    return name


def _in_selector(css: str, end: int) -> bool:
    """True if the text after ``end`` opens a rule block ('#face {', 'a red, b {')."""
    match = DELIMITER_PATTERN.search(css, end)
    return match is not None and match.group() == '{'


class _Claims:
    """Character spans already turned into (or reserved from) candidates.

    Claimed spans never overlap, so sorted starts imply sorted ends and only
    the nearest span starting before ``end`` can overlap a query.
    """

    def __init__(self):
        self.starts: List[int] = []
        self.ends: List[int] = []

    def overlaps(self, start: int, end: int) -> bool:
        index = bisect.bisect_left(self.starts, end)
        return index > 0 and self.ends[index - 1] > start

    def claim(self, start: int, end: int):
        index = bisect.bisect_left(self.starts, start)
        self.starts.insert(index, start)
        self.ends.insert(index, end)


class CandidateExtractor:
    """Two-pass candidate scan; the normalizer decides when to escalate."""

    def __init__(self, normalizer, threshold: int = len(REQUIRED_ROLES)):
        self.normalizer = normalizer
        self.threshold = threshold

    def extract(self, css_texts: Union[str, Sequence[str]]) -> List[Candidate]:
        if isinstance(css_texts, str):
            css_texts = [css_texts]
        css = '\n'.join(css_texts)
        claims = _Claims()

        candidates = self._variable_pass(css, claims)
        resolved = self._resolved_count(candidates)
        logger.debug("Variable pass: %d candidates, %d roles resolved",
                     len(candidates), resolved)

        if resolved < self.threshold:
            declarations = self._declaration_pass(css, claims)
            logger.debug("Declaration pass: %d candidates", len(declarations))
            candidates.extend(declarations)

        return candidates

    def _resolved_count(self, candidates: List[Candidate]) -> int:
        names = set()
        for candidate in candidates:
            name = self.normalizer.normalize(candidate.raw_name)
            if name and self.normalizer.counts_toward_threshold(name):
                names.add(name)
        return len(names)

    @staticmethod
    def _to_color(token: str) -> Optional[Color]:
        if not is_color(token):
            return None
        color = parse_color(token)
        # Fully transparent values say nothing about the palette
        return color if color.alpha > 0 else None

    def _variable_pass(self, css: str, claims: _Claims) -> List[Candidate]:
        candidates = []
        for match in VARIABLE_PATTERN.finditer(css):
            # Custom properties belong to this pass whether or not they hold a color
            claims.claim(match.start(), match.end())
            color = self._to_color(_variable_value(match.group(2)))
            if color is not None:
                candidates.append(Candidate(match.group(1), color, Specificity.VARIABLE))
        return candidates

    def _declaration_pass(self, css: str, claims: _Claims) -> List[Candidate]:
        found: List[Tuple[int, Candidate]] = []

        def take(name: str, token: str, start: int, end: int) -> bool:
            if claims.overlaps(start, end):
                return False
            color = self._to_color(token)
            if color is None or _in_selector(css, end):
                return False
            claims.claim(start, end)
            found.append((start, Candidate(name, color, Specificity.DECLARATION)))
            return True

        # Most specific first; later kinds skip spans already claimed
        for match in BACKGROUND_PATTERN.finditer(css):
            take('background', match.group(1), match.start(1), match.end(1))

        for match in COLOR_PROPERTY_PATTERN.finditer(css):
            take('foreground', match.group(1), match.start(1), match.end(1))

        # Manual search loop: in "border: solid red" the rejected pair
        # "border: solid" must not swallow the word that starts "solid red"
        pos = 0
        while True:
            match = PAIR_PATTERN.search(css, pos)
            if not match:
                break
            if take(_property_name(match.group(1)), match.group(2), match.start(2), match.end(2)):
                pos = match.end()
            else:
                pos = match.end(1)

        for match in LITERAL_PATTERN.finditer(css):
            context = css[max(0, match.start() - CONTEXT_WINDOW):match.start()]
            role = next(
                (role for role, pattern in CONTEXT_KEYWORDS if pattern.search(context)),
                None,
            )
            if role:
                take(role, match.group(0), match.start(), match.end())

        found.sort(key=lambda item: item[0])
        return [candidate for _, candidate in found]
