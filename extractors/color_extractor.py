"""Extract a semantic color palette from a website's CSS/HTML."""
import asyncio
import logging
from typing import Optional, Sequence
from urllib.parse import urlparse

import requests

from extractors.candidate_extractor import CandidateExtractor
from extractors.normalizer import get_normalizer
from extractors.palette_assembler import PaletteAssembler
from extractors.style_collector import StyleCollector, get_scan_strategy
from extractors.transport import PAGE_HEADERS, FetchText, RequestsTransport
from models.palette import ExtractorConfig, PaletteColor, PaletteData
from utils.color_utils import color_formats
from utils.errors import AccessBlocked, TransportError, UnsupportedScheme

logger = logging.getLogger(__name__)

# Statuses meaning "this site won't let us read it"
BLOCKED_STATUS_CODES = {401, 403, 407, 451}


def validate_url(url: str) -> str:
    """Return the trimmed URL, or raise UnsupportedScheme for non-http(s)."""
    url = url.strip()
    scheme = urlparse(url).scheme.lower()
    if scheme not in ('http', 'https'):
        raise UnsupportedScheme(scheme)
    return url


class ColorExtractor:
    """Extract a palette from a URL, an HTML document or raw CSS.

    Every call builds its own scanning state, so one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        fetch_text: Optional[FetchText] = None,
        normalizer=None,
        scan=None,
    ):
        self.config = (config or ExtractorConfig()).validate()
        # Only a transport created here is closed by close()
        self._owned_transport = None
        if fetch_text is None:
            fetch_text = self._owned_transport = RequestsTransport(
                timeout=self.config.timeout,
                user_agent=self.config.user_agent,
            )
        self.fetch_text = fetch_text
        self.normalizer = normalizer or get_normalizer(self.config.policy)
        self.collector = StyleCollector(
            scan=scan or get_scan_strategy(self.config.scan),
            include_inline_styles=self.config.include_inline_styles,
            max_stylesheets=self.config.max_stylesheets,
        )

    def close(self):
        """Release the HTTP session of the default transport."""
        if self._owned_transport is not None:
            self._owned_transport.close()
            self._owned_transport = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def extract_from_url(self, url: str) -> Optional[PaletteData]:
        """Fetch a page and extract its palette.

        Returns:
            PaletteData, or None when no colors were found (allow-list policy)

        Raises:
            UnsupportedScheme: URL is not http(s)
            TransportError: the page itself could not be fetched
        """
        url = validate_url(url)
        html = self._fetch_page(url)
        return self.extract_from_html(html, base_url=url, url=url)

    async def extract_from_url_async(self, url: str) -> Optional[PaletteData]:
        """extract_from_url() for async callers.

        Cancelling the awaiting task abandons pending stylesheet fetches;
        nothing is kept between calls.
        """
        url = validate_url(url)
        html = await asyncio.to_thread(self._fetch_page, url)
        css_texts = await self.collector.collect_async(html, url, self.fetch_text)
        return self.build_palette(css_texts, url)

    def extract_from_html(self, html: str, base_url: str, url: Optional[str] = None) -> Optional[PaletteData]:
        """Extract from an already fetched document (linked sheets are still fetched)."""
        css_texts = self.collector.collect(html, base_url, self.fetch_text)
        return self.build_palette(css_texts, url or base_url)

    def build_palette(self, css_texts: Sequence[str], url: str) -> Optional[PaletteData]:
        """Candidate scan -> normalization -> assembly -> PaletteData."""
        candidates = CandidateExtractor(self.normalizer).extract(css_texts)
        assembler = PaletteAssembler(
            self.normalizer,
            fallback=self.config.fallback,
            include_extras=self.config.include_extras,
        )
        palette = assembler.assemble(candidates)

        if palette is None:
            logger.info("No colors found for %s", url)
            return None

        colors = tuple(
            PaletteColor(name, color_formats(color, self.config.oklch_mode))
            for name, color in palette.items()
        )
        logger.info("Extracted %d colors from %s (%d candidates)", len(colors), url, len(candidates))
        return PaletteData(url=url, colors=colors)

    def _fetch_page(self, url: str) -> str:
        try:
            status_code, body = self.fetch_text(url, dict(PAGE_HEADERS))
        except (requests.RequestException, OSError) as e:
            logger.error("Failed to fetch %s: %s", url, e)
            raise TransportError() from e

        if status_code in BLOCKED_STATUS_CODES:
            logger.error("Access to %s blocked (HTTP %s)", url, status_code)
            raise AccessBlocked(status_code)
        if not 200 <= status_code < 300:
            logger.error("Failed to fetch %s: HTTP %s", url, status_code)
            raise TransportError(status_code)

        return body


def extract_palette(url: str, config: Optional[ExtractorConfig] = None,
                    fetch_text: Optional[FetchText] = None) -> Optional[PaletteData]:
    """One-shot helper around ColorExtractor.extract_from_url()."""
    with ColorExtractor(config=config, fetch_text=fetch_text) as extractor:
        return extractor.extract_from_url(url)
