"""Collect raw CSS text from an HTML document and its linked stylesheets."""
import asyncio
import html as html_lib
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from extractors.transport import FetchText, STYLESHEET_HEADERS
from utils.errors import TransportError

logger = logging.getLogger(__name__)

# Failures of one stylesheet fetch that only cost us that sheet
FETCH_ERRORS = (requests.RequestException, TransportError, OSError)


@dataclass
class DocumentStyles:
    """Style sources found in a document, each list in document order."""
    style_blocks: List[str] = field(default_factory=list)
    stylesheet_hrefs: List[str] = field(default_factory=list)
    inline_styles: List[str] = field(default_factory=list)


class SoupScan:
    """Find style sources by walking the parsed document."""

    name = 'soup'

    def scan(self, html: str) -> DocumentStyles:
        soup = BeautifulSoup(html, 'html.parser')
        styles = DocumentStyles()

        for style_tag in soup.find_all('style'):
            text = style_tag.get_text()
            if text.strip():
                styles.style_blocks.append(text)

        for link in soup.find_all('link', href=True):
            rel = link.get('rel') or []
            if isinstance(rel, str):
                rel = rel.split()
            if 'stylesheet' in (r.lower() for r in rel):
                styles.stylesheet_hrefs.append(link['href'].strip())

        for elem in soup.find_all(style=True):
            if 'color' in elem['style'].lower():
                styles.inline_styles.append(elem['style'])

        return styles


class RegexScan:
    """Find style sources with regular expressions over the raw markup."""

    name = 'regex'

    STYLE_BLOCK_PATTERN = re.compile(r'<style\b[^>]*>(.*?)</style\s*>', re.I | re.S)
    LINK_TAG_PATTERN = re.compile(r'<link\b[^>]*>', re.I)
    ATTRIBUTE_PATTERN = re.compile(
        r'([\w:-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|([^\s"\'>]+))'
    )
    INLINE_STYLE_PATTERN = re.compile(
        r'<[a-z][^>]*?\sstyle\s*=\s*(?:"([^"]*)"|\'([^\']*)\')', re.I
    )

    def _attributes(self, tag: str) -> dict:
        attrs = {}
        for match in self.ATTRIBUTE_PATTERN.finditer(tag):
            name = match.group(1).lower()
            value = next((g for g in match.groups()[1:] if g is not None), '')
            attrs.setdefault(name, html_lib.unescape(value))
        return attrs

    def scan(self, html: str) -> DocumentStyles:
        styles = DocumentStyles()

        for match in self.STYLE_BLOCK_PATTERN.finditer(html):
            if match.group(1).strip():
                styles.style_blocks.append(match.group(1))

        for match in self.LINK_TAG_PATTERN.finditer(html):
            attrs = self._attributes(match.group(0))
            rel = attrs.get('rel', '').lower().split()
            if 'stylesheet' in rel and attrs.get('href'):
                styles.stylesheet_hrefs.append(attrs['href'].strip())

        # Style blocks can't carry attributes, but their text could fool the pattern
        markup = self.STYLE_BLOCK_PATTERN.sub('', html)
        for match in self.INLINE_STYLE_PATTERN.finditer(markup):
            value = html_lib.unescape(match.group(1) if match.group(1) is not None else match.group(2))
            if 'color' in value.lower():
                styles.inline_styles.append(value)

        return styles


SCANS = {
    'soup': SoupScan,
    'regex': RegexScan,
}


def get_scan_strategy(name: str):
    """Instantiate a scan strategy by name."""
    try:
        return SCANS[name]()
    except KeyError:
        raise ValueError(f"Unknown scan strategy '{name}'") from None


class StyleCollector:
    """Gather every CSS text a page uses, highest-confidence sources first.

    Output order: <style> bodies, linked stylesheets (document order),
    then inline style="" values that mention a color.
    """

    def __init__(self, scan=None, include_inline_styles: bool = True,
                 max_stylesheets: Optional[int] = None, max_workers: int = 8):
        self.scan = scan or SoupScan()
        self.include_inline_styles = include_inline_styles
        self.max_stylesheets = max_stylesheets
        self.max_workers = max_workers

    def stylesheet_urls(self, styles: DocumentStyles, base_url: str) -> List[str]:
        """Absolute, de-duplicated http(s) stylesheet URLs in document order."""
        urls = []
        for href in styles.stylesheet_hrefs:
            url = urljoin(base_url, href)
            if urlparse(url).scheme not in ('http', 'https'):
                logger.debug("Skipping non-http stylesheet %s", url)
                continue
            if url not in urls:
                urls.append(url)

        if self.max_stylesheets is not None:
            urls = urls[:self.max_stylesheets]
        return urls

    def collect(self, html: str, base_url: str, fetch_text: FetchText) -> List[str]:
        """Collect CSS texts, fetching linked sheets concurrently in threads."""
        styles = self.scan.scan(html)
        urls = self.stylesheet_urls(styles, base_url)

        sheets = []
        if urls:
            workers = min(self.max_workers, len(urls))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                # map() yields in submission order, i.e. document order
                sheets = list(pool.map(lambda url: self._fetch_stylesheet(url, fetch_text), urls))

        return self._combine(styles, sheets)

    async def collect_async(self, html: str, base_url: str, fetch_text: FetchText) -> List[str]:
        """Same as collect(), one worker thread per sheet; cancellable."""
        styles = self.scan.scan(html)
        urls = self.stylesheet_urls(styles, base_url)

        sheets = await asyncio.gather(*(
            asyncio.to_thread(self._fetch_stylesheet, url, fetch_text) for url in urls
        ))

        return self._combine(styles, list(sheets))

    def _fetch_stylesheet(self, url: str, fetch_text: FetchText) -> Optional[str]:
        """Fetch one sheet; any failure is logged and yields None."""
        try:
            status_code, body = fetch_text(url, dict(STYLESHEET_HEADERS))
        except FETCH_ERRORS as e:
            logger.warning("Skipping stylesheet %s: %s", url, e)
            return None

        if not 200 <= status_code < 300:
            logger.warning("Skipping stylesheet %s: HTTP %s", url, status_code)
            return None

        logger.debug("Fetched stylesheet %s (%d chars)", url, len(body))
        return body

    def _combine(self, styles: DocumentStyles, sheets: List[Optional[str]]) -> List[str]:
        css_parts = list(styles.style_blocks)
        css_parts.extend(sheet for sheet in sheets if sheet)
        if self.include_inline_styles:
            css_parts.extend(styles.inline_styles)
        return css_parts
