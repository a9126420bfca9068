"""
Tests for HTML style discovery and stylesheet fetching.
"""

import asyncio
import threading
import time
import unittest

from extractors.style_collector import (
    RegexScan, SoupScan, StyleCollector, get_scan_strategy,
)
from fakes import FakeTransport

BASE = 'https://example.com/docs/'

PAGE = """<!doctype html>
<html>
<head>
  <link rel="stylesheet" href="/css/a.css">
  <link rel="icon" href="/favicon.ico">
  <style>:root { --primary: #0366d6; }</style>
  <link rel="preload stylesheet" href="b.css">
  <link href="https://cdn.example.net/c.css" rel="Stylesheet">
  <style>   </style>
</head>
<body>
  <div style="color: #24292e">hi</div>
  <p style="margin: 0">no color here</p>
  <span style='background-color: rgb(1, 2, 3)'>x</span>
</body>
</html>
"""

SHEETS = {
    'https://example.com/css/a.css': '.a { color: #aaaaaa; }',
    'https://example.com/docs/b.css': '.b { color: #bbbbbb; }',
    'https://cdn.example.net/c.css': '.c { color: #cccccc; }',
}


class ScanContract:
    """Shared expectations for every scan strategy."""

    scan = None

    def test_style_blocks(self):
        styles = self.scan.scan(PAGE)
        self.assertEqual(styles.style_blocks, [':root { --primary: #0366d6; }'])

    def test_stylesheet_links_in_document_order(self):
        styles = self.scan.scan(PAGE)
        self.assertEqual(
            styles.stylesheet_hrefs,
            ['/css/a.css', 'b.css', 'https://cdn.example.net/c.css'],
        )

    def test_inline_styles_mentioning_color(self):
        styles = self.scan.scan(PAGE)
        self.assertEqual(
            styles.inline_styles,
            ['color: #24292e', 'background-color: rgb(1, 2, 3)'],
        )

    def test_entities_in_attributes(self):
        styles = self.scan.scan('<div style="color: &#35;ff0000">x</div>')
        self.assertEqual(styles.inline_styles, ['color: #ff0000'])


class TestSoupScan(ScanContract, unittest.TestCase):
    scan = SoupScan()


class TestRegexScan(ScanContract, unittest.TestCase):
    scan = RegexScan()

    def test_style_text_is_not_mistaken_for_markup(self):
        html = '<style>/* <b style="color: red"> */ body { color: blue; }</style>'
        styles = self.scan.scan(html)
        self.assertEqual(styles.inline_styles, [])


class TestStylesheetUrls(unittest.TestCase):

    def test_resolve_dedupe_and_filter(self):
        collector = StyleCollector()
        styles = SoupScan().scan(
            '<link rel="stylesheet" href="a.css">'
            '<link rel="stylesheet" href="/docs/a.css">'
            '<link rel="stylesheet" href="data:text/css,body{}">'
            '<link rel="stylesheet" href="//cdn.example.net/x.css">'
        )
        self.assertEqual(
            collector.stylesheet_urls(styles, BASE),
            ['https://example.com/docs/a.css', 'https://cdn.example.net/x.css'],
        )

    def test_max_stylesheets(self):
        collector = StyleCollector(max_stylesheets=1)
        styles = SoupScan().scan(PAGE)
        self.assertEqual(collector.stylesheet_urls(styles, BASE), ['https://example.com/css/a.css'])

    def test_get_scan_strategy(self):
        self.assertIsInstance(get_scan_strategy('regex'), RegexScan)
        with self.assertRaises(ValueError):
            get_scan_strategy('xpath')


class SlowFirstTransport(FakeTransport):
    """Delays the first stylesheet so later ones finish before it."""

    def __call__(self, url, headers):
        if url.endswith('a.css'):
            time.sleep(0.2)
        return super().__call__(url, headers)


class TestCollect(unittest.TestCase):

    def test_combined_order(self):
        transport = FakeTransport(SHEETS)
        css = StyleCollector().collect(PAGE, BASE, transport)
        self.assertEqual(css, [
            ':root { --primary: #0366d6; }',
            '.a { color: #aaaaaa; }',
            '.b { color: #bbbbbb; }',
            '.c { color: #cccccc; }',
            'color: #24292e',
            'background-color: rgb(1, 2, 3)',
        ])

    def test_document_order_survives_out_of_order_completion(self):
        transport = SlowFirstTransport(SHEETS)
        css = StyleCollector().collect(PAGE, BASE, transport)
        self.assertEqual(css[1:4], [SHEETS[url] for url in SHEETS])
        self.assertEqual(transport.requested_urls()[-1], 'https://example.com/css/a.css')

    def test_stylesheet_accept_header(self):
        transport = FakeTransport(SHEETS)
        StyleCollector().collect(PAGE, BASE, transport)
        for _, headers in transport.requests:
            self.assertTrue(headers['Accept'].startswith('text/css'))

    def test_failed_sheets_are_skipped(self):
        transport = FakeTransport({
            'https://example.com/css/a.css': (404, 'not found'),
            'https://example.com/docs/b.css': '.b { color: #bbbbbb; }',
            # c.css is missing: the fake raises ConnectionError
        })
        with self.assertLogs('extractors.style_collector', level='WARNING') as logs:
            css = StyleCollector(include_inline_styles=False).collect(PAGE, BASE, transport)

        self.assertEqual(css, [':root { --primary: #0366d6; }', '.b { color: #bbbbbb; }'])
        self.assertEqual(len(logs.records), 2)
        self.assertTrue(any('HTTP 404' in line for line in logs.output))
        self.assertTrue(any('c.css' in line for line in logs.output))

    def test_empty_sheet_contributes_nothing(self):
        transport = FakeTransport(dict(SHEETS, **{'https://example.com/docs/b.css': ''}))
        css = StyleCollector(include_inline_styles=False).collect(PAGE, BASE, transport)
        self.assertEqual(len(css), 3)

    def test_page_without_links_makes_no_requests(self):
        transport = FakeTransport({})
        css = StyleCollector().collect('<style>a { color: red }</style>', BASE, transport)
        self.assertEqual(css, ['a { color: red }'])
        self.assertEqual(transport.requests, [])


class TestCollectAsync(unittest.TestCase):

    def test_same_result_as_sync(self):
        collector = StyleCollector()
        expected = collector.collect(PAGE, BASE, FakeTransport(SHEETS))
        actual = asyncio.run(collector.collect_async(PAGE, BASE, SlowFirstTransport(SHEETS)))
        self.assertEqual(actual, expected)

    def test_cancellation(self):
        release = threading.Event()

        def blocking_transport(url, headers):
            release.wait(5)
            return 200, ''

        async def run():
            task = asyncio.create_task(
                StyleCollector().collect_async(PAGE, BASE, blocking_transport)
            )
            await asyncio.sleep(0.05)
            task.cancel()
            try:
                with self.assertRaises(asyncio.CancelledError):
                    await task
            finally:
                # let the worker threads finish so the loop can shut down
                release.set()

        asyncio.run(run())


if __name__ == "__main__":
    unittest.main()
