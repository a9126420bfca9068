#!/usr/bin/env python3
"""Palette Extractor - Pull a semantic color palette out of any website.

Reads a page's <style> blocks, linked stylesheets and inline styles, maps CSS
variables and declarations onto primary / secondary / accent / background /
text / neutral, and prints the palette in the requested export format.

Usage:
    python palette_extract.py https://example.com
    python palette_extract.py https://example.com --format css
    python palette_extract.py https://example.com --policy allowlist --format json
    python palette_extract.py https://example.com --swatch ./palette.png -v
"""
import argparse
import sys
from pathlib import Path

from extractors.color_extractor import ColorExtractor
from generators.export_generator import EXPORT_FORMATS, export_palette
from generators.swatch_generator import SwatchGenerator
from models.palette import (
    ExtractorConfig, FALLBACK_STRATEGIES, NORMALIZATION_POLICIES, OKLCH_MODES,
    SCAN_STRATEGIES,
)
from utils.errors import PaletteExtractionError
from utils.logger import setup_logger

EXIT_ERROR = 1
EXIT_NO_PALETTE = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Extract a semantic color palette from a website URL',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s https://example.com                       # table of all formats
  %(prog)s https://example.com --format tailwind     # tailwind.config.js
  %(prog)s https://example.com --policy allowlist    # design-token names only
  %(prog)s https://example.com --oklch exact         # true OKLab conversion

Policies:
  pattern   - keyword matching onto the six roles, always complete
  allowlist - recognized design-token names only, may find nothing
        '''
    )

    parser.add_argument(
        'url',
        help='Website URL to analyze'
    )

    parser.add_argument(
        '-f', '--format',
        choices=list(EXPORT_FORMATS.keys()),
        default='table',
        help='Output format (default: table)'
    )

    parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Write the export to this file instead of stdout'
    )

    parser.add_argument(
        '--swatch',
        type=Path,
        help='Also render a PNG swatch sheet to this path'
    )

    parser.add_argument(
        '--policy',
        choices=list(NORMALIZATION_POLICIES.keys()),
        default='pattern',
        help='Name normalization policy (default: pattern)'
    )

    parser.add_argument(
        '--fallback',
        choices=list(FALLBACK_STRATEGIES.keys()),
        default='defaults',
        help='How missing roles are filled (default: defaults)'
    )

    parser.add_argument(
        '--oklch',
        choices=list(OKLCH_MODES.keys()),
        default='approximate',
        help='OKLCH conversion (default: approximate)'
    )

    parser.add_argument(
        '--scan',
        choices=list(SCAN_STRATEGIES.keys()),
        default='soup',
        help='How style sources are located in the HTML (default: soup)'
    )

    parser.add_argument(
        '--max-stylesheets', type=int, default=None,
        help='Fetch at most this many linked stylesheets'
    )
    parser.add_argument(
        '--no-inline-styles', action='store_true',
        help='Ignore style="" attributes'
    )
    parser.add_argument(
        '--no-extras', action='store_true',
        help='Only output the six semantic roles'
    )
    parser.add_argument(
        '--timeout', type=int, default=10,
        help='HTTP timeout in seconds (default: 10)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    return parser.parse_args(argv)


def build_config(args) -> ExtractorConfig:
    """Build ExtractorConfig from CLI arguments."""
    return ExtractorConfig(
        policy=args.policy,
        fallback=args.fallback,
        oklch_mode=args.oklch,
        scan=args.scan,
        include_inline_styles=not args.no_inline_styles,
        include_extras=not args.no_extras,
        max_stylesheets=args.max_stylesheets,
        timeout=args.timeout,
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    level = 'DEBUG' if args.verbose else 'WARNING'
    logger = setup_logger('palette_extract', level)
    setup_logger('extractors', level)

    try:
        config = build_config(args)
        if args.verbose:
            print(f"\n📊 Analyzing {args.url}...")
            print(f"  Policy: {config.policy}, fallback: {config.fallback}, oklch: {config.oklch_mode}")

        with ColorExtractor(config) as extractor:
            palette = extractor.extract_from_url(args.url)

        if palette is None:
            print("\n⚠️  No colors found in the website", file=sys.stderr)
            return EXIT_NO_PALETTE

        if args.verbose:
            print(f"  Found {len(palette.colors)} colors: {', '.join(palette.names)}")

        output = export_palette(palette, args.format)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output)
            print(f"\n✅ Palette written to {args.output.absolute()}")
        else:
            print(output)

        if args.swatch:
            path = SwatchGenerator(palette).save(args.swatch)
            print(f"🎨 Swatch: file://{path.absolute()}")

        return 0

    except KeyboardInterrupt:
        print("\n\nCancelled.")
        return EXIT_ERROR
    except (PaletteExtractionError, ValueError, OSError) as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        if args.verbose:
            logger.exception("Extraction failed")
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
