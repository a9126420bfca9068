"""
Tests for the name normalization policies.
"""

import unittest

from extractors.normalizer import (
    AllowListNormalizer, DESIGN_TOKEN_NAMES, PatternNormalizer, clean_name,
    get_normalizer,
)


class TestPatternNormalizer(unittest.TestCase):

    def setUp(self):
        self.normalizer = PatternNormalizer()

    def test_synonyms_map_onto_roles(self):
        cases = {
            '--primary': 'primary',
            '--brand-blue': 'primary',
            'main-color': 'primary',
            '--secondary': 'secondary',
            '--accent-1': 'secondary',
            '--accent-2': 'accent',
            'highlight': 'accent',
            'background': 'background',
            '--bg-page': 'background',
            '--surface': 'background',
            'foreground': 'text',
            '--font-color': 'text',
            '--fg': 'text',
            '--gray-500': 'neutral',
            '--Grey': 'neutral',
        }
        for raw, role in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(self.normalizer.normalize(raw), role)

    def test_role_order_decides_ties(self):
        # primary is checked before text
        self.assertEqual(self.normalizer.normalize('--text-primary'), 'primary')
        self.assertEqual(self.normalizer.normalize('--sidebar-background'), 'background')

    def test_unknown_names_pass_through(self):
        self.assertEqual(self.normalizer.normalize('--border'), 'border')
        self.assertEqual(self.normalizer.normalize('ring'), 'ring')

    def test_empty_name(self):
        self.assertIsNone(self.normalizer.normalize('--'))
        self.assertIsNone(self.normalizer.normalize('  '))

    def test_only_required_roles_count(self):
        self.assertTrue(self.normalizer.counts_toward_threshold('primary'))
        self.assertFalse(self.normalizer.counts_toward_threshold('border'))
        self.assertTrue(self.normalizer.guarantees_completion)


class TestAllowListNormalizer(unittest.TestCase):

    def test_default_vocabulary(self):
        normalizer = AllowListNormalizer()
        self.assertEqual(normalizer.normalize('--primary'), 'primary')
        self.assertEqual(normalizer.normalize('--Muted-Foreground'), 'muted-foreground')
        self.assertEqual(normalizer.normalize('chart-3'), 'chart-3')
        self.assertIsNone(normalizer.normalize('--brand'))
        self.assertIsNone(normalizer.normalize('--gray-500'))
        self.assertFalse(normalizer.guarantees_completion)

    def test_custom_vocabulary(self):
        normalizer = AllowListNormalizer(['Brand', 'ink'])
        self.assertEqual(normalizer.normalize('--brand'), 'brand')
        self.assertIsNone(normalizer.normalize('--primary'))

    def test_every_allowed_name_counts(self):
        normalizer = AllowListNormalizer()
        self.assertTrue(normalizer.counts_toward_threshold('card'))

    def test_vocabulary_covers_roles_used_by_token_systems(self):
        for name in ('background', 'foreground', 'primary', 'secondary', 'accent', 'border'):
            self.assertIn(name, DESIGN_TOKEN_NAMES)


class TestHelpers(unittest.TestCase):

    def test_clean_name(self):
        self.assertEqual(clean_name('  --primary '), 'primary')
        self.assertEqual(clean_name('color'), 'color')

    def test_get_normalizer(self):
        self.assertIsInstance(get_normalizer('pattern'), PatternNormalizer)
        self.assertIsInstance(get_normalizer('allowlist'), AllowListNormalizer)
        with self.assertRaises(ValueError):
            get_normalizer('fuzzy')


if __name__ == "__main__":
    unittest.main()
