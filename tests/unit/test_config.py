import argparse
import os
import unittest
from unittest.mock import patch

from genoannot.config import DEFAULTS, CustomHelpFormatter, augment_parser, get_metavar
from genoannot.constants import cast_boolean
from genoannot.index import IntervalIndex
from genoannot.util import filepath


class TestDefaults(unittest.TestCase):

    def test_values(self):
        self.assertEqual(100000, DEFAULTS.bin_size)
        self.assertEqual(2, DEFAULTS.splice_window)
        self.assertEqual(['chrM', 'M'], DEFAULTS.mitochondrial_refs)
        self.assertFalse(DEFAULTS.strict)

    def test_environment_override(self):
        with patch.dict(os.environ, {'GENOANNOT_BIN_SIZE': '500'}):
            self.assertEqual(500, DEFAULTS.bin_size)
            self.assertEqual(500, IntervalIndex().bin_size)
        self.assertEqual(100000, DEFAULTS.bin_size)

    def test_environment_override_listable(self):
        with patch.dict(os.environ, {'GENOANNOT_MITOCHONDRIAL_REFS': 'chrMT;MT'}):
            self.assertEqual(['chrMT', 'MT'], DEFAULTS.mitochondrial_refs)

    def test_environment_override_boolean(self):
        with patch.dict(os.environ, {'GENOANNOT_STRICT': 'yes'}):
            self.assertTrue(DEFAULTS.strict)

    def test_define(self):
        self.assertIn('bin', DEFAULTS.define('bin_size'))
        self.assertEqual('none', DEFAULTS.define('not_a_setting', 'none'))


class TestAugmentParser(unittest.TestCase):

    def setUp(self):
        self.parser = argparse.ArgumentParser(formatter_class=CustomHelpFormatter)

    def test_settings(self):
        augment_parser(['bin_size', 'strict', 'required_tags'], self.parser)
        args = self.parser.parse_args(['--bin_size', '10', '--strict', 'f', '--required_tags', 'basic', 'CCDS'])
        self.assertEqual(10, args.bin_size)
        self.assertFalse(args.strict)
        self.assertEqual(['basic', 'CCDS'], args.required_tags)

    def test_defaults(self):
        augment_parser(['splice_window', 'log_level'], self.parser)
        args = self.parser.parse_args([])
        self.assertEqual(2, args.splice_window)
        self.assertEqual('INFO', args.log_level)

    def test_bad_value(self):
        augment_parser(['bin_size'], self.parser)
        with self.assertRaises(SystemExit):
            self.parser.parse_args(['--bin_size', 'ten'])

    def test_unknown_argument(self):
        with self.assertRaises(KeyError):
            augment_parser(['not_a_setting'], self.parser)

    def test_metavar(self):
        self.assertEqual('INT', get_metavar(int))
        self.assertEqual('{True,False}', get_metavar(cast_boolean))
        self.assertEqual('FILEPATH', get_metavar(filepath))
        self.assertIsNone(get_metavar(str))
