import functools
import random
import unittest

from genoannot.constants import STRAND
from genoannot.error import MismatchedReferenceError, NotSpecifiedError, ParseError
from genoannot.interval import GenomeSpan


def random_spans(rng, count, refs=('chr1',), strands=(STRAND.POS, STRAND.NEG, STRAND.NS), max_pos=200):
    spans = []
    for _ in range(count):
        start = rng.randint(0, max_pos)
        spans.append(GenomeSpan(rng.choice(refs), start, start + rng.randint(1, 50), rng.choice(strands)))
    return spans


class TestGenomeSpan(unittest.TestCase):

    def test___init__error(self):
        with self.assertRaises(AttributeError):
            GenomeSpan('chr1', 10, 5)
        with self.assertRaises(AttributeError):
            GenomeSpan('chr1', -2, 5)
        with self.assertRaises(KeyError):
            GenomeSpan('chr1', 1, 5, 'x')

    def test___init__single_base(self):
        span = GenomeSpan('chr1', 10)
        self.assertEqual(11, span.end)
        self.assertEqual(1, len(span))
        self.assertEqual(STRAND.NS, span.strand)

    def test_whole_reference(self):
        span = GenomeSpan.whole('chr1')
        self.assertTrue(span.is_whole_reference)
        self.assertEqual(-1, span.end)
        with self.assertRaises(NotSpecifiedError):
            len(span)
        self.assertTrue(span.overlaps(GenomeSpan('chr1', 100, 200)))
        self.assertTrue(span.contains(GenomeSpan('chr1', 100, 200)))
        self.assertTrue(GenomeSpan('chr1', 100, 200).overlaps(span))
        self.assertFalse(GenomeSpan('chr1', 100, 200).contains(span))
        self.assertFalse(span.overlaps(GenomeSpan('chr2', 100, 200)))

    def test_parse(self):
        self.assertEqual(GenomeSpan('chr1', 99, 200), GenomeSpan.parse('chr1:100-200'))
        self.assertEqual(GenomeSpan('chr1', 99, 100), GenomeSpan.parse('chr1:100'))
        self.assertEqual(GenomeSpan('chr1', 1000, 2000, '+'), GenomeSpan.parse('chr1:1,000-2,000', '+', True))
        with self.assertRaises(ParseError):
            GenomeSpan.parse('chr1')
        with self.assertRaises(ParseError):
            GenomeSpan.parse('chr1:200-100')

    def test_overlaps_half_open(self):
        span = GenomeSpan('chr1', 100, 200)
        self.assertTrue(span.overlaps(GenomeSpan('chr1', 199)))
        self.assertFalse(span.overlaps(GenomeSpan('chr1', 200)))
        self.assertTrue(span.overlaps(GenomeSpan('chr1', 100)))
        self.assertFalse(span.overlaps(GenomeSpan('chr1', 99)))
        self.assertFalse(span.overlaps(GenomeSpan('chr2', 150)))

    def test_overlaps_query_covers_span(self):
        inner = GenomeSpan('chr1', 100, 110)
        outer = GenomeSpan('chr1', 50, 500)
        self.assertTrue(inner.overlaps(outer))
        self.assertTrue(outer.overlaps(inner))
        self.assertFalse(inner.contains(outer))
        self.assertTrue(outer.contains(inner))

    def test_overlaps_strand(self):
        span = GenomeSpan('chr1', 100, 200, STRAND.POS)
        self.assertTrue(span.overlaps(GenomeSpan('chr1', 150, 151, STRAND.POS)))
        self.assertTrue(span.overlaps(GenomeSpan('chr1', 150, 151, STRAND.NS)))
        self.assertFalse(span.overlaps(GenomeSpan('chr1', 150, 151, STRAND.NEG)))
        self.assertTrue(GenomeSpan('chr1', 100, 200).overlaps(GenomeSpan('chr1', 150, 151, STRAND.NEG)))

    def test_overlaps_is_symmetric(self):
        rng = random.Random(1)
        spans = random_spans(rng, 60)
        for first in spans:
            for second in spans:
                self.assertEqual(first.overlaps(second), second.overlaps(first), (first, second))

    def test_contains_implies_overlaps(self):
        rng = random.Random(2)
        spans = random_spans(rng, 60) + [GenomeSpan.whole('chr1'), GenomeSpan.whole('chr1', STRAND.POS)]
        for first in spans:
            for second in spans:
                if first.contains(second):
                    self.assertTrue(first.overlaps(second), (first, second))

    def test_compare(self):
        self.assertTrue(GenomeSpan('chr2', 500) < GenomeSpan('chr10', 1))
        self.assertTrue(GenomeSpan('chr1', 5, 10) < GenomeSpan('chr1', 5, 11))
        self.assertTrue(GenomeSpan('chr1', 5, 10, '+') < GenomeSpan('chr1', 5, 10, '-'))
        self.assertEqual(0, GenomeSpan('chr1', 5, 10, '?').compare(GenomeSpan('chr1', 5, 10, '-')))
        self.assertNotEqual(GenomeSpan('chr1', 5, 10, '+'), GenomeSpan('chr1', 5, 10, '-'))

    def test_compare_total_order(self):
        rng = random.Random(3)
        spans = random_spans(rng, 100, refs=('chr1', 'chr2', 'chr10', 'chrX'), strands=(STRAND.POS, STRAND.NEG))
        by_compare = sorted(spans, key=functools.cmp_to_key(lambda a, b: a.compare(b)))
        by_key = sorted(spans, key=lambda s: s.key())
        self.assertEqual([s.key() for s in by_key], [s.key() for s in by_compare])
        for first in spans:
            for second in spans:
                self.assertEqual(first.compare(second), -1 * second.compare(first))
                if first.compare(second) == 0:
                    self.assertEqual(first, second)

    def test_distance_to(self):
        self.assertEqual(-2, GenomeSpan('chr1', 0, 4).distance_to(GenomeSpan('chr1', 5, 7)))
        self.assertEqual(2, GenomeSpan('chr1', 5, 7).distance_to(GenomeSpan('chr1', 0, 4)))
        self.assertEqual(0, GenomeSpan('chr1', 0, 10, '+').distance_to(GenomeSpan('chr1', 5, 7, '-')))
        with self.assertRaises(MismatchedReferenceError):
            GenomeSpan('chr1', 0, 4).distance_to(GenomeSpan('chr2', 5, 7))

    def test_extend(self):
        pos = GenomeSpan('chr1', 100, 200, STRAND.POS)
        self.assertEqual(GenomeSpan('chr1', 90, 200, STRAND.POS), pos.extend5(10))
        self.assertEqual(GenomeSpan('chr1', 100, 210, STRAND.POS), pos.extend3(10))
        neg = GenomeSpan('chr1', 100, 200, STRAND.NEG)
        self.assertEqual(GenomeSpan('chr1', 100, 210, STRAND.NEG), neg.extend5(10))
        self.assertEqual(GenomeSpan('chr1', 90, 200, STRAND.NEG), neg.extend3(10))
        self.assertEqual(0, GenomeSpan('chr1', 5, 10).extend5(20).start)

    def test_combine(self):
        combined = GenomeSpan('chr1', 100, 200, '+').combine(GenomeSpan('chr1', 300, 400, '+'))
        self.assertEqual(GenomeSpan('chr1', 100, 400, '+'), combined)
        combined = GenomeSpan('chr1', 100, 200, '+').combine(GenomeSpan('chr1', 150, 160, '-'))
        self.assertEqual(GenomeSpan('chr1', 100, 200, '?'), combined)
        with self.assertRaises(MismatchedReferenceError):
            GenomeSpan('chr1', 100, 200).combine(GenomeSpan('chr2', 100, 200))

    def test_to_string(self):
        self.assertEqual('chr1:99-200', str(GenomeSpan('chr1', 99, 200)))
        self.assertEqual('chr1+:100-200', GenomeSpan('chr1', 99, 200, '+').to_string(one_based_start=True))
        self.assertEqual('chr1', str(GenomeSpan.whole('chr1')))
