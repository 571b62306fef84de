import re

from .constants import STRAND
from .error import MismatchedReferenceError, NotSpecifiedError, ParseError
from .util import natural_sort_key

WHOLE_REFERENCE = -1
""":class:`int`: start/end sentinel for a span covering an entire reference"""

_STRAND_RANK = {STRAND.POS: 0, STRAND.NEG: 1, STRAND.NS: 2}


class GenomeSpan:
    """
    A stranded genomic interval. Coordinates are 0-based and half-open, [start, end)
    """

    def __init__(self, ref, start, end=None, strand=STRAND.NS):
        """
        Args:
            ref (str): the reference/chromosome name
            start (int): the first base of the span (0-based)
            end (int): the position after the last base of the span. Defaults to a single base span
            strand (STRAND): the strand of the span

        Raises:
            AttributeError: the start is after the end or the strand is not a valid strand value
        """
        self.ref = str(ref)
        self.start = int(start)
        self.end = self.start + 1 if end is None else int(end)
        self.strand = STRAND.enforce(strand)
        if self.start == WHOLE_REFERENCE:
            self.end = WHOLE_REFERENCE
        elif self.start < 0 or self.start > self.end:
            raise AttributeError('invalid span. start must be >= 0 and <= end', self.ref, self.start, self.end)

    @classmethod
    def whole(cls, ref, strand=STRAND.NS):
        """
        span covering the entire reference, for annotations with no coordinates
        """
        return cls(ref, WHOLE_REFERENCE, WHOLE_REFERENCE, strand)

    @classmethod
    def parse(cls, string, strand=STRAND.NS, zero_based=False):
        """
        parse a span from its text representation

        Args:
            string (str): ref:start-end or ref:pos
            strand (STRAND): strand to assign to the resulting span
            zero_based (bool): the input start is already 0-based (it is 1-based by default)

        Raises:
            ParseError: the string is not a valid span

        Example:
            >>> GenomeSpan.parse('chr1:100-200')
            GenomeSpan(chr1:99-200)
            >>> GenomeSpan.parse('chr1:100')
            GenomeSpan(chr1:99-100)
        """
        match = re.match(r'^(?P<ref>[^:]+):(?P<start>\d+)(-(?P<end>\d+))?$', string.strip().replace(',', ''))
        if not match:
            raise ParseError('not a valid genomic span: {}'.format(repr(string)))
        start = int(match.group('start'))
        if not zero_based:
            start -= 1
        if match.group('end') is None:
            return cls(match.group('ref'), start, start + 1, strand)
        end = int(match.group('end'))
        if end < start or start < 0:
            raise ParseError('not a valid genomic span: {}'.format(repr(string)))
        return cls(match.group('ref'), start, end, strand)

    @property
    def is_whole_reference(self):
        return self.start == WHOLE_REFERENCE

    def __len__(self):
        if self.is_whole_reference:
            raise NotSpecifiedError('cannot compute the length of a whole-reference span', self)
        return self.end - self.start

    def with_strand(self, strand):
        """
        Returns:
            GenomeSpan: a copy of the current span on the given strand
        """
        return GenomeSpan(self.ref, self.start, self.end, strand)

    def start_pos(self):
        """
        Returns:
            GenomeSpan: a single base span at the start (lowest position) of this span
        """
        return GenomeSpan(self.ref, self.start, self.start + 1, self.strand)

    def end_pos(self):
        """
        Returns:
            GenomeSpan: a single base span at the end (highest position) of this span
        """
        return GenomeSpan(self.ref, self.end - 1, self.end, self.strand)

    def _strand_compatible(self, other):
        return STRAND.compare(self.strand, other.strand)

    def _test(self, other, only_within):
        if self.ref != other.ref or not self._strand_compatible(other):
            return False
        if self.is_whole_reference:
            return True
        if other.is_whole_reference:
            return not only_within

        start_within = self.start <= other.start < self.end
        end_within = self.start < other.end <= self.end
        if only_within:
            return start_within and end_within
        if start_within or end_within:
            return True
        # the other span covers all of this span
        return other.start <= self.start <= other.end and other.start <= self.end <= other.end

    def overlaps(self, other):
        """
        checks if two spans have any portion of their ranges in common on the same reference and a compatible strand

        Example:
            >>> GenomeSpan('chr1', 100, 200).overlaps(GenomeSpan('chr1', 199, 300))
            True
            >>> GenomeSpan('chr1', 100, 200).overlaps(GenomeSpan('chr1', 200, 300))
            False
        """
        return self._test(other, False)

    def contains(self, other):
        """
        checks if the other span lies entirely within the current span

        Example:
            >>> GenomeSpan('chr1', 100, 200).contains(GenomeSpan('chr1', 150, 200))
            True
        """
        return self._test(other, True)

    def key(self):
        """
        deterministic sort key (natural reference order, start, end, strand)
        """
        return (natural_sort_key(self.ref), self.start, self.end, _STRAND_RANK[self.strand])

    def compare(self, other):
        """
        Returns:
            int: negative if this span sorts before the other, positive if after and 0 when equal.
            An unspecified strand compares equal to either strand
        """
        if self.ref != other.ref:
            return -1 if natural_sort_key(self.ref) < natural_sort_key(other.ref) else 1
        if self.start != other.start:
            return -1 if self.start < other.start else 1
        if self.end != other.end:
            return -1 if self.end < other.end else 1
        if STRAND.NS in [self.strand, other.strand] or self.strand == other.strand:
            return 0
        return -1 if self.strand == STRAND.POS else 1

    def __lt__(self, other):
        return self.compare(other) < 0

    def __le__(self, other):
        return self.compare(other) <= 0

    def __gt__(self, other):
        return self.compare(other) > 0

    def __ge__(self, other):
        return self.compare(other) >= 0

    def __eq__(self, other):
        if not isinstance(other, GenomeSpan):
            return NotImplemented
        return (self.ref, self.start, self.end, self.strand) == (other.ref, other.start, other.end, other.strand)

    def __hash__(self):
        return hash((self.ref, self.start, self.end, self.strand))

    def distance_to(self, other):
        """
        signed distance between two spans. Negative when this span is upstream (lower coordinates) of the other,
        positive when downstream and 0 when they overlap

        Raises:
            MismatchedReferenceError: the spans are on different references

        Example:
            >>> GenomeSpan('chr1', 0, 4).distance_to(GenomeSpan('chr1', 5, 7))
            -2
            >>> GenomeSpan('chr1', 5, 7).distance_to(GenomeSpan('chr1', 0, 4))
            2
        """
        if self.ref != other.ref:
            raise MismatchedReferenceError(
                'cannot compute the distance between spans on different references', self, other
            )
        if self.is_whole_reference or other.is_whole_reference:
            return 0
        if self.with_strand(STRAND.NS).overlaps(other.with_strand(STRAND.NS)):
            return 0
        if self.end <= other.start:
            return self.end - 1 - other.start
        return self.start - (other.end - 1)

    def extend5(self, length):
        """
        grow the span in the 5' direction, upstream on the current strand

        Returns:
            GenomeSpan: the extended span
        """
        if self.strand == STRAND.NEG:
            return GenomeSpan(self.ref, self.start, self.end + length, self.strand)
        return GenomeSpan(self.ref, max(0, self.start - length), self.end, self.strand)

    def extend3(self, length):
        """
        grow the span in the 3' direction, downstream on the current strand

        Returns:
            GenomeSpan: the extended span
        """
        if self.strand == STRAND.NEG:
            return GenomeSpan(self.ref, max(0, self.start - length), self.end, self.strand)
        return GenomeSpan(self.ref, self.start, self.end + length, self.strand)

    def combine(self, other):
        """
        the smallest span covering both spans. The strand is unspecified unless both spans share it

        Raises:
            MismatchedReferenceError: the spans are on different references
        """
        if self.ref != other.ref:
            raise MismatchedReferenceError('cannot combine spans on different references', self, other)
        strand = self.strand if self.strand == other.strand else STRAND.NS
        if self.is_whole_reference or other.is_whole_reference:
            return GenomeSpan.whole(self.ref, strand)
        return GenomeSpan(self.ref, min(self.start, other.start), max(self.end, other.end), strand)

    def to_string(self, one_based_start=False):
        start = self.start + (1 if one_based_start and not self.is_whole_reference else 0)
        prefix = self.ref if self.strand == STRAND.NS else self.ref + self.strand
        if self.is_whole_reference:
            return prefix
        if self.start == self.end:
            return '{}:{}'.format(prefix, start)
        return '{}:{}-{}'.format(prefix, start, self.end)

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, self.to_string())
