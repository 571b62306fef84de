"""
binned spatial index associating arbitrary annotation values with genomic spans
"""
from collections import namedtuple

from .config import DEFAULTS


RefBin = namedtuple('RefBin', ['ref', 'bin'])
"""
an index key. Positions are grouped into fixed-width bins per reference
"""

Annotation = namedtuple('Annotation', ['coord', 'value'])
"""
a value stored in the index along with the span it covers
"""


class IntervalIndex:
    """
    Stores annotations in fixed-width bins per reference. Each bin holds a start-sorted list so that
    scanning a bin can stop at the first annotation beginning after the query

    Example:
        >>> index = IntervalIndex(annotation_names=['name'])
        >>> index.add(GenomeSpan('chr1', 1000, 2000, '+'), 'foo')
        >>> index.find(GenomeSpan('chr1', 1500))
        ['foo']
    """

    def __init__(self, annotation_names=None, bin_size=None):
        """
        Args:
            annotation_names (List[str]): the names of the fields provided by the values in this index
            bin_size (int): the width of the bins, defaults to the configured bin_size
        """
        self.annotation_names = list(annotation_names or [])
        self.bin_size = int(bin_size if bin_size is not None else DEFAULTS.bin_size)
        if self.bin_size <= 0:
            raise AttributeError('bin_size must be a positive integer', self.bin_size)
        self._bins = {}
        self._whole = {}  # annotations spanning an entire reference, by reference name
        self._annotations = []
        self._dirty = False

    def get_bins(self, coord):
        """
        Returns:
            List[RefBin]: the bins overlapped by a given span (inclusive of the bin holding the end position)
        """
        return [RefBin(coord.ref, i) for i in range(coord.start // self.bin_size, coord.end // self.bin_size + 1)]

    def add(self, coord, value):
        """
        add an annotation to the index. Bins are sorted lazily before the next query

        Args:
            coord (GenomeSpan): the span the value covers
            value: the annotation value
        """
        annotation = Annotation(coord, value)
        if coord.is_whole_reference:
            self._whole.setdefault(coord.ref, []).append(annotation)
        else:
            for refbin in self.get_bins(coord):
                self._bins.setdefault(refbin, []).append(annotation)
        self._annotations.append(annotation)
        self._dirty = True

    def discard(self, predicate):
        """
        remove every annotation whose value matches a given predicate

        Returns:
            int: the number of annotations removed
        """
        def keep(annotations):
            return [a for a in annotations if not predicate(a.value)]

        before = len(self._annotations)
        self._annotations = keep(self._annotations)
        for key in list(self._bins):
            self._bins[key] = keep(self._bins[key])
            if not self._bins[key]:
                del self._bins[key]
        for ref in list(self._whole):
            self._whole[ref] = keep(self._whole[ref])
            if not self._whole[ref]:
                del self._whole[ref]
        return before - len(self._annotations)

    def freeze(self):
        """
        sort every bin by position. Called automatically on the first query after a modification
        """
        if not self._dirty:
            return
        for annotations in self._bins.values():
            annotations.sort(key=lambda a: a.coord.key())
        for annotations in self._whole.values():
            annotations.sort(key=lambda a: a.coord.key())
        self._annotations.sort(key=lambda a: a.coord.key())
        self._dirty = False

    def _candidate_bins(self, query):
        if query.is_whole_reference:
            return sorted([b for b in self._bins if b.ref == query.ref], key=lambda b: b.bin)
        return [b for b in self.get_bins(query) if b in self._bins]

    def _test(self, annotation, query, only_within):
        if only_within:
            return annotation.coord.contains(query)
        return annotation.coord.overlaps(query)

    def _iter_matches(self, query, only_within):
        self.freeze()
        seen = set()
        for annotation in self._whole.get(query.ref, []):
            if self._test(annotation, query, only_within):
                seen.add(id(annotation))
                yield annotation
        for refbin in self._candidate_bins(query):
            for annotation in self._bins[refbin]:
                if not query.is_whole_reference and annotation.coord.start > query.end:
                    break
                if id(annotation) in seen:
                    continue
                if self._test(annotation, query, only_within):
                    seen.add(id(annotation))
                    yield annotation

    def find_annotations(self, query, only_within=False):
        """
        Returns:
            List[Annotation]: the annotations matching a query span, in the order they were found
        """
        return list(self._iter_matches(query, only_within))

    def find(self, query, only_within=False):
        """
        find the values of all annotations overlapping a query span

        Args:
            query (GenomeSpan): the span to search for
            only_within (bool): require the annotation to contain the query rather than just overlap it

        Returns:
            list: the de-duplicated annotation values
        """
        return [a.value for a in self._iter_matches(query, only_within)]

    def has(self, query, only_within=False):
        """
        Returns:
            bool: True if any annotation matches the query span
        """
        for _ in self._iter_matches(query, only_within):
            return True
        return False

    def provides(self, key):
        """
        Returns:
            bool: True if the values of this index supply the given annotation field
        """
        return key in self.annotation_names

    def size(self):
        return len(self._annotations)

    def __len__(self):
        return self.size()

    def __iter__(self):
        self.freeze()
        return iter(list(self._annotations))

    def regions(self):
        """
        Returns:
            Iterator[GenomeSpan]: the spans of all annotations in sorted order
        """
        return (a.coord for a in self)

    def references(self):
        """
        Returns:
            Set[str]: reference names with at least one annotation
        """
        return {b.ref for b in self._bins}.union(self._whole)

    def __repr__(self):
        return '{}(size={}, bin_size={})'.format(self.__class__.__name__, self.size(), self.bin_size)
