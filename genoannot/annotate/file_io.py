"""
module which holds all functions relating to loading reference and input files
"""
import re
from collections import namedtuple

import pysam
from Bio import SeqIO

from ..config import DEFAULTS
from ..constants import FEATURE, STRAND
from ..error import InvariantViolation, ParseError, SequenceFetchError
from ..index import IntervalIndex
from ..interval import GenomeSpan
from ..util import logger
from .genomic import Gene, GeneModel


Variant = namedtuple('Variant', ['chrom', 'pos', 'ref', 'alt'])
"""
a single REF/ALT pair. The position is 1-based as in the VCF
"""

BedRecord = namedtuple('BedRecord', ['ref', 'start', 'end', 'name', 'score', 'strand'])

RepeatAnnotation = namedtuple('RepeatAnnotation', ['coord', 'repeat', 'family'])

BED_ANNOTATION_NAMES = ['name', 'score']
REPEAT_ANNOTATION_NAMES = ['repeat', 'repeat_family']

_ATTRIBUTE_DELIM = re.compile(r';(?=(?:[^"]*"[^"]*")*[^"]*$)')


def _read_lines(source):
    """
    accept either a path to a file or an iterable of lines
    """
    if isinstance(source, str):
        with open(source, 'r') as fh:
            for line in fh:
                yield line
    else:
        for line in source:
            yield line


def parse_gtf_attributes(text, line_number=None):
    """
    parse the attributes column of a GTF record

    Args:
        text (str): the attributes column. Ex. gene_id "G1"; transcript_id "T1";
        line_number (int): the line being parsed, reported in errors

    Returns:
        List[Tuple[str,str]]: key, value pairs in the order given

    Raises:
        ParseError: an attribute is missing its value

    Example:
        >>> parse_gtf_attributes('gene_id "G1"; tag "basic"; tag "CCDS";')
        [('gene_id', 'G1'), ('tag', 'basic'), ('tag', 'CCDS')]
    """
    result = []
    for field in _ATTRIBUTE_DELIM.split(text):
        field = field.strip()
        if not field:
            continue
        parts = field.split(None, 1)
        if len(parts) != 2:
            raise ParseError('attribute is missing a value: {}'.format(repr(field)), line_number)
        result.append((parts[0], parts[1].strip().strip('"')))
    return result


def load_gtf(source, required_tags=None, strict=None, bin_size=None):
    """
    loads a gene model from a GTF file. Only exon, CDS, start_codon and stop_codon records are used.

    Genes are collected per chromosome block and added to the index when the reference name changes. The
    input is expected to be sorted by chromosome: a gene which reappears after its chromosome block has ended
    is reported and dropped (or raises when strict)

    Args:
        source (str or Iterable[str]): path to the GTF file or its lines
        required_tags (List[str]): records must be tagged with all of these to be loaded
        strict (bool): raise on a gene split across chromosome blocks instead of dropping it
        bin_size (int): bin size for the gene index

    Returns:
        GeneModel: the loaded genes

    Raises:
        ParseError: a line is malformed. No model is returned
        InvariantViolation: a gene was split across chromosome blocks and strict is set
    """
    required_tags = set(DEFAULTS.required_tags if required_tags is None else required_tags)
    strict = DEFAULTS.strict if strict is None else strict
    model = GeneModel(bin_size=bin_size)
    cache = {}
    flushed = set()
    dropped = set()
    last_ref = None

    def flush():
        for gene in cache.values():
            model.add_gene(gene)
            flushed.add((gene.ref, gene.gene_id))
        cache.clear()

    for line_number, line in enumerate(_read_lines(source), start=1):
        line = line.rstrip('\r\n')
        if not line.strip() or line.startswith('#'):
            continue
        cols = line.split('\t')
        if len(cols) < 9:
            raise ParseError('expected 9 tab-delimited columns but found {}'.format(len(cols)), line_number, line)
        chrom, feature = cols[0], cols[2]
        try:
            start = int(cols[3]) - 1
            end = int(cols[4])
        except ValueError:
            raise ParseError('non-integer coordinates: {} {}'.format(cols[3], cols[4]), line_number, line)
        if start < 0 or start > end:
            raise ParseError('invalid coordinates: {} {}'.format(cols[3], cols[4]), line_number, line)
        strand = STRAND.parse(cols[6])

        if chrom != last_ref:
            flush()
            last_ref = chrom

        gene_id = transcript_id = None
        gene_name = gene_str = biotype = status = None
        attributes = []
        for key, value in parse_gtf_attributes(cols[8], line_number):
            if key == 'gene_id':
                gene_id = value
            elif key == 'gene_name':
                gene_name = value
            elif key == 'gene':
                gene_str = value
            elif key == 'transcript_id':
                transcript_id = value
            elif key in ['gene_type', 'gene_biotype']:
                biotype = value
            elif key == 'gene_status':
                status = value
            else:
                attributes.append((key, value))

        if feature not in FEATURE.values():
            continue
        if gene_id is None or transcript_id is None:
            raise ParseError('{} record is missing gene_id or transcript_id'.format(feature), line_number, line)
        if not gene_name:
            gene_name = gene_str  # refseq uses gene instead of gene_name

        if required_tags:
            tags = {value for key, value in attributes if key == 'tag'}
            if not required_tags.issubset(tags):
                continue

        key = (chrom, gene_id)
        if key in dropped:
            continue
        if key in flushed:
            msg = 'gene {} reappears on {} after its chromosome block ended (line {}). The input must be sorted by ' \
                'chromosome'.format(gene_id, chrom, line_number)
            if strict:
                raise InvariantViolation(msg)
            logger.error(msg + '. Dropping the gene')
            model.remove_gene(chrom, gene_id)
            dropped.add(key)
            continue

        if gene_id not in cache:
            cache[gene_id] = Gene(gene_id, gene_name, chrom, start, end, strand, biotype=biotype, status=status)
        cache[gene_id].add_record(feature, transcript_id, start, end, attributes)
    flush()
    model.index.freeze()
    logger.info('loaded {} genes'.format(len(model)))
    return model


def load_bed(source, bin_size=None):
    """
    loads features from a BED file (0-based starts). Lines starting with #, track or browser are skipped

    Returns:
        IntervalIndex: index of BedRecord values

    Raises:
        ParseError: a line has non-integer coordinates
    """
    index = IntervalIndex(annotation_names=BED_ANNOTATION_NAMES, bin_size=bin_size)
    for line_number, line in enumerate(_read_lines(source), start=1):
        line = line.rstrip('\r\n')
        if not line.strip() or line.startswith('#') or line.startswith('track') or line.startswith('browser'):
            continue
        cols = line.split('\t')
        if len(cols) < 3:
            continue
        try:
            start, end = int(cols[1]), int(cols[2])
            score = float(cols[4]) if len(cols) > 4 and cols[4] not in ['', '.'] else 0
        except ValueError:
            raise ParseError('non-numeric column in bed record', line_number, line)
        strand = STRAND.parse(cols[5]) if len(cols) > 5 else STRAND.NS
        name = cols[3] if len(cols) > 3 else ''
        record = BedRecord(cols[0], start, end, name, score, strand)
        index.add(GenomeSpan(cols[0], start, end, strand), record)
    index.freeze()
    logger.info('loaded {} bed records'.format(len(index)))
    return index


def load_repeatmasker(source, bin_size=None):
    """
    loads repeats from a RepeatMasker .out file. The first three (header) lines are skipped

    Returns:
        IntervalIndex: index of RepeatAnnotation values
    """
    index = IntervalIndex(annotation_names=REPEAT_ANNOTATION_NAMES, bin_size=bin_size)
    for line_number, line in enumerate(_read_lines(source), start=1):
        if line_number <= 3 or not line.strip():
            continue
        cols = line.split()
        if len(cols) < 11:
            raise ParseError('expected at least 11 columns but found {}'.format(len(cols)), line_number, line)
        try:
            start, end = int(cols[5]) - 1, int(cols[6])
        except ValueError:
            raise ParseError('non-integer coordinates', line_number, line)
        strand = STRAND.NEG if cols[8] == 'C' else STRAND.parse(cols[8])
        coord = GenomeSpan(cols[4], start, end, strand)
        index.add(coord, RepeatAnnotation(coord, cols[9], cols[10]))
    index.freeze()
    logger.info('loaded {} repeats'.format(len(index)))
    return index


class SequenceSource:
    """
    random access to forward strand reference sequence. Coordinates are 0-based and half-open
    """

    def references(self):
        raise NotImplementedError('abstract method')

    def reference_length(self, ref):
        raise NotImplementedError('abstract method')

    def _fetch(self, ref, start, end):
        raise NotImplementedError('abstract method')

    def resolve_reference(self, ref):
        """
        find the name used by the source for a reference, allowing for a chr prefix mismatch

        Raises:
            SequenceFetchError: the reference does not exist
        """
        names = self.references()
        if ref in names:
            return ref
        alias = ref[3:] if ref.startswith('chr') else 'chr' + ref
        if alias in names:
            return alias
        raise SequenceFetchError('reference sequence not found', ref)

    def fetch(self, ref, start, end):
        """
        Returns:
            str: the uppercase forward strand bases in [start, end)

        Raises:
            SequenceFetchError: the reference does not exist or the range is outside of it
        """
        name = self.resolve_reference(ref)
        if start < 0 or end < start or end > self.reference_length(name):
            raise SequenceFetchError('requested range is outside the reference', ref, start, end)
        return self._fetch(name, start, end).upper()


class FastaSequenceSource(SequenceSource):
    """
    reads sequence from an indexed (faidx) fasta file
    """

    def __init__(self, filename):
        self.filename = filename
        self.fh = pysam.FastaFile(filename)

    def references(self):
        return self.fh.references

    def reference_length(self, ref):
        return self.fh.get_reference_length(ref)

    def _fetch(self, ref, start, end):
        return self.fh.fetch(ref, start, end)

    def close(self):
        self.fh.close()


class DictSequenceSource(SequenceSource):
    """
    sequence held in memory, keyed by reference name
    """

    def __init__(self, sequences):
        """
        Args:
            sequences (Dict[str,str or Bio.SeqRecord.SeqRecord]): sequence by reference name
        """
        self.sequences = {}
        for name, seq in sequences.items():
            self.sequences[name] = str(getattr(seq, 'seq', seq)).upper()

    def references(self):
        return list(self.sequences)

    def reference_length(self, ref):
        return len(self.sequences[ref])

    def _fetch(self, ref, start, end):
        return self.sequences[ref][start:end]


def load_reference_genome(*filepaths):
    """
    Args:
        filepaths (list of str): the paths to the files containing the input fasta genomes

    Returns:
        DictSequenceSource: the sequences in the fasta files

    Raises:
        KeyError: the same reference name is defined twice
    """
    reference_genome = {}
    for filename in filepaths:
        with open(filename, 'r') as fh:
            for chrom, seq in SeqIO.to_dict(SeqIO.parse(fh, 'fasta')).items():
                if chrom in reference_genome:
                    raise KeyError('Duplicate chromosome name', chrom, filename)
                reference_genome[chrom] = seq
    return DictSequenceSource(reference_genome)


def open_sequence_source(filename):
    """
    use the fasta index when one exists, otherwise load the fasta into memory
    """
    try:
        return FastaSequenceSource(filename)
    except (OSError, ValueError) as err:
        logger.warning('could not open {} as an indexed fasta ({}). Loading into memory'.format(filename, err))
        return load_reference_genome(filename)


def record_passes(record):
    """
    Returns:
        bool: True if the VCF record has no filters or only PASS
    """
    filters = list(record.filter.keys())
    return not filters or filters == ['PASS']


def read_variants(filename, passing_only=None):
    """
    read the REF/ALT pairs from a VCF file. Multi-allelic records are split into one variant per ALT allele.
    Symbolic alleles are skipped

    Args:
        filename (str): path to the VCF (or BCF) file
        passing_only (bool): skip records which fail a filter

    Yields:
        Variant: chrom, 1-based pos, ref, alt
    """
    passing_only = DEFAULTS.passing_only if passing_only is None else passing_only
    vfile = pysam.VariantFile(filename)
    try:
        for record in vfile:
            if passing_only and not record_passes(record):
                continue
            for alt in record.alts or []:
                if not re.match(r'^[ACGTNacgtn]+$', alt):
                    logger.debug('skipping symbolic allele {} at {}:{}'.format(alt, record.chrom, record.pos))
                    continue
                yield Variant(record.chrom, record.pos, record.ref.upper(), alt.upper())
    finally:
        vfile.close()
