import unittest

from genoannot.annotate.file_io import (
    FastaSequenceSource,
    Variant,
    load_bed,
    load_gtf,
    load_reference_genome,
    load_repeatmasker,
    open_sequence_source,
    read_variants,
)
from genoannot.constants import STRAND
from genoannot.error import SequenceFetchError
from genoannot.interval import GenomeSpan

from ..util import MOCK_CHR1, MOCK_CHR2, get_data


class TestSequenceSource(unittest.TestCase):

    def test_indexed_fasta(self):
        source = FastaSequenceSource(get_data('mock_reference.fa'))
        try:
            self.assertEqual(MOCK_CHR1[15:25], source.fetch('chr1', 15, 25))
            self.assertEqual(MOCK_CHR2, source.fetch('chr2', 0, 53))
            self.assertEqual(MOCK_CHR1[:5], source.fetch('1', 0, 5))
            with self.assertRaises(SequenceFetchError):
                source.fetch('chr1', 60, 100)
            with self.assertRaises(SequenceFetchError):
                source.fetch('chr3', 0, 1)
        finally:
            source.close()

    def test_load_reference_genome(self):
        source = load_reference_genome(get_data('mock_reference.fa'))
        self.assertEqual(['chr1', 'chr2'], sorted(source.references()))
        self.assertEqual(71, source.reference_length('chr1'))
        self.assertEqual(MOCK_CHR1[40:50], source.fetch('chr1', 40, 50))

    def test_load_reference_genome_duplicate(self):
        with self.assertRaises(KeyError):
            load_reference_genome(get_data('mock_reference.fa'), get_data('mock_reference.fa'))

    def test_open_sequence_source(self):
        source = open_sequence_source(get_data('mock_reference.fa'))
        self.assertIsInstance(source, FastaSequenceSource)
        self.assertEqual('ATG', source.fetch('chr1', 15, 18))


class TestLoadGtfFixture(unittest.TestCase):

    def setUp(self):
        self.model = load_gtf(get_data('mock_genes.gtf'))

    def test_genes(self):
        self.assertEqual(2, len(self.model))
        gene = self.model.get_gene('G1')
        self.assertEqual(
            ('GENE1', 'chr1', 10, 61, STRAND.POS), (gene.name, gene.ref, gene.start, gene.end, gene.strand)
        )
        self.assertEqual('protein_coding', gene.biotype)
        self.assertEqual(['T1', 'T1-NC'], [t.transcript_id for t in gene.get_transcripts()])
        self.assertEqual(['T1'], [t.transcript_id for t in gene.get_transcripts(coding_only=True)])
        self.assertEqual(['T1-NC'], [t.transcript_id for t in gene.get_transcripts(non_coding_only=True)])
        self.assertEqual([(10, 25), (10, 30), (45, 61)], [(e.start, e.end) for e in gene.exons()])

    def test_transcripts(self):
        transcript = self.model.get_transcript('T1')
        self.assertEqual('P1', transcript.protein_id)
        self.assertEqual((15, 53), (transcript.cds_start, transcript.cds_end))
        self.assertEqual((15, 18), (transcript.start_codon_start, transcript.start_codon_end))
        self.assertEqual((53, 56), (transcript.stop_codon_start, transcript.stop_codon_end))
        self.assertTrue(transcript.is_complete())
        self.assertEqual([(25, 45)], transcript.introns())
        self.assertIsNone(self.model.get_transcript('T1-NC').protein_id)
        with self.assertRaises(KeyError):
            self.model.get_transcript('T3')

    def test_find_genes(self):
        self.assertEqual(['G1'], [g.gene_id for g in self.model.find_genes(GenomeSpan('chr1', 40))])
        self.assertEqual([], self.model.find_genes(GenomeSpan('chr1', 61)))
        self.assertEqual(['G2'], [g.gene_id for g in self.model.find_genes(GenomeSpan.whole('chr2'))])

    def test_find_junction(self):
        self.assertEqual(['G1'], [g.gene_id for g in self.model.find_junction('chr1', 25, 45)])
        self.assertEqual(['G1'], [g.gene_id for g in self.model.find_junction('chr1', 30)])
        self.assertEqual([], self.model.find_junction('chr1', 25, 40))

    def test_required_tags(self):
        model = load_gtf(get_data('mock_genes.gtf'), required_tags=['basic'])
        self.assertEqual(['T1'], list(model.get_gene('G1').transcripts))


class TestLoadBedFixture(unittest.TestCase):

    def setUp(self):
        self.index = load_bed(get_data('mock.bed'))

    def test_half_open(self):
        self.assertTrue(self.index.has(GenomeSpan('chr1', 1999)))
        self.assertFalse(self.index.has(GenomeSpan('chr1', 2000)))

    def test_strand(self):
        self.assertTrue(self.index.has(GenomeSpan('chr1', 1000, 1001, STRAND.POS)))
        self.assertFalse(self.index.has(GenomeSpan('chr1', 1000, 1001, STRAND.NEG)))

    def test_records(self):
        self.assertEqual(3, len(self.index))
        record = self.index.find(GenomeSpan('chr2', 200000))[0]
        self.assertEqual(('baz', 5.0, STRAND.NS), (record.name, record.score, record.strand))
        self.assertTrue(self.index.provides('name'))


class TestLoadRepeatmasker(unittest.TestCase):

    def test_load(self):
        index = load_repeatmasker(get_data('mock_repeats.out'))
        self.assertEqual(3, len(index))
        repeats = index.find(GenomeSpan('chr1', 10467, 10470))
        self.assertEqual(['(CCCTAA)n', 'TAR1'], [r.repeat for r in repeats])
        self.assertEqual(STRAND.NEG, repeats[1].coord.strand)
        self.assertEqual('LINE/L1', index.find(GenomeSpan('chr2', 11504))[0].family)
        self.assertEqual([], index.find(GenomeSpan('chr2', 11503)))
        self.assertTrue(index.provides('repeat_family'))


class TestReadVariants(unittest.TestCase):

    def test_read(self):
        variants = list(read_variants(get_data('mock_variants.vcf')))
        self.assertEqual(7, len(variants))
        self.assertEqual(Variant('chr1', 3, 'T', 'G'), variants[0])
        self.assertEqual(Variant('chr1', 21, 'CA', 'C'), variants[1])
        # multi-allelic records are split
        self.assertEqual([('chr1', 22, 'A', 'G'), ('chr1', 22, 'A', 'T')], variants[2:4])
        # symbolic alleles are skipped
        self.assertEqual([], [v for v in variants if v.pos == 54])
        self.assertEqual(Variant('chr2', 35, 'T', 'C'), variants[-1])

    def test_passing_only(self):
        variants = list(read_variants(get_data('mock_variants.vcf'), passing_only=True))
        self.assertEqual(6, len(variants))
        self.assertEqual([], [v for v in variants if v.pos == 36])
