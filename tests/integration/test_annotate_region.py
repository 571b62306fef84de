import unittest

from genoannot.annotate.main import annotate_position, annotate_positions
from genoannot.annotate.region import GenicRegion, GenicRegionClassifier
from genoannot.constants import POSITION_COLUMNS, STRAND
from genoannot.interval import GenomeSpan

from . import get_mock_model


class TestClassifyFixture(unittest.TestCase):

    def setUp(self):
        self.classifier = GenicRegionClassifier(get_mock_model())

    def classify(self, pos, ref='chr1', strand=STRAND.NS):
        return self.classifier.classify(GenomeSpan(ref, pos, strand=strand))

    def test_exonic(self):
        self.assertEqual(GenicRegion.CODING, self.classify(20))
        self.assertEqual(GenicRegion.UTR5, self.classify(12))
        self.assertEqual(GenicRegion.UTR3, self.classify(58))
        # intronic for the coding transcript but within the exon of the non-coding one
        self.assertEqual(GenicRegion.NC_EXON, self.classify(26))

    def test_intronic(self):
        self.assertEqual(GenicRegion.CODING_INTRON, self.classify(35))
        self.assertEqual(GenicRegion.INTERGENIC, self.classify(5))

    def test_negative_strand_utr(self):
        self.assertEqual(GenicRegion.UTR5, self.classify(41, ref='chr2'))
        self.assertEqual(GenicRegion.UTR3, self.classify(12, ref='chr2'))
        self.assertEqual(GenicRegion.CODING, self.classify(35, ref='chr2', strand=STRAND.NEG))
        self.assertEqual(GenicRegion.CODING_ANTI, self.classify(35, ref='chr2', strand=STRAND.POS))

    def test_antisense(self):
        self.assertEqual(GenicRegion.CODING_ANTI, self.classify(20, strand=STRAND.NEG))
        self.assertEqual(GenicRegion.CODING_INTRON_ANTI, self.classify(35, strand=STRAND.NEG))
        self.assertEqual(GenicRegion.CODING, self.classify(20, strand=STRAND.POS))

    def test_mitochondrial(self):
        self.assertEqual(GenicRegion.MITOCHONDRIAL, self.classify(20, ref='chrM'))

    def test_gene_filter(self):
        span = GenomeSpan('chr1', 20)
        self.assertEqual(GenicRegion.CODING, self.classifier.classify(span, gene_id='G1'))
        self.assertEqual(GenicRegion.INTERGENIC, self.classifier.classify(span, gene_id='OTHER'))

    def test_classify_region(self):
        self.assertEqual(GenicRegion.JUNCTION, self.classifier.classify_region(GenomeSpan('chr1', 20, 40)))
        self.assertEqual(GenicRegion.UTR5, self.classifier.classify_region(GenomeSpan('chr1', 5, 13)))
        self.assertEqual(GenicRegion.CODING, self.classifier.classify_region(GenomeSpan('chr1', 16, 50)))

    def test_classify_read(self):
        self.assertEqual(GenicRegion.JUNCTION, self.classifier.classify_read(True, GenomeSpan('chr1', 20)))
        self.assertEqual(GenicRegion.CODING, self.classifier.classify_read(False, GenomeSpan('chr1', 20)))
        self.assertEqual(GenicRegion.NC_JUNCTION, self.classifier.classify_read(True, GenomeSpan('chr1', 26)))
        self.assertEqual(GenicRegion.CODING_INTRON, self.classifier.classify_read(True, GenomeSpan('chr1', 35)))
        self.assertEqual(GenicRegion.INTERGENIC, self.classifier.classify_read(True, GenomeSpan('chr1', 5)))


class TestAnnotatePosition(unittest.TestCase):

    def test_genic(self):
        row = annotate_position(get_mock_model(), 'chr1', 22)
        self.assertEqual('GENE1', row[POSITION_COLUMNS.gene])
        self.assertEqual('+', row[POSITION_COLUMNS.gene_strand])
        self.assertEqual('Coding', row[POSITION_COLUMNS.gene_region])

    def test_intergenic(self):
        row = annotate_position(get_mock_model(), 'chr1', 3)
        self.assertEqual(('chr1', 3), (row[POSITION_COLUMNS.chrom], row[POSITION_COLUMNS.pos]))
        self.assertIsNone(row[POSITION_COLUMNS.gene])
        self.assertIsNone(row[POSITION_COLUMNS.gene_region])

    def test_annotate_positions(self):
        rows = annotate_positions(get_mock_model(), [('chr1', 27, 'T', 'C'), ('chrM', 5, 'A', 'G')])
        self.assertEqual(['Non-coding exon', None], [row[POSITION_COLUMNS.gene_region] for row in rows])
