"""
classify genomic positions relative to the gene model (coding exon, UTR, intron, junction, intergenic)
"""
from enum import Enum

from ..config import DEFAULTS
from ..constants import CIGAR, STRAND


class GenicRegion(Enum):
    """
    genic region categories. A lower priority value takes precedence when two categories compete
    """

    # sense orientation
    JUNCTION = (0, 'Junction', 'junction', True, True, True, True)
    CODING = (1, 'Coding', 'coding_exon', True, True, True, True)
    UTR5 = (2, "5'UTR", '5_utr', True, True, False, True)
    UTR3 = (3, "3'UTR", '3_utr', True, True, False, True)
    NC_JUNCTION = (4, 'Non-coding junction', 'nc_junction', True, True, False, True)
    NC_EXON = (5, 'Non-coding exon', 'nc_exon', True, True, False, True)
    CODING_INTRON = (6, 'Coding intron', 'coding_intron', True, False, True, True)
    UTR5_INTRON = (7, "5'UTR intron", '5_utr_intron', True, False, False, True)
    UTR3_INTRON = (8, "3'UTR intron", '3_utr_intron', True, False, False, True)
    NC_INTRON = (9, 'Non-coding intron', 'nc_intron', True, False, False, True)
    INTERGENIC = (10, 'Intergenic', 'intergenic', False, False, False, False)
    MITOCHONDRIAL = (11, 'Mitochondrial', 'mitochondrial', False, False, False, False)

    # anti-sense orientation
    JUNCTION_ANTI = (12, 'Junction', 'anti_junction', True, True, True, False)
    CODING_ANTI = (13, 'Coding', 'anti_coding_exon', True, True, True, False)
    UTR5_ANTI = (14, "5'UTR", 'anti_5_utr', True, True, False, False)
    UTR3_ANTI = (15, "3'UTR", 'anti_3_utr', True, True, False, False)
    NC_JUNCTION_ANTI = (16, 'Non-coding junction', 'anti_nc_junction', True, True, False, False)
    NC_EXON_ANTI = (17, 'Non-coding exon', 'anti_nc_exon', True, True, False, False)
    CODING_INTRON_ANTI = (18, 'Coding intron', 'anti_coding_intron', True, False, True, False)
    UTR5_INTRON_ANTI = (19, "5'UTR intron", 'anti_5_utr_intron', True, False, False, False)
    UTR3_INTRON_ANTI = (20, "3'UTR intron", 'anti_3_utr_intron', True, False, False, False)
    NC_INTRON_ANTI = (21, 'Non-coding intron', 'anti_nc_intron', True, False, False, False)

    def __init__(self, priority, label, code, is_gene, is_exon, is_coding, is_sense):
        self.priority = priority
        self.label = label
        self.code = code
        self.is_gene = is_gene
        self.is_exon = is_exon
        self.is_coding = is_coding
        self.is_sense = is_sense

    @property
    def description(self):
        if not self.is_gene or self.is_sense:
            return self.label
        return self.label + ' (anti-sense)'

    def anti(self):
        """
        the anti-sense twin of a sense region (genic regions only)
        """
        if not self.is_gene or not self.is_sense:
            return self
        return GenicRegion[self.name + '_ANTI']

    def oriented(self, antisense):
        return self.anti() if antisense else self

    def junction(self):
        """
        the junction category matching this exonic region
        """
        region = GenicRegion.JUNCTION if self.is_coding else GenicRegion.NC_JUNCTION
        return region.oriented(not self.is_sense)

    @classmethod
    def from_code(cls, code):
        for region in cls:
            if region.code == code:
                return region
        raise KeyError('unknown genic region code', code)

    def __repr__(self):
        return 'GenicRegion.{}'.format(self.name)


# exonic categories checked in order, then the intronic tier
_EXONIC_PRECEDENCE = [GenicRegion.CODING, GenicRegion.UTR5, GenicRegion.UTR3, GenicRegion.NC_EXON]
_INTRONIC_PRECEDENCE = [
    GenicRegion.CODING_INTRON, GenicRegion.UTR5_INTRON, GenicRegion.UTR3_INTRON, GenicRegion.NC_INTRON
]


def cigar_has_gap(cigartuples):
    """
    Args:
        cigartuples (List[Tuple[int,int]]): pysam style (operation, length) cigar

    Returns:
        bool: True if the alignment skips a region of the reference (spliced alignment)
    """
    return any([op == CIGAR.N for op, _ in cigartuples or []])


class GenicRegionClassifier:
    """
    assigns genic region categories to positions using a gene model
    """

    def __init__(self, model, mitochondrial_refs=None):
        """
        Args:
            model (GeneModel): the genes to classify against
            mitochondrial_refs (List[str]): reference names which are always mitochondrial
        """
        self.model = model
        self.mitochondrial_refs = set(DEFAULTS.mitochondrial_refs if mitochondrial_refs is None else mitochondrial_refs)

    def _transcript_category(self, transcript, pos):
        """
        the exonic or intronic category of a position for a single transcript
        """
        forward = transcript.strand != STRAND.NEG
        if not transcript.has_cds():
            if any([exon.span.contains(pos) for exon in transcript.exons]):
                return GenicRegion.NC_EXON
            return GenicRegion.NC_INTRON

        if any([cds.span.contains(pos) for cds in transcript.cds_exons]):
            return GenicRegion.CODING

        before_cds = pos.start < transcript.cds_start
        after_cds = pos.start >= transcript.cds_end
        if any([exon.span.contains(pos) for exon in transcript.exons]):
            if before_cds:
                return GenicRegion.UTR5 if forward else GenicRegion.UTR3
            elif after_cds:
                return GenicRegion.UTR3 if forward else GenicRegion.UTR5
            return GenicRegion.NC_EXON
        if before_cds:
            return GenicRegion.UTR5_INTRON if forward else GenicRegion.UTR3_INTRON
        elif after_cds:
            return GenicRegion.UTR3_INTRON if forward else GenicRegion.UTR5_INTRON
        return GenicRegion.CODING_INTRON

    def classify(self, pos, gene_id=None):
        """
        classify a position relative to the genes overlapping it

        Args:
            pos (GenomeSpan): the position. If stranded, genes on the opposite strand give anti-sense categories
            gene_id (str): only consider the gene with this id

        Returns:
            GenicRegion: the highest precedence category found
        """
        if pos.ref in self.mitochondrial_refs:
            return GenicRegion.MITOCHONDRIAL

        unstranded = pos.with_strand(STRAND.NS)
        # category => anti-sense flag, set when any transcript giving the category is on the opposite strand
        seen = {}
        is_gene = False
        gene_antisense = False

        for gene in self.model.find_genes(unstranded):
            if gene_id is not None and gene.gene_id != gene_id:
                continue
            is_gene = True
            antisense = pos.strand != STRAND.NS and gene.strand != pos.strand
            gene_antisense = gene_antisense or antisense
            for transcript in gene.get_transcripts():
                category = self._transcript_category(transcript, unstranded)
                seen[category] = seen.get(category, False) or antisense

        for category in _EXONIC_PRECEDENCE:
            if category in seen:
                return category.oriented(seen[category])
        if is_gene:
            for category in _INTRONIC_PRECEDENCE:
                if category in seen:
                    return category.oriented(gene_antisense)
            return GenicRegion.NC_INTRON.oriented(gene_antisense)
        return GenicRegion.INTERGENIC

    def classify_region(self, span):
        """
        classify a region by classifying both of its ends

        Returns:
            GenicRegion: the reconciled category of the two ends
        """
        start = self.classify(span.start_pos())
        end = self.classify(span.end_pos())

        if start == end:
            return start
        if start.is_gene != end.is_gene:
            return start if start.is_gene else end
        if start.is_exon != end.is_exon:
            # crossing a junction
            return start.junction() if start.is_exon else end.junction()
        if start.is_coding != end.is_coding:
            return start if start.is_coding else end
        return start if start.priority < end.priority else end

    def classify_read(self, is_spliced, pos):
        """
        classify the start of an aligned read. Spliced reads starting in an exon are junction reads

        Args:
            is_spliced (bool): the alignment contains a skipped region (see :func:`cigar_has_gap`)
            pos (GenomeSpan): the read position
        """
        region = self.classify(pos)
        if is_spliced and region.is_gene and region.is_exon:
            return region.junction()
        return region
