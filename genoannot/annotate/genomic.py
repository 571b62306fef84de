from ..constants import FEATURE, STRAND, reverse_complement
from ..index import IntervalIndex
from ..interval import GenomeSpan


class Exon:
    """
    a single GTF feature record (exon, CDS segment, start or stop codon) belonging to a transcript
    """

    def __init__(self, transcript_id, ref, start, end, strand=STRAND.NS, attributes=None):
        """
        Args:
            transcript_id (str): id of the transcript this feature belongs to
            ref (str): the reference name
            start (int): 0-based start of the feature
            end (int): end of the feature (exclusive)
            strand (STRAND): the strand of the gene
            attributes (List[Tuple[str,str]]): remaining GTF attributes, in file order
        """
        self.transcript_id = transcript_id
        self.ref = ref
        self.start = start
        self.end = end
        self.strand = strand
        self.attributes = list(attributes or [])

    def get_attribute(self, key, default=None):
        """
        Returns:
            str: the first value of an attribute
        """
        for attr, value in self.attributes:
            if attr == key:
                return value
        return default

    @property
    def tags(self):
        return {value for attr, value in self.attributes if attr == 'tag'}

    @property
    def span(self):
        return GenomeSpan(self.ref, self.start, self.end, self.strand)

    def __len__(self):
        return self.end - self.start

    def __repr__(self):
        return 'Exon({}, {}:{}-{})'.format(self.transcript_id, self.ref, self.start, self.end)


class Transcript:
    """
    a transcript and its exon, CDS, start codon and stop codon records

    The start and stop codons are tracked separately from the CDS bounds because a codon may be split
    across two exons
    """

    def __init__(self, transcript_id, gene_id, ref, strand):
        self.transcript_id = transcript_id
        self.gene_id = gene_id
        self.ref = ref
        self.strand = strand
        self.start = None
        self.end = None
        self.cds_start = None
        self.cds_end = None
        self.start_codon_start = None
        self.start_codon_end = None
        self.stop_codon_start = None
        self.stop_codon_end = None
        self.exons = []
        self.cds_exons = []
        self.start_codon_exons = []
        self.stop_codon_exons = []

    def _add(self, features, start, end, attributes):
        features.append(Exon(self.transcript_id, self.ref, start, end, self.strand, attributes))

    def add_exon(self, start, end, attributes=None):
        self.start = start if self.start is None else min(self.start, start)
        self.end = end if self.end is None else max(self.end, end)
        self._add(self.exons, start, end, attributes)

    def add_cds(self, start, end, attributes=None):
        self.cds_start = start if self.cds_start is None else min(self.cds_start, start)
        self.cds_end = end if self.cds_end is None else max(self.cds_end, end)
        self._add(self.cds_exons, start, end, attributes)

    def add_start_codon(self, start, end, attributes=None):
        self.start_codon_start = start if self.start_codon_start is None else min(self.start_codon_start, start)
        self.start_codon_end = end if self.start_codon_end is None else max(self.start_codon_end, end)
        self._add(self.start_codon_exons, start, end, attributes)

    def add_stop_codon(self, start, end, attributes=None):
        self.stop_codon_start = start if self.stop_codon_start is None else min(self.stop_codon_start, start)
        self.stop_codon_end = end if self.stop_codon_end is None else max(self.stop_codon_end, end)
        self._add(self.stop_codon_exons, start, end, attributes)

    def freeze(self):
        """
        sort the feature lists by position once all records have been added
        """
        for features in [self.exons, self.cds_exons, self.start_codon_exons, self.stop_codon_exons]:
            features.sort(key=lambda e: (e.start, e.end))

    def has_cds(self):
        return self.cds_start is not None and self.cds_end is not None

    def has_start_codon(self):
        return bool(self.start_codon_exons)

    def has_stop_codon(self):
        return bool(self.stop_codon_exons)

    def is_complete(self):
        """
        Returns:
            bool: True when both the start and the stop codon are annotated
        """
        return self.has_start_codon() and self.has_stop_codon()

    @property
    def span(self):
        return GenomeSpan(self.ref, self.start, self.end, self.strand)

    @property
    def protein_id(self):
        """
        the protein_id attribute of the first exon (or the first CDS record when the exons do not carry it)
        """
        for features in [self.exons, self.cds_exons]:
            if features:
                protein_id = features[0].get_attribute('protein_id')
                if protein_id is not None:
                    return protein_id
        return None

    def introns(self):
        """
        Returns:
            List[Tuple[int,int]]: the 0-based half-open gaps between consecutive exons
        """
        return [(prev.end, curr.start) for prev, curr in zip(self.exons, self.exons[1:]) if prev.end < curr.start]

    def get_sequence(self, source):
        """
        the spliced transcript sequence, 5' to 3' on the transcript strand

        Args:
            source (SequenceSource): the reference sequence collaborator
        """
        seq = ''.join([source.fetch(self.ref, exon.start, exon.end) for exon in self.exons])
        if self.strand == STRAND.NEG:
            return reverse_complement(seq)
        return seq

    def __repr__(self):
        return 'Transcript({}, {}{}:{}-{})'.format(self.transcript_id, self.ref, self.strand, self.start, self.end)


class Gene:
    """
    a gene and the transcripts it owns. The gene span is seeded from its first record and grown by its exons
    """

    def __init__(self, gene_id, name, ref, start, end, strand=STRAND.NS, biotype=None, status=None):
        self.gene_id = gene_id
        self.name = name
        self.ref = ref
        self.start = start
        self.end = end
        self.strand = strand
        self.biotype = biotype
        self.status = status
        self.transcripts = {}

    def get_transcript(self, transcript_id):
        if transcript_id not in self.transcripts:
            self.transcripts[transcript_id] = Transcript(transcript_id, self.gene_id, self.ref, self.strand)
        return self.transcripts[transcript_id]

    def add_record(self, feature, transcript_id, start, end, attributes=None):
        """
        add a GTF record to one of the transcripts of this gene

        Args:
            feature (FEATURE): the record type
            transcript_id (str): the transcript the record belongs to
            start (int): 0-based start
            end (int): end (exclusive)
            attributes (List[Tuple[str,str]]): the remaining record attributes
        """
        transcript = self.get_transcript(transcript_id)
        if feature == FEATURE.EXON:
            transcript.add_exon(start, end, attributes)
            self.start = min(self.start, start)
            self.end = max(self.end, end)
        elif feature == FEATURE.CDS:
            transcript.add_cds(start, end, attributes)
        elif feature == FEATURE.START_CODON:
            transcript.add_start_codon(start, end, attributes)
        elif feature == FEATURE.STOP_CODON:
            transcript.add_stop_codon(start, end, attributes)
        else:
            raise ValueError('unsupported feature type', feature)

    def freeze(self):
        for transcript in self.transcripts.values():
            transcript.freeze()

    def get_transcripts(self, coding_only=False, non_coding_only=False):
        """
        Args:
            coding_only (bool): only return transcripts with a CDS
            non_coding_only (bool): only return transcripts without a CDS

        Returns:
            List[Transcript]: the transcripts in the order they were first seen
        """
        result = []
        for transcript in self.transcripts.values():
            if coding_only and not transcript.has_cds():
                continue
            if non_coding_only and transcript.has_cds():
                continue
            result.append(transcript)
        return result

    def exons(self):
        """
        Returns:
            List[Exon]: the exons of all transcripts, one per distinct position, in genomic order
        """
        exons = {}
        for transcript in self.transcripts.values():
            for exon in transcript.exons:
                exons.setdefault((exon.start, exon.end), exon)
        return [exons[key] for key in sorted(exons)]

    @property
    def span(self):
        return GenomeSpan(self.ref, self.start, self.end, self.strand)

    def values(self, has_biotype=True, has_status=True):
        """
        the annotation values reported for this gene
        """
        result = [self.gene_id, self.name, self.start, self.end, self.strand]
        if has_biotype:
            result.append(self.biotype)
        if has_status:
            result.append(self.status)
        return result

    def __repr__(self):
        return 'Gene({}, {}, {}{}:{}-{})'.format(self.gene_id, self.name, self.ref, self.strand, self.start, self.end)


class GeneModel:
    """
    the genes loaded from a GTF file, indexed by position
    """

    def __init__(self, bin_size=None):
        self.index = IntervalIndex(bin_size=bin_size)
        self.genes = {}  # (ref, gene_id) => Gene
        self.has_biotype = False
        self.has_status = False

    @property
    def annotation_names(self):
        names = ['gene_id', 'gene_name', 'start', 'end', 'strand']
        if self.has_biotype:
            names.append('biotype')
        if self.has_status:
            names.append('status')
        return names

    def provides(self, key):
        return key in self.annotation_names

    def add_gene(self, gene):
        """
        finalize a gene and add it to the index
        """
        gene.freeze()
        self.genes[(gene.ref, gene.gene_id)] = gene
        self.index.add(gene.span, gene)
        if gene.biotype:
            self.has_biotype = True
        if gene.status:
            self.has_status = True

    def remove_gene(self, ref, gene_id):
        """
        drop a gene from the model and the index

        Returns:
            bool: True if the gene had been added
        """
        gene = self.genes.pop((ref, gene_id), None)
        if gene is None:
            return False
        self.index.discard(lambda value: value is gene)
        return True

    def find_genes(self, span, only_within=False):
        """
        Returns:
            List[Gene]: the genes overlapping (or containing when only_within is set) the given span
        """
        return self.index.find(span, only_within=only_within)

    def get_gene(self, gene_id, ref=None):
        """
        Raises:
            KeyError: no gene with the given id was loaded
        """
        for (gene_ref, curr_id), gene in self.genes.items():
            if curr_id == gene_id and (ref is None or ref == gene_ref):
                return gene
        raise KeyError('gene not found', gene_id)

    def get_transcript(self, transcript_id):
        """
        Raises:
            KeyError: no transcript with the given id was loaded
        """
        for gene in self.genes.values():
            if transcript_id in gene.transcripts:
                return gene.transcripts[transcript_id]
        raise KeyError('transcript not found', transcript_id)

    def find_junction(self, ref, start, end=None):
        """
        find the genes with an exon ending at the start and an exon starting at the end of a junction (intron).
        When only a single position is given either exon boundary is accepted

        Args:
            ref (str): the reference name
            start (int): 0-based position of the end of the upstream exon
            end (int): 0-based position of the start of the downstream exon
        """
        end = start if end is None else end
        result = []
        for gene in self.find_genes(GenomeSpan(ref, start)):
            match_start = any([exon.end == start for exon in gene.exons()])
            match_end = any([exon.start == end for exon in gene.exons()])
            if match_start and match_end:
                result.append(gene)
            elif start == end and (match_start or match_end):
                result.append(gene)
        return result

    def __len__(self):
        return len(self.genes)

    def __iter__(self):
        return (annotation.value for annotation in self.index)
