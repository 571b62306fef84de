import time

from .file_io import load_gtf, open_sequence_source, read_variants
from .protein import CodingSequence
from .region import GenicRegionClassifier
from .variant import peptide_for_variant
from ..config import DEFAULTS
from ..constants import COLUMNS, PEPTIDE_COLUMNS, POSITION_COLUMNS
from ..error import InvariantViolation, SequenceFetchError, VariantCallError
from ..interval import GenomeSpan
from ..util import logger, output_tabbed_file


def _variant_span(chrom, pos, ref):
    start = pos - 1
    return GenomeSpan(chrom, start, start + max(len(ref), 1))


def call_coding_variants(model, source, chrom, pos, ref, alt, table=None, splice_window=None):
    """
    call a variant against every coding transcript of the genes it overlaps. Transcripts which cannot be called
    are logged and skipped

    Args:
        model (GeneModel): the gene model
        source (SequenceSource): the reference sequence
        chrom (str): reference name
        pos (int): 1-based position of the ref allele
        ref (str): the reference allele
        alt (str): the alternate allele
        table (int): NCBI codon table identifier
        splice_window (int): intronic bases at either end of an intron considered part of the splice site

    Yields:
        Tuple[Gene,Transcript,CodingSequence,CodingVariant]: the call for each transcript
    """
    for gene in model.find_genes(_variant_span(chrom, pos, ref)):
        for transcript in gene.get_transcripts(coding_only=True):
            try:
                cds = CodingSequence.build(transcript, source)
                cds.validate()
                variant = cds.add_variant(chrom, pos, ref, alt, table=table, splice_window=splice_window)
            except (SequenceFetchError, InvariantViolation, VariantCallError) as err:
                logger.warning('skipping {} for {}:{} {}>{}: {}'.format(
                    transcript.transcript_id, chrom, pos, ref, alt, err))
                continue
            yield gene, transcript, cds, variant


def annotate_variant(model, source, chrom, pos, ref, alt, table=None, splice_window=None):
    """
    Returns:
        List[dict]: one row (see :data:`~genoannot.constants.COLUMNS`) per coding transcript the variant overlaps
    """
    rows = []
    calls = call_coding_variants(model, source, chrom, pos, ref, alt, table=table, splice_window=splice_window)
    for gene, transcript, _, variant in calls:
        rows.append({
            COLUMNS.chrom: chrom,
            COLUMNS.pos: pos,
            COLUMNS.ref: ref,
            COLUMNS.alt: alt,
            COLUMNS.gene: gene.name or gene.gene_id,
            COLUMNS.transcript_id: transcript.transcript_id,
            COLUMNS.protein_id: transcript.protein_id,
            COLUMNS.cds_variant: variant.cds_notation,
            COLUMNS.protein_variant: variant.aa_notation,
            COLUMNS.consequence: variant.consequence,
            COLUMNS.impact: variant.impact,
        })
    return rows


def annotate_variants(model, source, variants, table=None, splice_window=None):
    """
    Args:
        variants (Iterable[Variant]): chrom, 1-based pos, ref, alt tuples

    Returns:
        List[dict]: the effect rows of every variant
    """
    rows = []
    count = 0
    for chrom, pos, ref, alt in variants:
        count += 1
        rows.extend(annotate_variant(model, source, chrom, pos, ref, alt, table=table, splice_window=splice_window))
    logger.info('annotated {} variants ({} transcript effects)'.format(count, len(rows)))
    return rows


def annotate_position(model, chrom, pos, classifier=None):
    """
    the genes overlapping a position and the genic region of the position

    Args:
        model (GeneModel): the gene model
        chrom (str): reference name
        pos (int): 1-based position
        classifier (GenicRegionClassifier): reused between calls when given

    Returns:
        dict: gene names and strands (comma delimited) and the region name. The values are None when no gene
        overlaps the position
    """
    span = GenomeSpan(chrom, pos - 1)
    genes = model.find_genes(span)
    row = {POSITION_COLUMNS.chrom: chrom, POSITION_COLUMNS.pos: pos}
    if not genes:
        for column in [POSITION_COLUMNS.gene, POSITION_COLUMNS.gene_strand, POSITION_COLUMNS.gene_region]:
            row[column] = None
        return row
    classifier = classifier or GenicRegionClassifier(model)
    row[POSITION_COLUMNS.gene] = ','.join([gene.name or gene.gene_id for gene in genes])
    row[POSITION_COLUMNS.gene_strand] = ','.join([gene.strand for gene in genes])
    row[POSITION_COLUMNS.gene_region] = classifier.classify(span).label
    return row


def annotate_positions(model, variants, mitochondrial_refs=None):
    classifier = GenicRegionClassifier(model, mitochondrial_refs=mitochondrial_refs)
    return [annotate_position(model, chrom, pos, classifier) for chrom, pos, _, _ in variants]


def peptide_rows(model, source, variants, flanking=None, table=None, splice_window=None):
    """
    the reference and variant peptides for each protein altering call. Identical peptides produced by different
    transcripts of the same variant are only reported once

    Returns:
        List[dict]: rows (see :data:`~genoannot.constants.PEPTIDE_COLUMNS`)
    """
    rows = []
    for chrom, pos, ref, alt in variants:
        written = set()
        calls = call_coding_variants(model, source, chrom, pos, ref, alt, table=table, splice_window=splice_window)
        for gene, transcript, cds, variant in calls:
            if transcript.protein_id is None:
                continue
            peptides = peptide_for_variant(cds, variant, flanking=flanking, table=table)
            if peptides is None or peptides[1] in written:
                continue
            written.add(peptides[1])
            rows.append({
                PEPTIDE_COLUMNS.chrom: chrom,
                PEPTIDE_COLUMNS.pos: pos,
                PEPTIDE_COLUMNS.ref: ref,
                PEPTIDE_COLUMNS.alt: alt,
                PEPTIDE_COLUMNS.gene: gene.name or gene.gene_id,
                PEPTIDE_COLUMNS.transcript_id: transcript.transcript_id,
                PEPTIDE_COLUMNS.consequence: variant.consequence,
                PEPTIDE_COLUMNS.protein_variant: variant.aa_notation,
                PEPTIDE_COLUMNS.ref_peptide: peptides[0],
                PEPTIDE_COLUMNS.alt_peptide: peptides[1],
            })
    logger.info('found {} variant peptides'.format(len(rows)))
    return rows


def _load_model(annotations, required_tags, strict, bin_size):
    start_time = time.time()
    model = load_gtf(annotations, required_tags=required_tags, strict=strict, bin_size=bin_size)
    logger.info('loaded {} genes in {:.1f}s'.format(len(model), time.time() - start_time))
    return model


def main(
    command, annotations, variants, output,
    reference_genome=None,
    required_tags=None,
    strict=None,
    passing_only=None,
    codon_table=None,
    flanking_aa=None,
    bin_size=None,
    splice_window=None,
    mitochondrial_refs=None,
    **kwargs
):
    """
    Args:
        command (str): one of effect, region or peptide
        annotations (str): path to the GTF file
        variants (str): path to the VCF file
        output (str): path to the tab delimited output file
        reference_genome (str): path to the reference fasta (required for effect and peptide)

    Options which are not given are read from :data:`~genoannot.config.DEFAULTS` when main is called
    """
    required_tags = DEFAULTS.required_tags if required_tags is None else required_tags
    strict = DEFAULTS.strict if strict is None else strict
    passing_only = DEFAULTS.passing_only if passing_only is None else passing_only
    codon_table = DEFAULTS.codon_table if codon_table is None else codon_table
    flanking_aa = DEFAULTS.flanking_aa if flanking_aa is None else flanking_aa
    bin_size = DEFAULTS.bin_size if bin_size is None else bin_size
    splice_window = DEFAULTS.splice_window if splice_window is None else splice_window
    mitochondrial_refs = DEFAULTS.mitochondrial_refs if mitochondrial_refs is None else mitochondrial_refs

    model = _load_model(annotations, required_tags, strict, bin_size)
    records = list(read_variants(variants, passing_only=passing_only))
    logger.info('read {} variants from {}'.format(len(records), variants))

    if command == 'region':
        rows = annotate_positions(model, records, mitochondrial_refs)
        output_tabbed_file(rows, output, header=POSITION_COLUMNS.values())
        return

    if reference_genome is None:
        raise TypeError('a reference genome is required to call coding variants')
    source = open_sequence_source(reference_genome)
    if command == 'effect':
        rows = annotate_variants(model, source, records, table=codon_table, splice_window=splice_window)
        output_tabbed_file(rows, output, header=COLUMNS.values())
    elif command == 'peptide':
        rows = peptide_rows(
            model, source, records, flanking=flanking_aa, table=codon_table, splice_window=splice_window
        )
        output_tabbed_file(rows, output, header=PEPTIDE_COLUMNS.values())
    else:
        raise ValueError('unsupported command', command)
