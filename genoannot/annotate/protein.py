"""
maps the genome positions of a transcript to CDS and amino acid positions and applies small variants to the
coding sequence
"""
from collections import namedtuple

from ..config import DEFAULTS
from ..constants import CODON_SIZE, CONSEQUENCE, STOP_AA, STRAND, reverse_complement, translate
from ..error import InvariantViolation, SequenceFetchError, VariantCallError
from ..util import logger
from .variant import (
    CodingVariant,
    cds_notation,
    coding_consequence,
    compare_codons,
    compare_proteins,
    protein_notation,
    trim_alleles,
)

UNSET = -1

CodingBase = namedtuple('CodingBase', ['chrom', 'genome_pos', 'cds_pos', 'aa_pos', 'codon_pos', 'base'])
"""
a single base of a transcript. ``cds_pos``, ``aa_pos`` and ``codon_pos`` are 1-based and -1 until assigned.
``base`` is forward strand sequence and may hold more than one base (or none) once a variant has been applied
"""


def same_reference(ref1, ref2):
    """
    Example:
        >>> same_reference('chr1', '1')
        True
    """
    def strip(ref):
        return ref[3:] if ref.startswith('chr') else ref

    return strip(ref1) == strip(ref2)


def coding_bounds(transcript):
    """
    the genomic range translated for a transcript: the CDS plus any start and stop codon records

    Returns:
        Tuple[int,int]: 0-based half-open bounds
    """
    starts = [transcript.cds_start, transcript.start_codon_start, transcript.stop_codon_start]
    ends = [transcript.cds_end, transcript.start_codon_end, transcript.stop_codon_end]
    return min([s for s in starts if s is not None]), max([e for e in ends if e is not None])


class CodingSequence:
    """
    the bases of a transcript, stored in genomic order regardless of the transcript strand

    A sequence is never modified. :meth:`assign_cds_aa_positions` and :meth:`add_variant` return new sequences
    """

    def __init__(self, transcript, bases, untrimmed=None):
        """
        Args:
            transcript (Transcript): the transcript the bases belong to
            bases (List[CodingBase]): the bases in genomic order
            untrimmed (List[CodingBase]): every exonic base of the transcript, used to check reference alleles
        """
        self.transcript = transcript
        self.bases = tuple(bases)
        self.untrimmed = tuple(bases if untrimmed is None else untrimmed)
        self._reference = None

    @classmethod
    def build(cls, transcript, source, assign_positions=True):
        """
        collect the reference bases of every exon of a transcript

        Args:
            transcript (Transcript): the coding transcript
            source (SequenceSource): provides the forward strand reference sequence
            assign_positions (bool): trim to the coding bases and assign the CDS and amino acid positions

        Raises:
            VariantCallError: the transcript does not have a CDS
            SequenceFetchError: the exon sequence could not be retrieved
        """
        if not transcript.has_cds():
            raise VariantCallError('transcript does not have a coding region', transcript.transcript_id)
        bases = []
        for exon in transcript.exons or transcript.cds_exons:
            seq = source.fetch(transcript.ref, exon.start, exon.end)
            if len(seq) != len(exon):
                raise SequenceFetchError('incomplete sequence returned for exon', exon, len(seq))
            bases.extend([
                CodingBase(transcript.ref, exon.start + i, UNSET, UNSET, UNSET, base) for i, base in enumerate(seq)
            ])
        cds = cls(transcript, bases)
        if assign_positions:
            return cds.assign_cds_aa_positions()
        return cds

    @property
    def forward(self):
        return self.transcript.strand != STRAND.NEG

    def assign_cds_aa_positions(self):
        """
        trim the bases to the coding range and number them from the 5' end of the transcript. Every complete codon
        gets an amino acid position. A trailing partial codon keeps its CDS positions but no amino acid position

        Returns:
            CodingSequence: the coding bases, still in genomic order

        Raises:
            VariantCallError: no exonic bases lie in the coding range
        """
        lower, upper = coding_bounds(self.transcript)
        result = []
        codon = []
        cds_pos = 0
        aa_pos = 0
        for base in self.untrimmed if self.forward else reversed(self.untrimmed):
            if base.genome_pos < lower or base.genome_pos >= upper:
                continue
            cds_pos += 1
            codon.append(base._replace(cds_pos=cds_pos, aa_pos=UNSET, codon_pos=len(codon) + 1))
            if len(codon) == CODON_SIZE:
                aa_pos += 1
                result.extend([b._replace(aa_pos=aa_pos) for b in codon])
                codon = []
        result.extend(codon)
        if not result:
            raise VariantCallError('no coding bases found for transcript', self.transcript.transcript_id)
        if not self.forward:
            result.reverse()
        return CodingSequence(self.transcript, result, self.untrimmed)

    def __len__(self):
        return len(self.bases)

    def __iter__(self):
        return iter(self.bases)

    @property
    def start(self):
        """:class:`int`: genomic position of the lowest coding base"""
        return self.bases[0].genome_pos

    @property
    def end(self):
        """:class:`int`: genomic position after the highest coding base"""
        return self.bases[-1].genome_pos + 1

    def base_at(self, genome_pos):
        """
        Returns:
            CodingBase: the base at a genomic position or None if the position is not part of the sequence
        """
        for base in self.bases:
            if base.genome_pos == genome_pos:
                return base
        return None

    def reference_base(self, genome_pos):
        """
        Returns:
            str: the exonic reference base at a genomic position, None for intronic positions
        """
        if self._reference is None:
            self._reference = {b.genome_pos: b.base for b in self.untrimmed}
        return self._reference.get(genome_pos)

    def cds_string(self):
        """
        Returns:
            str: the coding sequence on the transcript strand
        """
        seq = ''.join([b.base for b in self.bases])
        if not self.forward:
            return reverse_complement(seq)
        return seq

    def aa_string(self, table=None):
        """
        Args:
            table (int): NCBI codon table identifier

        Returns:
            str: the translated coding sequence (stop codons are kept as *)
        """
        return translate(self.cds_string(), table=DEFAULTS.codon_table if table is None else table)

    def aa_window(self, aa_pos, flanking=None, aa_end_pos=None, table=None):
        """
        the peptide surrounding a range of residues, with any trailing stop removed

        Args:
            aa_pos (int): first residue of the range (1-based)
            flanking (int): residues to include on either side
            aa_end_pos (int): last residue of the range, defaults to aa_pos
        """
        flanking = DEFAULTS.flanking_aa if flanking is None else flanking
        aa_end_pos = aa_pos if aa_end_pos is None else aa_end_pos
        peptide = self.aa_string(table)
        start = max(0, aa_pos - 1 - flanking)
        end = min(len(peptide), aa_end_pos + flanking)
        result = peptide[start:end]
        if result.endswith(STOP_AA):
            result = result[:-1]
        return result

    def validate(self):
        """
        Raises:
            InvariantViolation: the transcript has both a start and stop codon but the coding length is not a
                multiple of the codon size
        """
        if self.transcript.is_complete() and len(self.cds_string()) % CODON_SIZE != 0:
            raise InvariantViolation(
                'coding sequence length is not a multiple of {}'.format(CODON_SIZE),
                self.transcript.transcript_id,
                len(self.cds_string()),
            )

    def _orient(self, plus, minus):
        return plus if self.forward else minus

    def _noncoding_variant(self, var_start, var_end, splice_window):
        """
        the consequence of a variant which does not edit the coding bases, or None for a coding variant
        """
        transcript = self.transcript
        insertion = var_start == var_end
        t_start, t_end = transcript.start, transcript.end
        if t_start is None:
            t_start, t_end = self.start, self.end

        if (insertion and var_start <= t_start) or (not insertion and var_end <= t_start):
            return self._orient(CONSEQUENCE.UPSTREAM, CONSEQUENCE.DOWNSTREAM)
        if var_start >= t_end:
            return self._orient(CONSEQUENCE.DOWNSTREAM, CONSEQUENCE.UPSTREAM)

        five_prime_edge = self._orient(t_start, t_end)
        if var_start < five_prime_edge < var_end:
            return CONSEQUENCE.TRANSCRIPTIONAL_START_LOSS

        # an insertion touches the bases on both sides of it
        touched = (var_start - 1, var_start + 1) if insertion else (var_start, var_end)
        for intron_start, intron_end in transcript.introns():
            lower = max(touched[0], intron_start)
            upper = min(touched[1], intron_end)
            if lower >= upper:
                continue
            if lower < intron_start + splice_window:
                return self._orient(CONSEQUENCE.SPLICE_DONOR, CONSEQUENCE.SPLICE_ACCEPTOR)
            elif upper > intron_end - splice_window:
                return self._orient(CONSEQUENCE.SPLICE_ACCEPTOR, CONSEQUENCE.SPLICE_DONOR)
            elif intron_start <= touched[0] and touched[1] <= intron_end:
                return CONSEQUENCE.INTRON

        if (insertion and var_start <= self.start) or (not insertion and var_end <= self.start):
            return self._orient(CONSEQUENCE.UTR5, CONSEQUENCE.UTR3)
        if var_start >= self.end:
            return self._orient(CONSEQUENCE.UTR3, CONSEQUENCE.UTR5)
        return None

    def _check_reference(self, var_start, ref):
        for offset, expected in enumerate(ref):
            found = self.reference_base(var_start + offset)
            if found is not None and found != expected:
                raise VariantCallError(
                    'reference allele does not match the reference sequence',
                    self.transcript.ref, var_start + offset, expected, found,
                )

    def _edit(self, var_start, var_end, alt):
        """
        Returns:
            Tuple[List[CodingBase],List[CodingBase]]: the edited bases and the reference bases affected by the edit
        """
        edited = []
        affected = []
        if var_start == var_end:
            # insertion between var_start - 1 and var_start
            for base in self.bases:
                if base.genome_pos in [var_start - 1, var_start]:
                    affected.append(base)
            if len(affected) != 2:
                raise VariantCallError('insertion is not flanked by coding bases', self.transcript.ref, var_start)
            for base in self.bases:
                if base.genome_pos == var_start - 1:
                    edited.append(base._replace(base=base.base + alt))
                else:
                    edited.append(base)
            return edited, affected

        for base in self.bases:
            if base.genome_pos < var_start or base.genome_pos >= var_end:
                edited.append(base)
                continue
            if not affected and alt:
                edited.append(base._replace(base=alt))
            affected.append(base)
        if not affected:
            raise VariantCallError('variant does not overlap any coding bases', self.transcript.ref, var_start)
        return edited, affected

    def add_variant(self, chrom, pos, ref, alt, table=None, splice_window=None):
        """
        apply a small variant to the coding sequence and describe its effect on the transcript

        Args:
            chrom (str): the reference name of the variant
            pos (int): 1-based position of the first base of the ref allele (as in a VCF)
            ref (str): the reference allele
            alt (str): the alternate allele
            table (int): NCBI codon table identifier
            splice_window (int): intronic bases at either end of an intron considered part of the splice site

        Returns:
            CodingVariant: the consequence, notation and edited sequence

        Raises:
            VariantCallError: the variant cannot be called against this transcript
        """
        if not same_reference(chrom, self.transcript.ref):
            raise VariantCallError('variant is not on the transcript reference', chrom, self.transcript.ref)
        var_start, ref, alt = trim_alleles(pos, ref.upper(), alt.upper())
        if not ref and not alt:
            raise VariantCallError('the ref and alt alleles are identical', chrom, pos)
        var_end = var_start + len(ref)
        self._check_reference(var_start, ref)

        splice_window = DEFAULTS.splice_window if splice_window is None else splice_window
        consequence = self._noncoding_variant(var_start, var_end, splice_window)
        if consequence is not None:
            logger.debug('{}:{} {}>{} is {} for {}'.format(chrom, pos, ref, alt, consequence, self.transcript))
            return CodingVariant(consequence, self)

        edited, affected = self._edit(var_start, var_end, alt)
        mutant = CodingSequence(self.transcript, edited, self.untrimmed)
        # the first edited codon on the transcript strand
        first = min(affected, key=lambda b: b.cds_pos)
        if first.aa_pos == UNSET:
            raise VariantCallError('variant is in an incomplete codon', chrom, pos, self.transcript.transcript_id)

        coding_delta = len(alt) - len(ref) if var_start == var_end else sum([len(b.base) for b in edited]) - len(self)
        if coding_delta == 0:
            last = max(affected, key=lambda b: b.cds_pos)
            if last.aa_pos == UNSET:
                raise VariantCallError('variant is in an incomplete codon', chrom, pos, self.transcript.transcript_id)
            change = compare_codons(self.aa_string(table), mutant.aa_string(table), first.aa_pos, last.aa_pos)
        else:
            change = compare_proteins(self.aa_string(table), mutant.aa_string(table))
        consequence = coding_consequence(change, coding_delta)

        if change.offset is None:
            aa_pos = aa_end_pos = first.aa_pos
        elif not change.ref_changed and coding_delta != 0:
            # residues flanking an insertion
            aa_pos, aa_end_pos = change.offset, change.offset + 1
        else:
            aa_pos = change.offset + 1
            aa_end_pos = change.offset + max(1, len(change.ref_changed))

        if first.aa_pos == 1 and consequence != CONSEQUENCE.SYNONYMOUS:
            consequence = CONSEQUENCE.START_LOST

        return CodingVariant(
            consequence,
            mutant,
            cds_notation=cds_notation([b.cds_pos for b in affected], ref, alt, antisense=not self.forward),
            aa_notation=protein_notation(
                change,
                codon_aa_pos=first.aa_pos,
                frameshift=consequence == CONSEQUENCE.FRAMESHIFT or (
                    consequence == CONSEQUENCE.START_LOST and coding_delta % CODON_SIZE != 0
                ),
                coding_delta=coding_delta,
            ),
            cds_pos=first.cds_pos,
            aa_pos=aa_pos,
            aa_end_pos=aa_end_pos,
        )

    def __repr__(self):
        return 'CodingSequence({}, {} bases)'.format(self.transcript.transcript_id, len(self))
