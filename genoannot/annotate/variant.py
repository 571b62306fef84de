"""
describes the effect of a small variant on a coding transcript (consequence, HGVS-like notation and impact)
"""
from collections import namedtuple

from ..config import DEFAULTS
from ..constants import CONSEQUENCE, IMPACT, IMPACT_BY_CONSEQUENCE, STOP_AA, reverse_complement
from ..error import VariantCallError


UNKNOWN_AA = '?'


def impact(consequence):
    """
    Args:
        consequence (CONSEQUENCE): the consequence term

    Returns:
        IMPACT: the impact tier of the consequence. Anything not explicitly ranked is a MODIFIER

    Example:
        >>> impact('missense_variant')
        'MODERATE'
        >>> impact('intron_variant')
        'MODIFIER'
    """
    return IMPACT_BY_CONSEQUENCE.get(consequence, IMPACT.MODIFIER)


def trim_alleles(pos, ref, alt):
    """
    remove the bases shared by the ref and alt alleles (the VCF anchor base for indels)

    Args:
        pos (int): 1-based position of the first base of the ref allele
        ref (str): the reference allele
        alt (str): the alternate allele

    Returns:
        Tuple[int,str,str]: the 0-based start of the trimmed ref allele and the trimmed alleles

    Example:
        >>> trim_alleles(100, 'ACT', 'A')
        (100, 'CT', '')
        >>> trim_alleles(100, 'A', 'AGG')
        (100, '', 'GG')
    """
    start = pos - 1
    while ref and alt and ref[0] == alt[0]:
        ref = ref[1:]
        alt = alt[1:]
        start += 1
    while ref and alt and ref[-1] == alt[-1]:
        ref = ref[:-1]
        alt = alt[:-1]
    return start, ref, alt


def _residue(peptide, index):
    if 0 <= index < len(peptide):
        return peptide[index]
    raise VariantCallError('residue is outside of the translated protein', index + 1, peptide)


def _alt_residue(peptide, index):
    """
    residue of the variant protein, which may end without a stop when the edit runs to the end of the coding sequence
    """
    if 0 <= index < len(peptide):
        return peptide[index]
    return UNKNOWN_AA


def _truncate_at_stop(peptide):
    if STOP_AA in peptide:
        return peptide[:peptide.index(STOP_AA) + 1]
    return peptide


def _stop_distance(peptide, start):
    """
    number of residues from the residue at start (counted as 1) up to and including the next stop
    """
    index = peptide.find(STOP_AA, start)
    if index < 0:
        return UNKNOWN_AA
    return str(index - start + 1)


ProteinChange = namedtuple('ProteinChange', ['ref_aa', 'alt_aa', 'offset', 'ref_changed', 'alt_changed'])
"""
the difference between the reference and variant proteins

- ``ref_aa``/``alt_aa``: the compared proteins. Indels compare the proteins up to and including their first stop
- ``offset``: 0-based index of the first residue which differs
- ``ref_changed``/``alt_changed``: the differing residues once the common prefix and suffix are removed
"""


def compare_proteins(ref_aa, alt_aa):
    """
    localize the change between two protein sequences by stripping their common prefix then their common suffix

    Returns:
        ProteinChange: the change. ``offset`` is None when the proteins are identical

    Example:
        >>> compare_proteins('MAKL*', 'MAQL*')
        ProteinChange(ref_aa='MAKL*', alt_aa='MAQL*', offset=2, ref_changed='K', alt_changed='Q')
    """
    ref_aa = _truncate_at_stop(ref_aa)
    alt_aa = _truncate_at_stop(alt_aa)
    if ref_aa == alt_aa:
        return ProteinChange(ref_aa, alt_aa, None, '', '')
    prefix = 0
    while prefix < min(len(ref_aa), len(alt_aa)) and ref_aa[prefix] == alt_aa[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < min(len(ref_aa), len(alt_aa)) - prefix
        and ref_aa[len(ref_aa) - suffix - 1] == alt_aa[len(alt_aa) - suffix - 1]
    ):
        suffix += 1
    return ProteinChange(
        ref_aa, alt_aa, prefix, ref_aa[prefix:len(ref_aa) - suffix], alt_aa[prefix:len(alt_aa) - suffix]
    )


def compare_codons(ref_aa, alt_aa, aa_pos, aa_end_pos):
    """
    localize a substitution to the residues of the codons it edits. The proteins are not truncated, so residues
    after an internal stop are compared as well

    Args:
        ref_aa (str): the reference protein
        alt_aa (str): the protein with the substitution applied (same length as ref_aa)
        aa_pos (int): first edited codon (1-based)
        aa_end_pos (int): last edited codon (1-based)

    Returns:
        ProteinChange: the change. ``offset`` is None when the edited codons translate to the same residues

    Raises:
        VariantCallError: the edited codons are not translated

    Example:
        >>> compare_codons('M*AK*', 'M*DK*', 3, 3)
        ProteinChange(ref_aa='M*AK*', alt_aa='M*DK*', offset=2, ref_changed='A', alt_changed='D')
    """
    start, end = aa_pos - 1, aa_end_pos
    if start < 0 or end > min(len(ref_aa), len(alt_aa)):
        raise VariantCallError('edited codons are outside of the translated protein', aa_pos, aa_end_pos)
    ref_changed, alt_changed = ref_aa[start:end], alt_aa[start:end]
    if ref_changed == alt_changed:
        return ProteinChange(ref_aa, alt_aa, None, '', '')
    while ref_changed[0] == alt_changed[0]:
        ref_changed, alt_changed = ref_changed[1:], alt_changed[1:]
        start += 1
    while ref_changed[-1] == alt_changed[-1]:
        ref_changed, alt_changed = ref_changed[:-1], alt_changed[:-1]
    return ProteinChange(ref_aa, alt_aa, start, ref_changed, alt_changed)


def cds_notation(cds_positions, ref, alt, antisense=False):
    """
    HGVS-like coding DNA notation for a trimmed variant

    Args:
        cds_positions (List[int]): the CDS positions of the affected reference bases. For an insertion, the positions
            of the two bases flanking it
        ref (str): trimmed reference allele (forward strand)
        alt (str): trimmed alternate allele (forward strand)
        antisense (bool): the transcript is on the reverse strand. Bases are reported on the transcript strand

    Example:
        >>> cds_notation([10], 'A', 'G')
        'c.10A>G'
        >>> cds_notation([10, 11, 12], 'ACG', '')
        'c.10_12del'
        >>> cds_notation([10, 11], '', 'TT')
        'c.10_11insTT'
    """
    if antisense:
        ref = reverse_complement(ref)
        alt = reverse_complement(alt)
    start, end = min(cds_positions), max(cds_positions)
    span = str(start) if start == end else '{}_{}'.format(start, end)
    if not ref:
        return 'c.{}ins{}'.format(span, alt)
    if len(ref) == 1 and len(alt) == 1:
        return 'c.{}{}>{}'.format(start, ref, alt)
    if not alt:
        return 'c.{}del'.format(span)
    return 'c.{}delins{}'.format(span, alt)


def protein_notation(change, codon_aa_pos=None, frameshift=False, coding_delta=0):
    """
    HGVS-like (single letter) protein notation

    Args:
        change (ProteinChange): the localized protein change
        codon_aa_pos (int): residue of the first edited codon. Used to name unchanged (synonymous) residues
        frameshift (bool): the variant shifts the reading frame
        coding_delta (int): change in the length of the coding sequence

    Example:
        >>> protein_notation(compare_proteins('MAKL*', 'MAQL*'))
        'p.K3Q'
        >>> protein_notation(compare_proteins('MAKL*', 'MAKL*'), codon_aa_pos=3)
        'p.K3='
        >>> protein_notation(compare_proteins('MAKL*', 'MA*'))
        'p.K3*'
    """
    ref_aa, alt_aa, offset, ref_changed, alt_changed = change
    if offset is None:
        if coding_delta == 0 and codon_aa_pos is not None:
            return 'p.{}{}='.format(_residue(ref_aa, codon_aa_pos - 1), codon_aa_pos)
        return 'p.='

    first = offset + 1
    last = offset + len(ref_changed)
    first_ref = _residue(ref_aa, offset)

    if frameshift:
        return 'p.{}{}{}fs*{}'.format(first_ref, first, _alt_residue(alt_aa, offset), _stop_distance(alt_aa, offset))

    if first_ref == STOP_AA and (coding_delta == 0 or len(ref_changed) == 1):
        # stop loss extends the protein into the (untranslated) downstream sequence
        return 'p.*{}{}ext*{}'.format(first, _alt_residue(alt_aa, offset), _stop_distance(alt_aa, offset + 1))

    if coding_delta == 0 and _residue(alt_aa, offset) == STOP_AA:
        return 'p.{}{}*'.format(first_ref, first)

    if not ref_changed:
        return 'p.{}{}_{}{}ins{}'.format(
            _residue(ref_aa, offset - 1), offset, _residue(ref_aa, offset), offset + 1, alt_changed
        )

    span = '{}{}'.format(first_ref, first)
    if last > first:
        span += '_{}{}'.format(_residue(ref_aa, last - 1), last)
    if not alt_changed:
        return 'p.{}del'.format(span)
    if len(ref_changed) == 1 and len(alt_changed) == 1:
        return 'p.{}{}'.format(span, alt_changed)
    return 'p.{}delins{}'.format(span, alt_changed)


def coding_consequence(change, coding_delta):
    """
    consequence of an edit within the coding bases

    Args:
        change (ProteinChange): the localized protein change
        coding_delta (int): change in the length of the coding sequence (alt minus ref)
    """
    if coding_delta % 3 != 0:
        return CONSEQUENCE.FRAMESHIFT
    elif coding_delta < 0:
        return CONSEQUENCE.INFRAME_DELETION
    elif coding_delta > 0:
        return CONSEQUENCE.INFRAME_INSERTION
    elif change.offset is None:
        return CONSEQUENCE.SYNONYMOUS
    elif _residue(change.alt_aa, change.offset) == STOP_AA:
        return CONSEQUENCE.STOP_GAINED
    elif _residue(change.ref_aa, change.offset) == STOP_AA:
        return CONSEQUENCE.STOP_LOST
    return CONSEQUENCE.MISSENSE


class CodingVariant:
    """
    the result of applying a variant to a coding sequence
    """

    def __init__(
        self, consequence, sequence, cds_notation='', aa_notation='', cds_pos=-1, aa_pos=-1, aa_end_pos=-1
    ):
        """
        Args:
            consequence (CONSEQUENCE): the consequence term
            sequence (CodingSequence): the coding sequence with the variant applied
            cds_notation (str): the coding DNA change (ex. c.10A>G)
            aa_notation (str): the protein change (ex. p.K3Q)
            cds_pos (int): the first affected CDS position
            aa_pos (int): the first changed residue (1-based)
            aa_end_pos (int): the last changed reference residue (1-based)
        """
        self.consequence = consequence
        self.sequence = sequence
        self.cds_notation = cds_notation
        self.aa_notation = aa_notation
        self.cds_pos = cds_pos
        self.aa_pos = aa_pos
        self.aa_end_pos = aa_end_pos

    @property
    def impact(self):
        return impact(self.consequence)

    @property
    def is_coding(self):
        return self.aa_pos > 0

    def __repr__(self):
        return 'CodingVariant({}, {}, {})'.format(self.consequence, self.cds_notation, self.aa_notation)


PEPTIDE_CONSEQUENCES = {
    CONSEQUENCE.MISSENSE,
    CONSEQUENCE.INFRAME_DELETION,
    CONSEQUENCE.INFRAME_INSERTION,
    CONSEQUENCE.FRAMESHIFT,
}


def peptide_for_variant(cds, variant, flanking=None, table=None):
    """
    reference and variant peptides surrounding a protein altering variant

    Args:
        cds (CodingSequence): the reference coding sequence
        variant (CodingVariant): the variant called against cds
        flanking (int): residues to include on either side of the change. A negative value returns the full proteins
        table (int): NCBI codon table identifier

    Returns:
        Tuple[str,str]: the reference and variant peptides or None if the consequence does not alter the peptide
    """
    if variant.consequence not in PEPTIDE_CONSEQUENCES or variant.aa_pos < 1:
        return None
    mutant = variant.sequence
    flanking = DEFAULTS.flanking_aa if flanking is None else flanking
    if flanking < 0:
        return cds.aa_window(1, len(cds), table=table), mutant.aa_window(1, len(mutant), table=table)

    ref_peptide = cds.aa_window(variant.aa_pos, flanking, variant.aa_end_pos, table=table)

    if variant.consequence == CONSEQUENCE.FRAMESHIFT:
        # everything from the frameshift up to the new stop
        start = max(0, variant.aa_pos - 1 - flanking)
        alt_peptide = mutant.aa_string(table)[start:].split(STOP_AA)[0]
        return ref_peptide, alt_peptide

    size_delta = len(_truncate_at_stop(mutant.aa_string(table))) - len(_truncate_at_stop(cds.aa_string(table)))
    alt_end = max(variant.aa_pos - 1, variant.aa_end_pos + size_delta)
    return ref_peptide, mutant.aa_window(variant.aa_pos, flanking, alt_end, table=table)
