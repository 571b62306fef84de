"""
module responsible for small utility functions and constants used throughout the genoannot package
"""
import os
import re

from Bio.Seq import Seq


EXIT_OK = 0


def cast_boolean(input_value):
    value = str(input_value).lower()
    if value in ['t', 'true', '1', 'y', 'yes', '+']:
        return True
    elif value in ['f', 'false', '0', 'n', 'no', '-']:
        return False
    raise TypeError('casting to boolean failed', input_value)


class Namespace:
    """
    Namespace to hold module constants and controlled vocabularies

    Example:
        >>> nspace = Namespace(thing=1, otherthing=2)
        >>> nspace.thing
        1
        >>> nspace.otherthing
        2
    """
    DELIM = r'[;,\s]+'
    """:class:`str`: delimiter used in parsing listable variables from the environment"""

    ENV_PREFIX = 'GENOANNOT'

    def __init__(self, *pos, **kwargs):
        object.__setattr__(self, '_defns', {})
        object.__setattr__(self, '_types', {})
        object.__setattr__(self, '_members', {})
        object.__setattr__(self, '_listable', set())
        object.__setattr__(self, '_env_overwritable', set())

        for key in pos:
            if key in self._members:
                raise AttributeError('Cannot respecify existing attribute', key, self._members[key])
            self[key] = key
        for attr, val in kwargs.items():
            if attr in self._members:
                raise AttributeError('Cannot respecify existing attribute', attr, self._members[attr])
            self[attr] = val
        for attr, value in self._members.items():
            self._set_type(attr, type(value))

    def __repr__(self):
        return '{}({})'.format(
            self.__class__.__name__, ', '.join(sorted(['{}={}'.format(k, repr(v)) for k, v in self.items()]))
        )

    def get_env_name(self, attr):
        """
        Get the name of the corresponding environment variable

        Example:
            >>> Namespace(bin_size=1).get_env_name('bin_size')
            'GENOANNOT_BIN_SIZE'
        """
        return '{}_{}'.format(self.ENV_PREFIX, attr).upper()

    def get_env_var(self, attr):
        """
        retrieve the environment variable definition of a given attribute

        Raises:
            KeyError: the environment variable is not set
        """
        env = os.environ[self.get_env_name(attr)].strip()
        attr_type = self._types.get(attr, str)
        if attr in self._listable:
            return self.parse_listable_string(env, attr_type)
        return attr_type(env)

    @classmethod
    def parse_listable_string(cls, string, cast_type=str):
        """
        Example:
            >>> Namespace.parse_listable_string('1,2;3', int)
            [1, 2, 3]
        """
        string = string.strip()
        return [cast_type(val) for val in re.split(cls.DELIM, string)] if string else []

    def is_env_overwritable(self, attr):
        return attr in self._env_overwritable

    def is_listable(self, attr):
        return attr in self._listable

    def __getattribute__(self, attr):
        try:
            return object.__getattribute__(self, attr)
        except AttributeError as err:
            variables = object.__getattribute__(self, '_members')
            if attr not in variables:
                raise err
            if self.is_env_overwritable(attr):
                try:
                    return self.get_env_var(attr)
                except KeyError:
                    pass
            return variables[attr]

    def __getitem__(self, key):
        return getattr(self, key)

    def __setitem__(self, key, val):
        self.__setattr__(key, val)

    def __setattr__(self, attr, val):
        if attr.startswith('_'):
            raise ValueError('cannot set private', attr)
        object.__getattribute__(self, '_members')[attr] = val

    def __iter__(self):
        return iter(self.keys())

    def __contains__(self, value):
        return value in self.values()

    def keys(self):
        return list(self._members)

    def values(self):
        return [self[k] for k in self._members]

    def items(self):
        return [(k, self[k]) for k in self._members]

    def to_dict(self):
        return dict(self.items())

    def get(self, key, *pos):
        """
        get an attribute, return a default (if given) if the attribute does not exist
        """
        if len(pos) > 1:
            raise TypeError('too many arguments. get takes a single \'default\' value argument')
        try:
            return self[key]
        except AttributeError as err:
            if pos:
                return pos[0]
            raise err

    def enforce(self, value):
        """
        checks that the current namespace has a given value

        Raises:
            KeyError: the value did not exist
        """
        if value not in self.values():
            raise KeyError('value {0} is not a valid member of '.format(repr(value)), self.values())
        return value

    def reverse(self, value):
        """
        for a given value, return the associated key

        Example:
            >>> STRAND.reverse('+')
            'POS'
        """
        result = [key for key in self.keys() if self[key] == value]
        if len(result) > 1:
            raise KeyError('could not reverse, the mapping is not unique', value, result)
        elif not result:
            raise KeyError('input value is not assigned to a key', value)
        return result[0]

    def _set_type(self, attr, cast_type):
        self._types[attr] = cast_boolean if cast_type == bool else cast_type

    def type(self, attr, *pos):
        if len(pos) > 1:
            raise TypeError('too many arguments. type takes a single \'default\' value argument')
        try:
            return self._types[attr]
        except KeyError as err:
            if pos:
                return pos[0]
            raise err

    def define(self, attr, *pos):
        """
        Get the definition of a given attribute or return a default (when given) if the attribute does not exist

        Raises:
            KeyError: the attribute does not exist and a default was not given
        """
        if len(pos) > 1:
            raise TypeError('too many arguments. define takes a single \'default\' value argument')
        try:
            return self._defns[attr]
        except KeyError as err:
            if pos:
                return pos[0]
            raise err

    def add(self, attr, value, defn=None, cast_type=None, env_overwritable=False, listable=False):
        """
        Add an attribute to the name space

        Args:
            attr (str): name of the attribute being added
            value: the value of the attribute
            defn (str): the definition, used in generating help menus
            cast_type (callable): the function to use in casting the value
            env_overwritable (bool): True if this attribute will be overriden by its environment variable equivalent
            listable (bool): True if this attribute can have multiple values
        """
        self._set_type(attr, cast_type if cast_type else type(value))
        if defn:
            self._defns[attr] = defn
        if env_overwritable:
            self._env_overwritable.add(attr)
        if listable:
            self._listable.add(attr)
        self[attr] = value

    def __call__(self, value):
        try:
            return self.enforce(value)
        except KeyError:
            raise TypeError('Invalid value {} for {}. Must be a valid member: {}'.format(
                repr(value), self.__class__.__name__, self.values()))


class WeakNamespace(Namespace):
    """
    Namespace where every attribute may be overridden by its environment variable
    """

    def is_env_overwritable(self, attr):
        return True


CODON_SIZE = 3
""":class:`int`: the number of bases making up a codon"""

STOP_AA = '*'
""":class:`str`: The amino acid expected to end translation"""


def reverse_complement(s):
    """
    wrapper for the Bio.Seq reverse_complement method

    Args:
        s (str): the input DNA sequence

    Returns:
        :class:`str`: the reverse complement of the input sequence

    Example:
        >>> reverse_complement('ATCCGGT')
        'ACCGGAT'
    """
    input_string = str(s)
    if not re.match('^[A-Za-z]*$', input_string):
        raise ValueError('unexpected sequence format. cannot reverse complement', input_string)
    return str(Seq(input_string).reverse_complement())


def translate(s, reading_frame=0, table=1):
    """
    given a DNA sequence, translates it and returns the protein amino acid sequence

    Args:
        s (str): the input DNA sequence
        reading_frame (int): where to start translating the sequence
        table (int): NCBI codon table identifier

    Returns:
        str: the amino acid sequence, stop codons are kept as '*'

    Example:
        >>> translate('ATGGCCTAAG')
        'MA*'
    """
    reading_frame = reading_frame % CODON_SIZE
    temp = str(s)[reading_frame:]
    temp = temp[:len(temp) - len(temp) % CODON_SIZE]
    return str(Seq(temp).translate(table=table))


STRAND = Namespace(POS='+', NEG='-', NS='?')
""":class:`Namespace`: holds controlled vocabulary for allowed strand values

- ``POS``: the positive/forward strand
- ``NEG``: the negative/reverse strand
- ``NS``: strand is not specified
"""
setattr(STRAND, 'compare', lambda x, y: True if STRAND.NS in [x, y] else (x == y))
setattr(STRAND, 'parse', lambda x: x if x in [STRAND.POS, STRAND.NEG] else STRAND.NS)


CIGAR = Namespace(M=0, I=1, D=2, N=3, S=4, H=5, P=6, X=8, EQ=7)  # noqa
""":class:`Namespace`: Enum-like. For readable cigar values (as used by pysam cigartuples)

- ``N``: skipped region from the reference, used to mark spliced alignments
"""


FEATURE = Namespace(EXON='exon', CDS='CDS', START_CODON='start_codon', STOP_CODON='stop_codon')
""":class:`Namespace`: GTF feature types consumed when building the gene model"""


CONSEQUENCE = Namespace(
    TRANSCRIPTIONAL_START_LOSS='transcriptional_start_loss',
    SPLICE_DONOR='splice_donor_variant',
    SPLICE_ACCEPTOR='splice_acceptor_variant',
    INTRON='intron_variant',
    UTR5='5_prime_UTR_variant',
    UTR3='3_prime_UTR_variant',
    UPSTREAM='upstream_gene_variant',
    DOWNSTREAM='downstream_gene_variant',
    FRAMESHIFT='frameshift_variant',
    INFRAME_DELETION='inframe_deletion',
    INFRAME_INSERTION='inframe_insertion',
    SYNONYMOUS='synonymous_variant',
    MISSENSE='missense_variant',
    STOP_GAINED='stop_gained',
    STOP_LOST='stop_lost',
    START_LOST='start_lost',
)
""":class:`Namespace`: controlled vocabulary for the consequence of a variant on a transcript"""


IMPACT = Namespace(HIGH='HIGH', MODERATE='MODERATE', LOW='LOW', MODIFIER='MODIFIER')
""":class:`Namespace`: impact tiers assigned to consequences"""


IMPACT_BY_CONSEQUENCE = {
    CONSEQUENCE.TRANSCRIPTIONAL_START_LOSS: IMPACT.HIGH,
    CONSEQUENCE.SPLICE_ACCEPTOR: IMPACT.HIGH,
    CONSEQUENCE.SPLICE_DONOR: IMPACT.HIGH,
    CONSEQUENCE.STOP_GAINED: IMPACT.HIGH,
    CONSEQUENCE.STOP_LOST: IMPACT.HIGH,
    CONSEQUENCE.FRAMESHIFT: IMPACT.HIGH,
    CONSEQUENCE.START_LOST: IMPACT.HIGH,
    CONSEQUENCE.INFRAME_INSERTION: IMPACT.MODERATE,
    CONSEQUENCE.INFRAME_DELETION: IMPACT.MODERATE,
    CONSEQUENCE.MISSENSE: IMPACT.MODERATE,
    CONSEQUENCE.SYNONYMOUS: IMPACT.LOW,
}


COLUMNS = Namespace(
    chrom='chrom',
    pos='pos',
    ref='ref',
    alt='alt',
    gene='gene',
    transcript_id='transcript_id',
    protein_id='protein_id',
    cds_variant='cds_variant',
    protein_variant='protein_variant',
    consequence='consequence',
    impact='impact',
)
""":class:`Namespace`: Column names for the variant effect output rows"""


POSITION_COLUMNS = Namespace(
    chrom='chrom',
    pos='pos',
    gene='gene',
    gene_strand='gene_strand',
    gene_region='gene_region',
)
""":class:`Namespace`: Column names for the per-position gene annotation rows"""


PEPTIDE_COLUMNS = Namespace(
    chrom='chrom',
    pos='pos',
    ref='ref',
    alt='alt',
    gene='gene',
    transcript_id='transcript_id',
    consequence='consequence',
    protein_variant='protein_variant',
    ref_peptide='ref_peptide',
    alt_peptide='alt_peptide',
)
""":class:`Namespace`: Column names for the peptide window output rows"""


def sort_columns(input_columns, columns=COLUMNS):
    order = {col: i for i, col in enumerate(columns.values())}
    temp = sorted([c for c in input_columns if c in order], key=lambda x: order[x])
    return temp + sorted([c for c in input_columns if c not in order])
