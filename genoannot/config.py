import argparse

from . import __version__
from .constants import WeakNamespace, cast_boolean
from .util import filepath


DEFAULTS = WeakNamespace()
""":class:`WeakNamespace`: holds the settings which can be overridden by the environment or the command line
"""
DEFAULTS.add(
    'bin_size', 100000, cast_type=int,
    defn='width (bp) of the bins used to partition the reference when indexing annotations',
)
DEFAULTS.add(
    'splice_window', 2, cast_type=int,
    defn='number of intronic bases at each end of an intron which are considered part of the splice site',
)
DEFAULTS.add(
    'mitochondrial_refs', ['chrM', 'M'], cast_type=str, listable=True,
    defn='reference names which are classified as mitochondrial without consulting the gene model',
)
DEFAULTS.add(
    'required_tags', [], cast_type=str, listable=True,
    defn='GTF tags that every record must carry to be loaded (ex. basic, CCDS)',
)
DEFAULTS.add('codon_table', 1, cast_type=int, defn='NCBI translation table used to translate coding sequences')
DEFAULTS.add(
    'flanking_aa', 10, cast_type=int, defn='number of amino acids to report on either side of a protein change'
)
DEFAULTS.add('passing_only', False, cast_type=cast_boolean, defn='only annotate VCF records which pass all filters')
DEFAULTS.add(
    'strict', False, cast_type=cast_boolean,
    defn='raise an error instead of skipping genes split across chromosome blocks',
)


class CustomHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    """
    subclass the default help formatter to stop default printing for required arguments
    """

    def _format_args(self, action, default_metavar):
        if action.metavar is None:
            action.metavar = get_metavar(action.type)
        return super(CustomHelpFormatter, self)._format_args(action, default_metavar)

    def _get_help_string(self, action):
        if action.required:
            return action.help
        return super(CustomHelpFormatter, self)._get_help_string(action)

    def add_arguments(self, actions):
        # sort the arguments alphanumerically so they print in the help that way
        actions = sorted(actions, key=lambda x: getattr(x, 'option_strings'))
        super(CustomHelpFormatter, self).add_arguments(actions)


def get_metavar(arg_type):
    """
    For a given argument type, returns the string to be used for the metavar argument in add_argument

    Example:
        >>> get_metavar(bool)
        '{True,False}'
    """
    if arg_type in [bool, cast_boolean]:
        return '{True,False}'
    elif arg_type == float:
        return 'FLOAT'
    elif arg_type == int:
        return 'INT'
    elif arg_type == filepath:
        return 'FILEPATH'
    return None


def augment_parser(arguments, parser):
    """
    Adds options to the argument parser. Separate function to facilitate the pipeline steps
    all having a similar look/feel
    """
    for arg in arguments:
        if arg == 'help':
            parser.add_argument('-h', '--help', action='help', help='show this help message and exit')
        elif arg == 'version':
            parser.add_argument(
                '-v', '--version', action='version', version='%(prog)s version ' + __version__,
                help='Outputs the version number'
            )
        elif arg == 'log':
            parser.add_argument('--log', help='redirect stdout to a log file', default=None)
        elif arg == 'log_level':
            parser.add_argument(
                '--log_level', help='level of logging to output', choices=['INFO', 'DEBUG'], default='INFO'
            )
        elif arg in DEFAULTS.keys():
            cast_type = DEFAULTS.type(arg)
            if DEFAULTS.is_listable(arg):
                parser.add_argument(
                    '--{}'.format(arg), default=DEFAULTS[arg], type=cast_type, nargs='*',
                    help=DEFAULTS.define(arg), metavar=get_metavar(cast_type) or 'STR'
                )
            else:
                parser.add_argument(
                    '--{}'.format(arg), default=DEFAULTS[arg], type=cast_type,
                    help=DEFAULTS.define(arg), metavar=get_metavar(cast_type)
                )
        else:
            raise KeyError('invalid argument', arg)
