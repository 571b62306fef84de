#!python
import argparse
import logging
import platform
import sys
import time

from . import __version__
from . import config as _config
from . import util as _util
from .annotate import main as annotate_main
from .constants import EXIT_OK
from .util import filepath

SUBCOMMAND = ['effect', 'region', 'peptide']


def create_parser(argv):
    parser = argparse.ArgumentParser(formatter_class=_config.CustomHelpFormatter)
    parser.add_argument(
        '-v', '--version', action='version', version='%(prog)s version ' + __version__,
        help='Outputs the version number'
    )
    subp = parser.add_subparsers(dest='command', help='specifies which subprogram to use')
    subp.required = True
    required = {}  # hold required argument group by subparser command name
    optional = {}  # hold optional argument group by subparser command name
    for command in SUBCOMMAND:
        subparser = subp.add_parser(command, formatter_class=_config.CustomHelpFormatter, add_help=False)
        required[command] = subparser.add_argument_group('required arguments')
        optional[command] = subparser.add_argument_group('optional arguments')
        _config.augment_parser(['help', 'version', 'log', 'log_level'], optional[command])
        _config.augment_parser(
            ['required_tags', 'strict', 'passing_only', 'bin_size', 'mitochondrial_refs'], optional[command]
        )
        required[command].add_argument(
            '--annotations', '-a', required=True, type=filepath, help='path to the GTF gene annotations'
        )
        required[command].add_argument(
            '--variants', '-n', required=True, type=filepath, help='path to the input VCF file'
        )
        required[command].add_argument(
            '--output', '-o', required=True, help='path to the output file', metavar='FILEPATH'
        )

    for command in ['effect', 'peptide']:
        required[command].add_argument(
            '--reference_genome', '-r', required=True, type=filepath,
            help='path to the reference genome fasta (indexed fasta files are read without loading them)'
        )
        _config.augment_parser(['codon_table', 'splice_window'], optional[command])
    _config.augment_parser(['flanking_aa'], optional['peptide'])

    return parser, parser.parse_args(argv)


def main(argv=None):
    """
    sets up the parser and checks the validity of command line args
    loads reference files and redirects into the annotation main function

    Args:
        argv (List[str]): List of arguments, defaults to command line arguments
    """
    if argv is None:  # need to do at run time or patching will not behave as expected
        argv = sys.argv[1:]
    start_time = int(time.time())
    parser, args = create_parser(argv)

    log_conf = {'format': '{asctime} [{levelname}] {message}', 'style': '{', 'level': args.log_level}

    original_logging_handlers = logging.root.handlers[:]
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    if args.log:  # redirect stdout AND stderr to a log file
        log_conf['filename'] = args.log
    logging.basicConfig(**log_conf)

    _util.logger.info('genoannot: {}'.format(__version__))
    _util.logger.info('hostname: {}'.format(platform.node()))
    _util.log_arguments(args)

    try:
        annotate_main.main(**args.__dict__)
        duration = int(time.time()) - start_time
        hours = duration - duration % 3600
        minutes = duration - hours - (duration - hours) % 60
        seconds = duration - hours - minutes
        _util.logger.info(
            'run time (hh/mm/ss): {}:{:02d}:{:02d}'.format(hours // 3600, minutes // 60, seconds)
        )
        _util.logger.info('run time (s): {}'.format(duration))
    finally:
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
        for handler in original_logging_handlers:
            logging.root.addHandler(handler)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
