import errno
import logging
import os
import re
from glob import glob

from braceexpand import braceexpand

from .constants import COLUMNS, sort_columns

logger = logging.getLogger('genoannot')


def bash_expands(*expressions):
    """
    expand a file glob expression, allowing bash-style brackets.

    Returns:
        list: a list of files

    Example:
        >>> bash_expands('./{test,doc}/*py')
        [...]
    """
    result = []
    for expression in expressions:
        eresult = []
        for name in braceexpand(expression):
            for fname in glob(name):
                eresult.append(fname)
        if not eresult:
            raise FileNotFoundError('The expression does not match any files', expression)
        result.extend(eresult)
    return [os.path.abspath(f) for f in result]


def filepath(path):
    try:
        file_list = bash_expands(path)
    except FileNotFoundError:
        raise TypeError('File does not exist', path)
    if len(file_list) > 1:
        raise TypeError('File pattern match multiple files and expected only one', path)
    return file_list[0]


def natural_sort_key(name):
    """
    sort key that orders reference names the way a person would (chr2 before chr10)

    Example:
        >>> sorted(['chr10', 'chr2', 'chrX'], key=natural_sort_key)
        ['chr2', 'chr10', 'chrX']
    """
    return tuple(
        (0, int(part), '') if part.isdigit() else (1, 0, part.lower())
        for part in re.split(r'(\d+)', str(name)) if part
    )


def log_arguments(args):
    """
    output the arguments to the console

    Args:
        args (argparse.Namespace): the namespace to print arguments for
    """
    logger.info('arguments')
    indent = ' '
    for arg, val in sorted(args.__dict__.items()):
        if isinstance(val, list):
            if len(val) <= 1:
                logger.info('{}{} = {}'.format(indent, arg, val))
                continue
            logger.info('{}{} = ['.format(indent, arg))
            for value in val:
                logger.info('{}{}'.format(indent * 2, repr(value)))
            logger.info('{}]'.format(indent))
        else:
            logger.info('{}{} = {}'.format(indent, arg, repr(val)))


def mkdirp(dirname):
    """
    Make a directory or path of directories. Suppresses the error that is normally raised when the directory
    already exists
    """
    logger.info("creating output directory: '{}'".format(dirname))
    try:
        os.makedirs(dirname)
    except OSError as exc:
        if exc.errno == errno.EEXIST and os.path.isdir(dirname):
            pass
        else:
            raise exc
    return dirname


def output_tabbed_file(rows, filename, header=None, columns=COLUMNS):
    """
    write a list of row dictionaries to a tab delimited file with a commented header line

    Args:
        rows (List[dict]): the rows to write
        filename (str): path to the output file
        header (List[str]): columns to write, defaults to every key found in the rows
        columns (Namespace): controlled column vocabulary used to order the header
    """
    if header is None:
        header = set()
        for row in rows:
            header.update(row.keys())
        header = sort_columns(header, columns)

    if os.path.dirname(filename):
        mkdirp(os.path.dirname(filename))
    with open(filename, 'w') as fh:
        logger.info('writing: {}'.format(filename))
        fh.write('#' + '\t'.join(header) + '\n')
        for row in rows:
            fh.write('\t'.join([str(row.get(c, None)) for c in header]) + '\n')
