from genoannot.annotate.file_io import DictSequenceSource, load_gtf

from ..util import MOCK_CHR1, MOCK_CHR2, get_data


ARGUMENT_ERROR = 2

_MOCK_MODEL = None


def get_mock_model():
    global _MOCK_MODEL
    if _MOCK_MODEL is None:
        _MOCK_MODEL = load_gtf(get_data('mock_genes.gtf'))
    return _MOCK_MODEL


def get_mock_source():
    return DictSequenceSource({'chr1': MOCK_CHR1, 'chr2': MOCK_CHR2})
