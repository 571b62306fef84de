import os

import pytest

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')


long_running_test = pytest.mark.skipif(
    os.environ.get('RUN_FULL') != '1',
    reason='Only running FAST tests subset',
)


def get_data(*paths):
    return os.path.join(DATA_DIR, *paths)


# same sequence as data/mock_reference.fa
# chr1 holds GENE1 (+). exon 1 is [10,25) with the CDS starting at 15, the intron is [25,45) and exon 2 is [45,61)
# with the stop codon at [53,56). CDS: ATG GCC AAA C|TG TGG GAA TAA => MAKLWE*
MOCK_CHR1 = (
    'T' * 10
    + 'CCCCC' + 'ATGGCCAAAC'
    + 'GT' + 'A' * 17 + 'G'
    + 'TGTGGGAATAA' + 'CCCCC'
    + 'T' * 10
)

# chr2 holds GENE2 (-). exon 1 is [32,43), the intron is [22,32) and exon 2 is [10,22)
# CDS: ATG AAA C|CC TGG TAA => MKPW*
MOCK_CHR2 = 'T' * 10 + 'CCCCTTACCAGGCTGGGGGGACGTTTCATCCCC' + 'T' * 10
