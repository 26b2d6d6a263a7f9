import pytest
from barcode_deconvolver.hits import Hit


@pytest.fixture
def hit():
    """Factory of Hits with sensible defaults."""
    def _hit(min, max, strand='+', pattern='BC1', num_mismatches=0, read_id='read1'):
        return Hit(read_id, min, max, strand, pattern, num_mismatches)
    return _hit
