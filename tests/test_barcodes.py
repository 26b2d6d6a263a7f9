import pytest
from barcode_deconvolver.barcodes import (Barcode, parse_attributes, read_pattern_file, write_pattern_file,
    pattern_filename, BarcodeGeometry)

PATTERNS = """>BC01 <clamplength=4> <readlength=80>
ACGAGTGCGTACGTACGTACGT
>BC02 sample two
acgctcgacaacgtacgtacgt
>BC03 <mismatch=1>
AGACGCACTCACGTACGTACGT
"""


@pytest.fixture
def pattern_file(tmp_path):
    f = tmp_path / 'barcodes.fasta'
    f.write_text(PATTERNS)
    return f


class TestPatternFile:
    """Reading & writing barcode pattern files."""

    def test_parse_attributes(self):
        assert parse_attributes('<clamplength=4> <readlength=80> text') == dict(clamplength='4', readlength='80')

    def test_read(self, pattern_file):
        barcodes = read_pattern_file(pattern_file)
        assert list(barcodes) == ['BC01', 'BC02', 'BC03']
        assert barcodes['BC01'] == Barcode('BC01', 'ACGAGTGCGTACGTACGTACGT', '<clamplength=4> <readlength=80>', 4, 80)
        assert barcodes['BC02'].seq == 'ACGCTCGACAACGTACGTACGT'
        assert barcodes['BC02'].desc == 'sample two'
        assert barcodes['BC02'].clamp_length is None

    def test_duplicate_ids(self, tmp_path):
        f = tmp_path / 'dup.fasta'
        f.write_text('>A\nACGT\n>A\nTTTT\n')
        with pytest.raises(ValueError):
            read_pattern_file(f)

    def test_bad_attribute(self, tmp_path):
        f = tmp_path / 'bad.fasta'
        f.write_text('>A <clamplength=six>\nACGT\n')
        with pytest.raises(ValueError):
            read_pattern_file(f)

    def test_empty(self, tmp_path):
        f = tmp_path / 'empty.fasta'
        f.write_text('')
        with pytest.raises(ValueError):
            read_pattern_file(f)

    def test_write_with_key(self, pattern_file, tmp_path):
        out = tmp_path / 'tmp' / 'barcodes.pat'
        write_pattern_file(read_pattern_file(pattern_file), out, mismatches=2, key='TCAG')
        lines = out.read_text().splitlines()
        assert lines[0] == '>BC01 <clamplength=4> <readlength=80> <mismatch=2>'
        assert lines[1] == 'TCAGACGAGTGCGTACGTACGTACGT'
        assert lines[4] == '>BC03 <mismatch=1>'

    def test_pattern_filename(self):
        assert pattern_filename('data/barcodes.fasta', 'tmp') == 'tmp/barcodes.pat'


class TestBarcodeGeometry:
    """Per-barcode clamp & length settings."""

    def test_overrides_and_defaults(self, pattern_file):
        geometry = BarcodeGeometry(read_pattern_file(pattern_file), clamp_length=6, min_read_length=50)
        assert geometry.clamp_length('BC01') == 4
        assert geometry.min_read_length('BC01') == 80
        assert geometry.clamp_length('BC02') == 6
        assert geometry.min_read_length('unknown') == 50

    def test_zero_override_is_kept(self):
        geometry = BarcodeGeometry([Barcode('A', 'ACGT', '', 0, None)], clamp_length=6)
        assert geometry.clamp_length('A') == 0

    def test_key_sequence(self):
        geometry = BarcodeGeometry(key='tcag')
        assert geometry.key == 'TCAG'
        assert geometry.key_length == 4
        assert geometry.key_prepended

    def test_virtual_key(self):
        geometry = BarcodeGeometry(key_length=4)
        assert geometry.key_length == 4
        assert not geometry.key_prepended

    def test_no_key(self):
        geometry = BarcodeGeometry()
        assert geometry.key_length == 0 and not geometry.key_prepended

    def test_key_and_length_conflict(self):
        with pytest.raises(ValueError):
            BarcodeGeometry(key='TCAG', key_length=4)
