"""Barcode pattern files and the geometry used to trim each barcode.

Pattern files are FASTA, with optional per-barcode attributes in the header:

    >BC01 <clamplength=6> <readlength=50>
    ACGAGTGCGTACGTACGTACGT

`clamplength` overrides the default clamp length and `readlength` overrides the
default minimum length of a clear range, for that barcode only.
"""
import re, os
from collections import namedtuple, OrderedDict
from Bio import SeqIO
from barcode_deconvolver.shared import smart_open
from barcode_deconvolver import params

Barcode = namedtuple('Barcode', ['id', 'seq', 'desc', 'clamp_length', 'read_length'])

attribute_re = re.compile(r'<?\s*(\w+)\s*=\s*([^\s<>]+)\s*>?')
mismatch_re = re.compile(r'mismatch=\d+')

def parse_attributes(desc):
    """{'clamplength': '6', ...} from `<key=value>` tokens of a FASTA description."""
    return dict(attribute_re.findall(desc))

def _optional_int(attributes, key, barcode_id):
    value = attributes.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ValueError("Barcode {:} has a non-integer {:} ({:}).".format(barcode_id, key, value)) from e

def read_pattern_file(filename):
    """OrderedDict of barcode id -> Barcode, in file order."""
    barcodes = OrderedDict()
    with smart_open(filename, 'rt') as f:
        for record in SeqIO.parse(f, 'fasta'):
            desc = record.description[len(record.id):].strip()
            attributes = parse_attributes(desc)
            if record.id in barcodes:
                raise ValueError("Barcode {:} appears twice in {:}.".format(record.id, filename))
            barcodes[record.id] = Barcode(record.id, str(record.seq).upper(), desc,
                                          _optional_int(attributes, 'clamplength', record.id),
                                          _optional_int(attributes, 'readlength', record.id))
    if not barcodes:
        raise ValueError("No barcodes found in {:}.".format(filename))
    return barcodes

def write_pattern_file(barcodes, filename, mismatches=params.mismatches, key=None):
    """Writes the pattern file searched by fuzznuc.

    The key (if any) is prepended to every barcode and a `<mismatch=N>`
    attribute is added to headers that lack one.
    """
    with smart_open(filename, 'wt', makedirs=True) as f:
        for barcode in barcodes.values():
            header = ' '.join(filter(None, [barcode.id, barcode.desc]))
            if not mismatch_re.search(header):
                header += ' <mismatch={:}>'.format(mismatches)
            f.write('>{:}\n{:}\n'.format(header, (key or '') + barcode.seq))
    return filename

class BarcodeGeometry(object):
    """Clamp, minimum-length & key settings applied when trimming each barcode.

    A `key` sequence means the key is physically prepended to the searched reads
    (key_prepended=True). A bare `key_length` describes a virtual key: reads are
    searched without it, but trim points must address the keyed read.
    """
    def __init__(self, barcodes=(), clamp_length=params.clamp_length, min_read_length=params.min_read_length,
                 key=None, key_length=None):
        if key and key_length:
            raise ValueError("Provide either a key sequence or a key length, not both.")
        self.barcodes = barcodes if hasattr(barcodes, 'values') else OrderedDict((b.id, b) for b in barcodes)
        self.default_clamp_length = clamp_length
        self.default_min_read_length = min_read_length
        self.key = key.upper() if key else None
        self.key_length = len(self.key) if self.key else (key_length or 0)

    @property
    def key_prepended(self):
        return self.key is not None

    def _override(self, barcode_id, attr, default):
        barcode = self.barcodes.get(barcode_id)
        value = getattr(barcode, attr) if barcode is not None else None
        return default if value is None else value

    def clamp_length(self, barcode_id):
        return self._override(barcode_id, 'clamp_length', self.default_clamp_length)

    def min_read_length(self, barcode_id):
        return self._override(barcode_id, 'read_length', self.default_min_read_length)

    def __repr__(self):
        return "BarcodeGeometry({:} barcodes, clamp_length={:}, min_read_length={:}, key={!r}, key_length={:})".format(
            len(self.barcodes), self.default_clamp_length, self.default_min_read_length, self.key, self.key_length)

def pattern_filename(pattern_file, tmpdir=params.tmpdir):
    base = os.path.splitext(os.path.basename(str(pattern_file)))[0]
    return os.path.join(tmpdir, base+'.pat')
