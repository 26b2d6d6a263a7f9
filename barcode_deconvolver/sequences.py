"""Reading, keying, trimming & writing of reads (via Biopython).

Reads are held in an OrderedDict of id -> SeqRecord. Ids are cleaned on input
because fuzznuc replaces ':' in sequence names, and hits must join back to
their reads by id.
"""
import os
from collections import OrderedDict
from Bio import SeqIO
from Bio.Seq import reverse_complement
from barcode_deconvolver.shared import smart_open
from barcode_deconvolver import params

def clean_id(read_id):
    return read_id.replace(':', '_')

def infer_format(filename):
    """Biopython format name from a (possibly compressed) filename."""
    parts = os.path.basename(str(filename)).lower().split('.')
    if len(parts) > 1 and parts[-1] in params.compression_suffixes:
        parts.pop()
    ext = parts[-1] if len(parts) > 1 else ''
    if ext not in params.sequence_formats:
        raise ValueError("Cannot infer sequence format of {:}; expected one of: {:}.".format(
            filename, ', '.join(sorted(params.sequence_formats))))
    return params.sequence_formats[ext]

def iter_sequences(filename, fmt=None):
    fmt = infer_format(filename) if fmt is None else fmt
    if fmt == 'sff':
        # Quality/adapter clipped reads; trim points still address the keyed read.
        with smart_open(filename, 'rb') as f:
            yield from SeqIO.parse(f, 'sff-trim')
    else:
        with smart_open(filename, 'rt') as f:
            yield from SeqIO.parse(f, fmt)

def read_sequences(filename, fmt=None):
    sequences = OrderedDict()
    for record in iter_sequences(filename, fmt):
        if record.description.startswith(record.id):
            record.description = clean_id(record.id) + record.description[len(record.id):]
        record.id = clean_id(record.id)
        sequences[record.id] = record
    return sequences

def key_prepended(sequences, key):
    """True if every sequence already begins with `key`."""
    key = key.upper()
    return all(str(record.seq[:len(key)]).upper() == key for record in sequences.values())

def prepend_key(seq, key):
    """key + seq + revcomp(key): a keyed barcode then matches either end."""
    return key + seq + reverse_complement(key)

def search_sequences(sequences, key=None):
    """Sequences to search for barcodes & the offset of each read within them.

    Returns (OrderedDict of id -> str, offset). With a key, every searched
    sequence is key + read + revcomp(key); reads that already start with the
    key only receive the 3' copy, and the offset is then 0.
    """
    if not key:
        return OrderedDict((read_id, str(record.seq)) for read_id, record in sequences.items()), 0
    key = key.upper()
    if key_prepended(sequences, key):
        tail = reverse_complement(key)
        return OrderedDict((read_id, str(record.seq) + tail) for read_id, record in sequences.items()), 0
    return OrderedDict((read_id, prepend_key(str(record.seq), key)) for read_id, record in sequences.items()), len(key)

def read_lengths(searched):
    return {read_id: len(seq) for read_id, seq in searched.items()}

def write_search_fasta(searched, filename):
    """FASTA of the searched sequences, the input to fuzznuc."""
    with smart_open(filename, 'wt', makedirs=True) as f:
        for read_id, seq in searched.items():
            f.write('>{:}\n{:}\n'.format(read_id, seq))
    return filename

def trim_record(record, clear_range, key_length, barcode_id):
    """Copy of `record` cut to its clear range (qualities are kept).

    `clear_range` addresses the keyed read, so it is shifted back by
    `key_length` before slicing.
    """
    start, end = clear_range.start - key_length, clear_range.end - key_length
    trimmed = record[max(start, 0):max(end, 0)]
    trimmed.id = record.id
    trimmed.name = record.name
    original = record.description[len(record.id):].strip() if record.description.startswith(record.id) else record.description
    trimmed.description = ' '.join(filter(None, ['barcode={:}'.format(barcode_id),
                                                 'length={:}'.format(len(trimmed)), original]))
    return trimmed

def write_records(records, filename, fmt):
    if fmt not in {'fasta', 'fastq'}:
        raise ValueError("Can only write fasta or fastq files, not {:}.".format(fmt))
    with smart_open(filename, 'wt', makedirs=True) as f:
        return SeqIO.write(records, f, fmt)
