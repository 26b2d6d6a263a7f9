"""In-process fuzzy barcode search, an alternative to running fuzznuc.

Matches allow substitutions only (no indels), like fuzznuc's -pmismatch, and
are reported at every position where they occur. IUPAC ambiguity codes in
barcodes match any of the bases they stand for without counting as mismatches.
"""
import regex
from Bio.Seq import reverse_complement
from barcode_deconvolver.hits import Hit
from barcode_deconvolver import params

IUPAC = dict(A='A', C='C', G='G', T='T', U='T',
             R='[AG]', Y='[CT]', S='[CG]', W='[AT]', K='[GT]', M='[AC]',
             B='[CGT]', D='[AGT]', H='[ACT]', V='[ACG]', N='[ACGT]')

def pattern_regex(seq, mismatches=params.mismatches):
    """Compiled fuzzy regex for a nucleotide pattern."""
    try:
        body = ''.join(IUPAC[base] for base in seq.upper())
    except KeyError as e:
        raise ValueError("{:} contains a non-IUPAC character: {:}".format(seq, e)) from e
    return regex.compile('(?:{:}){{s<={:}}}'.format(body, mismatches), regex.IGNORECASE)

def _matches(compiled, seq):
    for m in compiled.finditer(seq, overlapped=True):
        yield m.start(), m.end(), m.fuzzy_counts[0]

def search_barcodes(sequences, barcodes, mismatches=params.mismatches, key=None, complement=True):
    """Yields Hits of every barcode to every sequence, grouped by read.

    Parameters:
    -----------
    sequences : Mapping of read id -> sequence string (as searched, i.e. with
        any key already prepended).

    barcodes : Mapping of barcode id -> Barcode.

    mismatches : Substitutions tolerated per match.

    key : Key sequence prepended to every barcode pattern (default: None).

    complement : Also search the reverse strand (default: True).
    """
    key = key or ''
    compiled = []
    for barcode in barcodes.values():
        forward = pattern_regex(key + barcode.seq, mismatches)
        reverse = pattern_regex(reverse_complement(key + barcode.seq), mismatches) if complement else None
        compiled.append((barcode.id, forward, reverse))

    for read_id, seq in sequences.items():
        seq = str(seq)
        for barcode_id, forward, reverse in compiled:
            for start, end, num_mismatches in _matches(forward, seq):
                yield Hit(read_id, start, end, '+', barcode_id, num_mismatches)
            if reverse is not None:
                for start, end, num_mismatches in _matches(reverse, seq):
                    yield Hit(read_id, start, end, '-', barcode_id, num_mismatches)
