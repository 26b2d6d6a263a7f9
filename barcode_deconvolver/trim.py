"""Clear-range trimming of barcode (and clamp) from reads.

Given the hits of one barcode to one read, trim_clear_range() returns the
space-based [start, end) of the read that lies between barcode-clamp blocks:

    + strand hit:  ---Barcode---Clamp======== clear range ========>
    - strand hit:  ======== clear range ========Clamp---Barcode---

Only the hit layouts listed in _CASES have a defined geometry; anything else
is reported with a reason rather than guessed at.

Key sequences
-------------
454 reads start with a short key. The key can be handled two ways:

1) Virtual (key_length > 0, key_prepended=False): hits were found on reads
   without the key. Trim points are computed against `read_length` and then
   shifted by key_length, so they address the keyed read (as sfffile expects).

2) Prepended (key_prepended=True): hits were found on key + read + revcomp(key)
   and `read_length` is the length of that searched sequence. Neither copy of
   the key is part of the clear range, so the range is confined to
   [key_length, read_length - key_length) and no shift is applied.

Either way, returned coordinates address the keyed read.
"""
from collections import namedtuple
from operator import attrgetter
from barcode_deconvolver.hits import HitError, check_hit
from barcode_deconvolver import params

TOO_MANY_HITS = 'TOO_MANY_HITS'
MISORIENTED_BARCODES = 'MISORIENTED_BARCODES'
OVERLAPPING_BARCODES = 'OVERLAPPING_BARCODES'
BELOW_MIN_LENGTH = 'BELOW_MIN_LENGTH'       # Applied by callers, never by trim_clear_range()

class ClearRange(namedtuple('ClearRange', ['start', 'end', 'reason'])):
    """start is None when no unambiguous trim exists; reason then explains why."""
    __slots__ = ()

    @property
    def ok(self):
        return self.start is not None

    @property
    def length(self):
        return self.end - self.start if self.ok else 0

    @property
    def tag(self):
        return self.reason.partition('\t')[0] if self.reason else None

# Strands of the hits, ordered by min -> (start, end). `h` is the sorted hits,
# `c` the clamp length and `n` the 3' end of the read.
_CASES = {
    # ---Barcode---Clamp==========================
    '+':   lambda h, c, n: (h[0].max + c, n),
    # ==========================Clamp---Barcode---
    '-':   lambda h, c, n: (0, h[0].min - c),
    # ---Barcode---Clamp=========Clamp---Barcode---
    '+-':  lambda h, c, n: (h[0].max + c, h[1].min - c),
    # ---Barcode---Clamp-----Barcode---Clamp=======
    '++':  lambda h, c, n: (h[1].max + c, n),
    # =======Clamp---Barcode-----Clamp---Barcode---
    '--':  lambda h, c, n: (0, h[0].min - c),
    # ---Barcode---Clamp---Barcode---Clamp=====Clamp---Barcode---
    '++-': lambda h, c, n: (h[1].max + c, h[2].min - c),
    # ---Barcode---Clamp=====Clamp---Barcode---Clamp---Barcode---
    '+--': lambda h, c, n: (h[0].max + c, h[1].min - c),
}

def hit_locations(hits):
    """'pattern:min..max:strand:mismatches' of each hit, ordered by min."""
    return ' '.join(hit.location() for hit in sorted(hits, key=attrgetter('min')))

def _failure(reason, hits, end):
    return ClearRange(None, end, reason+'\t'+hit_locations(hits))

def trim_clear_range(hits, read_length, clamp_length=0, key_length=0, key_prepended=False):
    """ClearRange of a read from 1-3 hits to a single barcode.

    Parameters:
    -----------
    hits : Hits of one barcode pattern to one read.

    read_length : Length of the sequence the hits were found in.

    clamp_length : Bases beyond each barcode to trim as well (default: 0).

    key_length : Length of the key sequence, if any (default: 0).

    key_prepended : Whether the key was part of the searched sequence, see the
        module docstring (default: False).
    """
    hits = list(hits)
    if not hits:
        raise HitError("Cannot trim a read without hits.")
    for hit in hits:
        check_hit(hit)
    clamp_length = max(clamp_length or 0, 0)
    key_length = max(key_length or 0, 0)

    if key_prepended:
        five_prime, three_prime, offset = key_length, read_length - key_length, 0
    else:
        five_prime, three_prime, offset = 0, read_length, key_length

    ordered = sorted(hits, key=attrgetter('min'))
    if len(ordered) > params.max_hits:
        return _failure(TOO_MANY_HITS, ordered, three_prime + offset)
    case = _CASES.get(''.join(hit.strand for hit in ordered))
    if case is None:
        return _failure(MISORIENTED_BARCODES, ordered, three_prime + offset)

    start, end = case(ordered, clamp_length, three_prime)
    start = max(start, five_prime)
    end = min(end, three_prime)
    if end < start:
        return _failure(OVERLAPPING_BARCODES, ordered, end + offset)
    return ClearRange(start + offset, end + offset, None)
