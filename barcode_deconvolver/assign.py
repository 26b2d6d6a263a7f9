"""Assignment of reads to barcodes from their hits.

A read is assigned only when every hit implicates the same barcode pattern.
Hits to two different patterns make the read ambiguous (multicoded), however
lopsided their mismatch counts: a 0-mismatch hit to A and a 5-mismatch hit to
B is never resolved in favour of A.
"""
from collections import namedtuple
from operator import attrgetter
from barcode_deconvolver.hits import HitError

Unique = namedtuple('Unique', ['pattern', 'hits'])
Ambiguous = namedtuple('Ambiguous', ['hits'])

def sort_by_mismatches(hits):
    # Stable: hits with equal mismatches keep the order the search reported them in.
    return sorted(hits, key=attrgetter('num_mismatches'))

def classify(hits):
    """Unique(pattern, hits) or Ambiguous(hits) for one read's hits.

    Hits are returned sorted by ascending mismatches. Ambiguous outcomes keep
    every hit so that the full multi-barcode hit list can be reported.
    """
    hits = list(hits)
    if not hits:
        raise HitError("Cannot classify a read without hits.")
    if len(hits) == 1:
        return Unique(hits[0].pattern, hits)
    ranked = sort_by_mismatches(hits)
    best = ranked[0]
    if any(hit.pattern != best.pattern for hit in ranked[1:]):
        return Ambiguous(ranked)
    return Unique(best.pattern, ranked)

def is_ambiguous(outcome):
    return isinstance(outcome, Ambiguous)
