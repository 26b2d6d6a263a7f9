"""Fuzzy-match hits of barcode patterns against reads.

Hits come from the tab-delimited ('excel') output of EMBOSS fuzznuc, from its
plain report format, or from barcode_deconvolver.search. Whatever the source,
coordinates are stored space-based (zero-based, half-open):

    fuzznuc:      Start=11  End=30   (1-based, inclusive)
    Hit:          min=10    max=30

group_hits() collects consecutive hits to the same read. It never sorts: hit
streams are expected to list each read's hits contiguously, and a read that
reappears later simply starts a new group.
"""
from collections import namedtuple
from warnings import warn
from barcode_deconvolver.shared import smart_open
from barcode_deconvolver import params

STRANDS = frozenset('+-')

class HitError(ValueError):
    """A hit (or group of hits) that breaks the Hit contract."""

class SourceExhaustedEarly(RuntimeError):
    """The underlying hit stream failed before it was fully read."""

class Hit(namedtuple('Hit', ['read_id', 'min', 'max', 'strand', 'pattern', 'num_mismatches'])):
    __slots__ = ()

    @property
    def length(self):
        return self.max - self.min

    def location(self):
        return '{0.pattern}:{0.min}..{0.max}:{0.strand}:{0.num_mismatches}'.format(self)

    def to_csv_string(self):
        """Single line in the layout of fuzznuc's 'excel' output."""
        return '\t'.join(map(str, (self.read_id, self.min + 1, self.max, self.length,
                                   self.strand, self.pattern, self.num_mismatches)))

ReadHitGroup = namedtuple('ReadHitGroup', ['read_id', 'hits'])

def check_hit(hit):
    if not hit.min < hit.max:
        raise HitError("Hit to {0.read_id} has min ({0.min}) >= max ({0.max}).".format(hit))
    if hit.strand not in STRANDS:
        raise HitError("Hit to {0.read_id} has unknown strand {0.strand!r}.".format(hit))
    if hit.num_mismatches < 0:
        raise HitError("Hit to {0.read_id} has negative mismatches.".format(hit))
    return hit

def _space_based(start, end):
    lo, hi = (start, end) if start < end else (end, start)
    return lo - 1, hi

def parse_fuzznuc_line(line):
    """Hit from one line of fuzznuc's 'excel' output.

    Columns: SeqName, Start, End, Length, Strand, Pattern_name[ attributes],
    ..., Mismatch. The pattern id is the first token of the sixth column (the
    rest holds attributes such as <mismatch=2>) and the mismatch count is the
    last column, where '.' means an exact match.
    """
    fields = line.rstrip('\r\n').split('\t')
    if len(fields) < 7:
        raise HitError("Expected at least 7 tab-delimited columns in fuzznuc output, got:\n"+line)
    read_id, start, end, __, strand = fields[:5]
    pattern = fields[5].split()[0] if fields[5].strip() else ''
    mismatches = fields[-1].strip()
    try:
        lo, hi = _space_based(int(start), int(end))
        num_mismatches = 0 if mismatches in {'.', ''} else int(mismatches)
    except ValueError as e:
        raise HitError("Could not parse fuzznuc line:\n{:}\n{:}".format(line, e)) from e
    return check_hit(Hit(read_id, lo, hi, strand.strip(), pattern, num_mismatches))

def iter_fuzznuc_hits(filenames):
    """Lazily yields Hits from one or more fuzznuc 'excel' files, in order."""
    if isinstance(filenames, str) or hasattr(filenames, 'open'):
        filenames = [filenames]
    for filename in filenames:
        with smart_open(filename, 'rt') as f:
            for line in f:
                if not line.strip() or line.startswith(params.fuzznuc_header):
                    continue
                yield parse_fuzznuc_line(line)

def iter_fuzznuc_report(filename):
    """Lazily yields Hits from fuzznuc's default (plain text) report.

    Strand is not a column of this format; a hit reported with Start > End is
    a match to the complementary strand.
    """
    read_id = None
    with smart_open(filename, 'rt') as f:
        for line in f:
            if line.startswith('# Sequence:'):
                read_id = line.split()[2]
            elif line.startswith('#') or not line.strip() or line.split()[0] == 'Start':
                continue
            else:
                start, end, pattern, mismatches = line.split()[:4]
                start, end = int(start), int(end)
                lo, hi = _space_based(start, end)
                yield check_hit(Hit(read_id, lo, hi, '+' if start < end else '-', pattern,
                                    0 if mismatches == '.' else int(mismatches)))

def group_hits(hits):
    """HitGrouper: yields a ReadHitGroup per run of hits sharing a read_id.

    Single forward pass; consumes `hits`. Failures of the underlying iterator
    are re-raised as SourceExhaustedEarly.
    """
    iterator = iter(hits)
    read_id, group = None, []
    while True:
        try:
            hit = next(iterator)
        except StopIteration:
            break
        except Exception as e:
            raise SourceExhaustedEarly("Hit stream failed after read {:}: {:}".format(read_id, e)) from e
        if group and hit.read_id != read_id:
            yield ReadHitGroup(read_id, group)
            group = []
        read_id = hit.read_id
        group.append(hit)
    if group:
        yield ReadHitGroup(read_id, group)

def _warn_dropped(read_id, dropped):
    if dropped:
        warn("Dropped {:} duplicate hit(s) to read {:}.".format(dropped, read_id))

def filter_redundant_hits(hits):
    """Drops exact duplicate hits (fuzznuc occasionally reports a hit twice).

    Warns once per run of hits to a read that had duplicates.
    """
    read_id, seen, dropped = None, set(), 0
    for hit in hits:
        if hit.read_id != read_id:
            _warn_dropped(read_id, dropped)
            read_id, seen, dropped = hit.read_id, set(), 0
        key = hit.min, hit.max, hit.strand, hit.pattern
        if key in seen:
            dropped += 1
            continue
        seen.add(key)
        yield hit
    _warn_dropped(read_id, dropped)

def merge_overlapping_hits(hits):
    """Merges overlapping hits to the same pattern & strand within one read.

    Returns a list sorted by min. Merged hits span the union of their parts and
    keep the lowest mismatch count.
    """
    merged = []
    for hit in sorted(hits, key=lambda h: (h.pattern, h.strand, h.min)):
        last = merged[-1] if merged else None
        if (last is not None and last.read_id == hit.read_id and last.pattern == hit.pattern
                and last.strand == hit.strand and hit.min <= last.max):
            merged[-1] = last._replace(max=max(last.max, hit.max),
                                       num_mismatches=min(last.num_mismatches, hit.num_mismatches))
        else:
            merged.append(hit)
    return sorted(merged, key=lambda h: h.min)
