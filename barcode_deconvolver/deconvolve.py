"""Deconvolution of reads by barcode: hits -> assignments -> clear ranges.

Every read with hits reaches exactly one terminal outcome:

    Ambiguous               -> multicode report
    Unique, trim failed     -> untrimmable report (with reason)
    Unique, trimmed         -> its barcode's output files

Reads are independent, so the per-read work can be spread over processes by
passing a parallel `map` (see barcode_deconvolver.pmap); results are gathered
into a Tally, which can also be summed across batches.
"""
import os
from collections import namedtuple, Counter, OrderedDict
from functools import partial
import pandas as pd
from barcode_deconvolver.hits import group_hits, filter_redundant_hits, merge_overlapping_hits
from barcode_deconvolver.assign import classify, is_ambiguous
from barcode_deconvolver.trim import trim_clear_range, BELOW_MIN_LENGTH
from barcode_deconvolver import reports, sequences, external, params

class TrimRecord(namedtuple('TrimRecord', ['read_id', 'barcode', 'start', 'end', 'reason'])):
    __slots__ = ()

    @property
    def passed(self):
        return self.start is not None

    @property
    def length(self):
        return self.end - self.start if self.passed else 0

def deconvolve_read(group, geometry, read_lengths, merge_overlapping=False):
    """(outcome, TrimRecord) for one ReadHitGroup; TrimRecord is None if ambiguous."""
    hits = merge_overlapping_hits(group.hits) if merge_overlapping else group.hits
    outcome = classify(hits)
    if is_ambiguous(outcome):
        return outcome, None
    if geometry.barcodes and outcome.pattern not in geometry.barcodes:
        raise LookupError("Read {:} has hits to barcode {:}, which is not in the barcode table.".format(group.read_id, outcome.pattern))
    try:
        read_length = read_lengths[group.read_id]
    except KeyError as e:
        raise LookupError("Hits were found for read {:}, which is not among the input sequences.".format(group.read_id)) from e

    barcode = outcome.pattern
    clear = trim_clear_range(outcome.hits, read_length,
                             clamp_length=geometry.clamp_length(barcode),
                             key_length=geometry.key_length,
                             key_prepended=geometry.key_prepended)
    if not clear.ok:
        return outcome, TrimRecord(group.read_id, barcode, None, clear.end, clear.reason)
    if clear.length < geometry.min_read_length(barcode):
        return outcome, TrimRecord(group.read_id, barcode, None, clear.end, '{:}\t{:}'.format(BELOW_MIN_LENGTH, clear.length))
    return outcome, TrimRecord(group.read_id, barcode, clear.start, clear.end, None)

def _deconvolve_group(group, geometry, read_lengths, merge_overlapping):
    outcome, record = deconvolve_read(group, geometry, read_lengths, merge_overlapping)
    return group.read_id, outcome, record

def iter_deconvolve(hits, geometry, read_lengths, map=map, merge_overlapping=False):
    """(read_id, outcome, TrimRecord or None) for every read with hits.

    Lazy when `map` is lazy (the builtin is). Duplicate hits are dropped first.
    """
    func = partial(_deconvolve_group, geometry=geometry, read_lengths=read_lengths,
                   merge_overlapping=merge_overlapping)
    return map(func, group_hits(filter_redundant_hits(hits)))

class Tally(object):
    """Accumulates the outcomes of deconvolution."""
    def __init__(self):
        self.reads_with_hits = 0
        self.reads = Counter()          # passing reads per barcode
        self.bp = Counter()             # bp of passing reads per barcode
        self.multicoded = []            # (read_id, all hits sorted by mismatches) per ambiguous group
        self.untrimmable = []
        self.records = []

    def add(self, read_id, outcome, record):
        self.reads_with_hits += 1
        if is_ambiguous(outcome):
            self.multicoded.append((read_id, outcome.hits))
            return
        self.records.append(record)
        if record.passed:
            self.reads[record.barcode] += 1
            self.bp[record.barcode] += record.length
        else:
            self.untrimmable.append(record)

    @property
    def num_deconvolved(self):
        return sum(self.reads.values())

    def passed_records(self, barcode=None):
        return [r for r in self.records if r.passed and (barcode is None or r.barcode == barcode)]

    def distribution(self, barcodes=()):
        """DataFrame of reads & bp per barcode (with fractions), sorted by reads."""
        index = list(OrderedDict.fromkeys(list(barcodes) + list(self.reads)))
        df = pd.DataFrame(dict(reads=[self.reads[b] for b in index], bp=[self.bp[b] for b in index]),
                          index=pd.Index(index, name='barcode'), columns=['reads', 'bp'])
        total_reads, total_bp = df['reads'].sum(), df['bp'].sum()
        df.insert(1, 'fraction_reads', df['reads']/total_reads if total_reads else 0.0)
        df['fraction_bp'] = df['bp']/total_bp if total_bp else 0.0
        return df.sort_values('reads', ascending=False, kind='mergesort')

    def __add__(self, other):
        if other == 0:
            return self
        total = Tally()
        for tally in (self, other):
            total.reads_with_hits += tally.reads_with_hits
            total.reads.update(tally.reads)
            total.bp.update(tally.bp)
            total.multicoded += tally.multicoded
            total.untrimmable += tally.untrimmable
            total.records += tally.records
        return total

    __radd__ = __add__

def deconvolve(hits, geometry, read_lengths, map=map, merge_overlapping=False):
    """Tally of deconvolving a stream of hits (see iter_deconvolve)."""
    tally = Tally()
    for read_id, outcome, record in iter_deconvolve(hits, geometry, read_lengths, map, merge_overlapping):
        tally.add(read_id, outcome, record)
    return tally

def barcode_dir(outdir, barcode_id):
    return os.path.join(str(outdir), barcode_id)

def write_barcode_outputs(tally, reads, barcodes, outdir, outformat='fasta', key_length=0,
                          trim_points_only=False, sff_file=None, Log=None):
    """Writes <outdir>/<barcode>/<barcode>.trim (and trimmed reads) for every barcode.

    Parameters:
    -----------
    tally : Tally of the deconvolution.

    reads : OrderedDict of read id -> SeqRecord, as read from the input file.

    barcodes : Barcode ids, or a mapping keyed by them.

    outformat : 'fasta', 'fastq' or 'sff' (the latter requires `sff_file`).

    key_length : Bases of key that the trim points include but `reads` lack.

    trim_points_only : Only write the .trim files.
    """
    if outformat == 'sff' and sff_file is None:
        raise ValueError("SFF output requires the input SFF file.")
    written = OrderedDict()
    for barcode_id in barcodes:
        directory = barcode_dir(outdir, barcode_id)
        os.makedirs(directory, exist_ok=True)
        records = tally.passed_records(barcode_id)
        trim_file = os.path.join(directory, barcode_id+params.trim_ext)
        reports.write_trim_points(records, trim_file)
        written[barcode_id] = len(records)
        if trim_points_only:
            continue
        if outformat == 'sff':
            if records:
                ids_file = reports.write_ids(records, os.path.join(directory, barcode_id+params.ids_ext))
                external.run_sfffile(sff_file, ids_file, trim_file,
                                     os.path.join(directory, barcode_id+'.sff'), Log=Log)
        else:
            trimmed = (sequences.trim_record(reads[r.read_id], r, key_length, barcode_id) for r in records)
            sequences.write_records(trimmed, os.path.join(directory, barcode_id+'.'+outformat), outformat)
    return written
