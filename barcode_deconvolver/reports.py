"""Report files & summaries of a deconvolution.

    <barcode>.trim          read_id  start(1-based)  end       (sfffile trim points)
    report_multicode.log    read_id\\t\\tpattern min..max:strand\\tpattern ...
    report_untrimmable.log  read_id reason
"""
import os
from warnings import warn
from collections import defaultdict
import pandas as pd
from barcode_deconvolver.hits import iter_fuzznuc_hits
from barcode_deconvolver.shared import smart_open
from barcode_deconvolver import params

def write_trim_points(records, filename):
    with smart_open(filename, 'wt', makedirs=True) as f:
        for r in records:
            f.write('{:}\t{:}\t{:}\n'.format(r.read_id, r.start + 1, r.end))
    return filename

def write_ids(records, filename):
    with smart_open(filename, 'wt', makedirs=True) as f:
        for r in records:
            f.write(r.read_id+'\n')
    return filename

def write_untrimmable_report(records, filename):
    with smart_open(filename, 'wt', makedirs=True) as f:
        for r in records:
            f.write('{:} {:}\n'.format(r.read_id, r.reason))
    return filename

def multicode_line(read_id, hits):
    return read_id+'\t'+''.join('\t{0.pattern} {0.min}..{0.max}:{0.strand}'.format(hit) for hit in hits)

def write_multicode_report(multicoded, filename):
    """One line per ambiguous (read_id, hits) group, listing every hit (sorted by mismatches)."""
    with smart_open(filename, 'wt', makedirs=True) as f:
        for read_id, hits in multicoded:
            f.write(multicode_line(read_id, hits)+'\n')
    return filename

def _percent(num, denom):
    return num/denom if denom else 0.

def summary(tally, num_reads, num_barcodes, barcodes=()):
    """Text summary of a Tally: read counts and the barcode distribution."""
    multicoded = len(tally.multicoded)
    deconvolved = tally.num_deconvolved
    counts = pd.DataFrame(dict(
        Reads=[num_reads, tally.reads_with_hits, multicoded, len(tally.untrimmable), deconvolved],
        Fraction=[1., _percent(tally.reads_with_hits, num_reads), _percent(multicoded, num_reads),
                  _percent(len(tally.untrimmable), num_reads), _percent(deconvolved, num_reads)]),
        index=['Sequences', 'With barcode hits', 'Multiple barcodes', 'Untrimmable', 'Deconvolved'],
        columns=['Reads', 'Fraction'])
    lines = ['Barcodes: {:}'.format(num_barcodes),
             counts.to_string(float_format='{:.2%}'.format)]
    untrimmable = pd.Series([r.reason.partition('\t')[0] for r in tally.untrimmable], dtype=object).value_counts()
    if len(untrimmable):
        lines += ['Untrimmable reads by reason:', untrimmable.to_string()]
    distribution = tally.distribution(barcodes)
    if len(distribution):
        lines += ['Distribution of barcodes:', distribution.to_string(float_format='{:.1%}'.format)]
    return '\n'.join(lines)

def read_trim_points(filename):
    with smart_open(filename, 'rt') as f:
        return [line.split()[0] for line in f if line.strip()]

def validate_assignments(outdir, hit_files, barcode_ids=None):
    """Checks that every read in a .trim file has a hit to that barcode.

    Returns (pd.Series of valid/invalid counts, list of invalid (read_id, barcode)).
    """
    if isinstance(hit_files, str) or hasattr(hit_files, 'open'):
        hit_files = [hit_files]
    matched = defaultdict(set)
    for hit in iter_fuzznuc_hits(hit_files):
        matched[hit.pattern].add(hit.read_id)
    if not matched:
        raise ValueError("No hits were found in {:}.".format(', '.join(map(str, hit_files))))

    if barcode_ids is None:
        barcode_ids = sorted(d for d in os.listdir(str(outdir)) if os.path.isdir(os.path.join(str(outdir), d)))
    valid, invalid = 0, []
    for barcode_id in barcode_ids:
        trim_file = os.path.join(str(outdir), barcode_id, barcode_id+params.trim_ext)
        if not os.path.isfile(trim_file):
            warn("No trim points for barcode {:} ({:} is missing).".format(barcode_id, trim_file))
            continue
        for read_id in read_trim_points(trim_file):
            if read_id in matched[barcode_id]:
                valid += 1
            else:
                invalid.append((read_id, barcode_id))
    counts = pd.Series(dict(barcodes_with_hits=len(matched), valid=valid, invalid=len(invalid)))
    return counts, invalid
