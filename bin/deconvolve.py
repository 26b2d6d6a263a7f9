#!/usr/bin/env python3
import argparse, os, shutil
from barcode_deconvolver.shared import logPrint
from barcode_deconvolver.barcodes import read_pattern_file, write_pattern_file, pattern_filename, BarcodeGeometry
from barcode_deconvolver.hits import iter_fuzznuc_hits
from barcode_deconvolver.deconvolve import deconvolve, write_barcode_outputs
from barcode_deconvolver import sequences, reports, params

############################ Input Parameters #################################
parser = argparse.ArgumentParser(description="Deconvolve reads by DNA barcode: find barcodes, assign reads & trim barcodes from them.",
                                 formatter_class=argparse.ArgumentDefaultsHelpFormatter)
parser.add_argument('infile', help='Input reads (.fasta, .fastq or .sff; may be compressed).')
parser.add_argument('pattern', help='FASTA file of barcodes, headers may include <clamplength=N> <readlength=N>.')
parser.add_argument('-o', '--outdir', default=params.outdir, help='Directory to save deconvolved reads & reports.')
parser.add_argument('-t', '--tmpdir', default=params.tmpdir, help='Directory for intermediate files.')
parser.add_argument('-m', '--mismatches', type=int, default=params.mismatches, help='Substitutions tolerated when searching for barcodes.')
parser.add_argument('-r', '--readlength', type=int, default=params.min_read_length, help='Default minimum length of a trimmed read.')
parser.add_argument('-c', '--clamplength', type=int, default=params.clamp_length, help='Default # of bases flanking a barcode to trim with it.')
key = parser.add_mutually_exclusive_group()
key.add_argument('-k', '--key', help='Key sequence to prepend to reads & barcodes before searching, e.g. TCAG for 454 reads.')
key.add_argument('--keylength', type=int, default=params.key_length,
    help='Length of a key that trim points must account for, but which is absent from the input reads.')
parser.add_argument('--outformat', choices=['fasta', 'fastq', 'sff'], help='Format of deconvolved reads (default: input format, or fasta).')
parser.add_argument('--search', choices=['fuzznuc', 'regex'], default='fuzznuc', help='Barcode search: EMBOSS fuzznuc or in-process regex.')
parser.add_argument('--hits', nargs='+', help='Use existing fuzznuc (excel format) results instead of searching.')
parser.add_argument('--fuzznuc', default=params.fuzznuc_cmd, help='Name of fuzznuc PATH/executable.')
parser.add_argument('--merge_overlapping', action='store_true', help='Merge overlapping hits of a barcode to the same strand.')
parser.add_argument('--trim_points_only', action='store_true', help='Only write trim points, not trimmed reads.')
parser.add_argument('--keep', action='store_true', help='Keep intermediate files.')
parser.add_argument('--plot', action='store_true', help='Save a bar chart of the barcode distribution.')
parser.add_argument('-p', '--parallel', action='store_true', help='Multi-process deconvolution.')
parser.add_argument('-v', '--verbose', action='store_true', help='Output more.')
###############################################################################
args = parser.parse_args()

informat = sequences.infer_format(args.infile)
if args.outformat is None:
    args.outformat = 'fastq' if informat == 'fastq' else 'fasta'
if args.outformat == 'sff' and informat != 'sff':
    parser.error("--outformat sff requires an SFF input file.")
if args.outformat == 'fastq' and informat == 'fasta':
    parser.error("--outformat fastq requires quality scores, i.e. a FASTQ or SFF input file.")

os.makedirs(args.outdir, exist_ok=True)
Log = logPrint(args, filename=os.path.join(args.outdir, params.log_file))

barcodes = read_pattern_file(args.pattern)
geometry = BarcodeGeometry(barcodes, clamp_length=args.clamplength, min_read_length=args.readlength,
                           key=args.key, key_length=None if args.key else args.keylength)
Log('Read {:} barcodes from {:}.'.format(len(barcodes), args.pattern))
Log(geometry)

reads = sequences.read_sequences(args.infile, informat)
Log('Read {:} sequences from {:}.'.format(len(reads), args.infile), True)
searched, offset = sequences.search_sequences(reads, geometry.key)
trim_offset = offset if geometry.key_prepended else geometry.key_length
read_lengths = sequences.read_lengths(searched)

# sfffile trims the forward strand only
complement = args.outformat != 'sff'

if args.hits:
    Log('Using barcode hits from: '+' '.join(args.hits))
    hits = iter_fuzznuc_hits(args.hits)
elif args.search == 'regex':
    from barcode_deconvolver.search import search_barcodes
    hits = search_barcodes(searched, barcodes, args.mismatches, key=geometry.key, complement=complement)
else:
    from barcode_deconvolver.external import run_fuzznuc
    sequence_file = sequences.write_search_fasta(searched, os.path.join(args.tmpdir, 'search.fasta'))
    pattern_file = write_pattern_file(barcodes, pattern_filename(args.pattern, args.tmpdir), args.mismatches, geometry.key)
    hit_file = os.path.join(args.tmpdir, 'fuzznuc.csv')
    num_hits = run_fuzznuc(sequence_file, pattern_file, hit_file, args.mismatches, complement, cmd=args.fuzznuc, Log=Log)
    Log('fuzznuc found {:} barcode hits.'.format(num_hits))
    hits = iter_fuzznuc_hits(hit_file)

if args.parallel:
    from barcode_deconvolver.pmap import large_iter_pmap as map

tally = deconvolve(hits, geometry, read_lengths, map=map, merge_overlapping=args.merge_overlapping)

written = write_barcode_outputs(tally, reads, barcodes, args.outdir, args.outformat, trim_offset,
                                trim_points_only=args.trim_points_only,
                                sff_file=args.infile if args.outformat == 'sff' else None, Log=Log)
Log('{:} of {:} barcodes have deconvolved reads.'.format(sum(n > 0 for n in written.values()), len(written)))
reports.write_multicode_report(tally.multicoded, os.path.join(args.outdir, params.multicode_report))
reports.write_untrimmable_report(tally.untrimmable, os.path.join(args.outdir, params.untrimmable_report))

Log('Summary of deconvolving {:}:'.format(args.infile), True, header=True)
Log(reports.summary(tally, len(reads), len(barcodes), barcodes), True)

if args.plot:
    try:
        from barcode_deconvolver.graphs import plot_barcode_distribution
        plot_barcode_distribution(tally.distribution(barcodes), os.path.join(args.outdir, params.distribution_plot))
    except Exception as e:
        Log("Couldn't create barcode distribution plot, perhaps you need to configure the matplotlib backend?", True)
        Log(e, True)

if not args.keep and not args.hits and args.search == 'fuzznuc':
    shutil.rmtree(args.tmpdir, ignore_errors=True)
