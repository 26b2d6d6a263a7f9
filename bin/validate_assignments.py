#!/usr/bin/env python3
import argparse
from barcode_deconvolver.shared import logPrint
from barcode_deconvolver.reports import validate_assignments

parser = argparse.ArgumentParser(description="Confirm that no read was assigned to a barcode it has no hit to.",
                                 formatter_class=argparse.ArgumentDefaultsHelpFormatter)
parser.add_argument('outdir', help='Output directory of deconvolve.py (one sub-directory per barcode).')
parser.add_argument('hits', nargs='+', help='fuzznuc (excel format) results the assignments came from.')
parser.add_argument('-b', '--barcodes', nargs='+', help='Only validate these barcodes (default: every sub-directory).')
parser.add_argument('-v', '--verbose', action='store_true', help='Output more.')

args = parser.parse_args()
Log = logPrint(args)

counts, invalid = validate_assignments(args.outdir, args.hits, args.barcodes)
for read_id, barcode in invalid:
    Log('{:} {:}'.format(read_id, barcode))

Log('Validation of {:}:'.format(args.outdir), True, header=True)
Log(counts.to_string(), True)
