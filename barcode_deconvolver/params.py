############################## Read Layouts ###################################
#
# Barcodes sit at one or both ends of a read, separated from the insert by a
# fixed-length clamp (hexamer). 454 reads also begin with a short key sequence.
#
#   sff:    | key (4bp) | barcode (22bp) | clamp (6bp) | ---- sequence ---->
#   fastq:  | barcode (22bp) | clamp (6bp) | ---- sequence ---->
#
# All coordinates within the package are space-based (zero-based, half-open).
#
###############################################################################
                                # Defaults
clamp_length = 6                # Bases flanking each barcode to trim with it
key_length = 0                  # Length of a virtual (un-prepended) key, 4 for 454 trim points
min_read_length = 50            # Shortest acceptable clear range
mismatches = 2                  # Substitutions tolerated when searching for barcodes
max_hits = 3                    # Most hits to one barcode with a defined trim geometry

############################ Sequence Formats #################################

sequence_formats = dict(fasta='fasta', fa='fasta', fna='fasta',
                        fastq='fastq', fq='fastq',
                        sff='sff')
compression_suffixes = {'gz', 'gzip', 'bz2', 'lzma', 'xz'}

############################## Output Files ###################################

outdir = 'out'
tmpdir = 'tmp'
multicode_report = 'report_multicode.log'
untrimmable_report = 'report_untrimmable.log'
distribution_plot = 'barcode_distribution.pdf'
log_file = 'deconvolve.LOG'
trim_ext = '.trim'
ids_ext = '.ids'

############################# External Tools ##################################

fuzznuc_cmd = 'fuzznuc'
sfffile_cmd = 'sfffile'
fuzznuc_header = 'SeqName'
# Output of fuzznuc must be tab-delimited ('excel') for parsing.
fuzznuc_options = dict(pmismatch=mismatches,
                       complement='Yes',
                       rformat='excel',
                       stdout='true')
