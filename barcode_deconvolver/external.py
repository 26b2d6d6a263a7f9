"""Wrappers of the external executables: EMBOSS fuzznuc & Roche sfffile."""
from subprocess import Popen, PIPE, CalledProcessError
from barcode_deconvolver.shared import smart_open
from barcode_deconvolver import params

def _run(command, stdout=PIPE):
    process = Popen(command, stdout=stdout, stderr=PIPE)
    output, error = process.communicate()
    if process.returncode != 0:
        raise CalledProcessError(process.returncode, command, output=output,
                                 stderr=error.decode('ascii', 'replace') if error else None)
    return output

def fuzznuc_command(sequence_file, pattern_file, mismatches=params.mismatches, complement=True,
                    cmd=params.fuzznuc_cmd, **options):
    """Argument list of a fuzznuc search writing 'excel' output to stdout."""
    settings = params.fuzznuc_options.copy()
    settings.update(pmismatch=mismatches, complement='Yes' if complement else 'No')
    settings.update(options)
    command = [cmd, '-sequence', str(sequence_file), '-pattern', '@'+str(pattern_file)]
    for option, value in settings.items():
        command += ['-'+option, str(value)]
    return command

def run_fuzznuc(sequence_file, pattern_file, output_file, mismatches=params.mismatches, complement=True,
                cmd=params.fuzznuc_cmd, Log=None):
    """Runs fuzznuc, saving its hits (without header lines) to `output_file`."""
    command = fuzznuc_command(sequence_file, pattern_file, mismatches, complement, cmd)
    if Log is not None:
        Log('Searching for barcodes with command:\n'+' '.join(command))
    output = _run(command).decode('ascii')
    lines = [line for line in output.splitlines() if line.strip() and not line.startswith(params.fuzznuc_header)]
    with smart_open(output_file, 'wt', makedirs=True) as f:
        for line in lines:
            f.write(line+'\n')
    return len(lines)

def run_sfffile(sff_file, ids_file, trim_file, output_file, cmd=params.sfffile_cmd, Log=None):
    """Writes the reads listed in `ids_file`, cut at `trim_file`'s trim points, to a new SFF."""
    command = [cmd, '-o', str(output_file), '-i', str(ids_file), '-t', str(trim_file), str(sff_file)]
    if Log is not None:
        Log(' '.join(command))
    _run(command)
    return output_file
