"""Shared utilities for this package.

Class logPrint both 'logs' and 'prints' (when verbosity insists) any output
string. The arguments and runtime of every command-line script are logged too.

"""
from datetime import datetime
import atexit, os

def smart_open(filename, mode='rb', makedirs=False):
    """open() that picks a (de)compressor from the file extension."""
    filename = str(filename)
    if makedirs:
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
    if filename.endswith('.gzip') or filename.endswith('.gz'):
        from gzip import open
    elif filename.endswith('.bz2'):
        from bz2 import open
    elif filename.endswith('.lzma') or filename.endswith('.xz'):
        from lzma import open
    else:
        from builtins import open
    return open(filename, mode)

class logPrint(object):
    def line_break(self):
        self.f.write(80*'-'+'\n')

    def __call__(self, line, print_line=False, header=False):
        line = str(line)
        if self.verbose or print_line:
            print(line)
        if header:
            self.f.write((len(line)+4)*"#"+'\n')
            self.f.write('# '+line+' #\n')
            self.f.write((len(line)+4)*"#"+'\n')
        else:
            self.f.write(line+'\n')
        self.f.flush()

    def close(self):
        if self.f.closed:
            return
        runtime = datetime.now() - self.start_time
        self('Runtime: {:}'.format(str(runtime).split('.')[0]))
        self.line_break()
        self.f.close()

    def __init__(self, input_args, filename=None, program=None):
        self.start_time = datetime.now()
        if program is None:
            import __main__ as main
            program = os.path.basename(getattr(main, '__file__', 'interactive')).partition('.py')[0]
        self.program = program
        args_dict = vars(input_args).copy()
        self.verbose = args_dict.pop('verbose', False)
        if filename is None:
            filename = os.path.join(args_dict.get('outdir') or '', self.program+'.LOG')
        self.filename = str(filename)
        print("Logging output to", self.filename)
        self.f = smart_open(self.filename, 'a', makedirs=True)
        self.f.write('\n')
        self.line_break()
        self.f.write("Output Summary of {0.program}, executed at {0.start_time:%c} with the following input arguments:\n".format(self))
        self.line_break()
        for arg, val in args_dict.items():
            self.f.write("{:}: {:}\n".format(arg, val))
        self.line_break()
        atexit.register(self.close)
