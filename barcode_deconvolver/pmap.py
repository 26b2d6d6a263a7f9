"""Parallel map for deconvolving many reads.

large_iter_pmap(function, iterable) -> chunked multi-process map with a
    progress bar, intended for iterables of many small jobs (e.g. one job per
    read). Returns a list, in the order of `iterable`.
"""
import os, multiprocessing
from warnings import warn
from pickle import PicklingError
from time import sleep
from progressbar import ProgressBar, Bar, Percentage

CPUs = multiprocessing.cpu_count()
CHUNKS = 50*CPUs

def large_iter_pmap(func, Iter, processes=CPUs, status_bar=True, nice=True, wait_interval=1):
    Iter = list(Iter)
    if nice:
        os.nice(10)
    try:
        with multiprocessing.Pool(processes=processes) as P:
            size = max(1, int(round(len(Iter)/CHUNKS)))
            rs = P.map_async(func, Iter, chunksize=size)
            if status_bar:
                maxval = rs._number_left
                bar = ProgressBar(max_value=maxval, widgets=[Bar('=', '[', ']'), ' ', Percentage()])
                while not rs.ready():
                    sleep(wait_interval)
                    bar.update(maxval - rs._number_left)
                bar.finish()
            return rs.get()
    except (PicklingError, AttributeError) as e:
        warn("Could not pickle {:} for parallelization ({:}). Using single Process.".format(func, e), RuntimeWarning)
        return list(map(func, Iter))
