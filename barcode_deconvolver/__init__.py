"""Tools for deconvolving sequencing reads by DNA barcode."""
__version__ = '0.3'
