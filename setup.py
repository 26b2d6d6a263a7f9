#!/usr/bin/env python3
from setuptools import setup

setup(  name='barcode_deconvolver',
        description='Deconvolution of sequencing reads by DNA barcode',
        license='MIT',
        classifiers=[
            'Development Status :: 3 - Alpha',
            'Intended Audience :: Science/Research',
            'Natural Language :: English',
            'Operating System :: POSIX',
            'Topic :: Scientific/Engineering :: Bio-Informatics'],
        packages=['barcode_deconvolver'],
        install_requires=[
            'numpy',
            'pandas',
            'matplotlib',
            'seaborn',
            'biopython',
            'progressbar2',
            'regex'],
        extras_require={'test': ['pytest']},
        scripts=[
            'bin/deconvolve.py',
            'bin/validate_assignments.py'],
        python_requires='>=3.6',
        version='0.3',
        )
