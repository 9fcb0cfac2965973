"""Synthesize SLURM job arrays from line lists and TSV tables."""

__version__ = "0.1.0"
