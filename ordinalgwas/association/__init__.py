"""
Association testing methods for ordinal GWAS analysis
"""

from .polr import OGWAS_POLR, run_analysis, run_association

__all__ = ['OGWAS_POLR', 'run_analysis', 'run_association']
