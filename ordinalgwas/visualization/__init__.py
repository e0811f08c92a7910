"""
Visualization of ordinal GWAS results
"""

from .qq import OGWAS_Report, create_qq_plot

__all__ = ['OGWAS_Report', 'create_qq_plot']
