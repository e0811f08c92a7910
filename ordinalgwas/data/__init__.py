"""
Loading and checking of genotype, phenotype and covariate tables
"""

from .loaders import load_data, load_genotype_raw, load_phenotype_file, load_covariate_file
from .checks import check_data

__all__ = ['load_data', 'load_genotype_raw', 'load_phenotype_file', 'load_covariate_file', 'check_data']
