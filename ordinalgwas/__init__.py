"""
ordinalGWAS: genome-wide association analysis of ordinal phenotypes

Proportional-odds ordinal logistic regression of every SNP in a PLINK .raw
genotype file against one or more ordinal phenotypes, optionally adjusted
for covariates.
"""

__version__ = "0.1.0"

from .data.loaders import load_data
from .data.checks import check_data
from .association.polr import OGWAS_POLR, run_analysis
from .utils.formatting import combine_results, split_snp
from .utils.data_types import InputData, AnalysisData, AssociationResults
from .visualization.qq import OGWAS_Report
from .pipelines.gwas import OrdinalGWASPipeline

__all__ = [
    'load_data',
    'check_data',
    'run_analysis',
    'split_snp',
    'combine_results',
    'OGWAS_POLR',
    'OGWAS_Report',
    'InputData',
    'AnalysisData',
    'AssociationResults',
    'OrdinalGWASPipeline',
]
