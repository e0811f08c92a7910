"""
Core data structures for ordinalGWAS
"""

import numpy as np
import pandas as pd
from typing import Optional, Dict, List, Sequence

RESULT_COLUMNS = ['BETA', 'SE', 'Tvalue', 'P', 'OR', 'L95', 'U95']


class InputData:
    """Tables read from disk by ``load_data``.

    Attributes:
        geno: DataFrame of ``ID``, ``PHENOTYPE`` and one column per variant
        pheno: DataFrame of ``ID`` and phenotypes, or None without a phenotype file
        covar: DataFrame of ``ID`` and covariates, or None when no separate
            covariate file was read
        same_pheno_covar_file: True when ``pheno`` also holds the covariates
    """

    def __init__(self,
                 geno: pd.DataFrame,
                 pheno: Optional[pd.DataFrame] = None,
                 covar: Optional[pd.DataFrame] = None,
                 same_pheno_covar_file: bool = False):
        if 'ID' not in geno.columns:
            raise ValueError("Genotype table must contain an 'ID' column")
        for name, table in (('phenotype', pheno), ('covariate', covar)):
            if table is not None and 'ID' not in table.columns:
                raise ValueError(f"The {name} table must contain an 'ID' column")
        if same_pheno_covar_file and covar is not None:
            raise ValueError("A separate covariate table cannot be used with same_pheno_covar_file")

        self.geno = geno
        self.pheno = pheno
        self.covar = covar
        self.same_pheno_covar_file = bool(same_pheno_covar_file)

    @property
    def snps(self) -> List[str]:
        """Variant columns of the genotype table, in file order"""
        return [c for c in self.geno.columns[2:]]

    @property
    def n_individuals(self) -> int:
        """Number of genotyped individuals"""
        return len(self.geno)


class AnalysisData:
    """Merged working table plus the resolved analysis options.

    Produced by ``check_data`` and consumed read-only by ``run_analysis``.
    """

    def __init__(self,
                 snps: Sequence[str],
                 pheno_name: Sequence[str],
                 covar_name: Sequence[str],
                 merged: pd.DataFrame,
                 summary: Optional[Dict[str, int]] = None):
        self.snps = list(snps)
        self.pheno_name = list(pheno_name)
        self.covar_name = list(covar_name)
        self.merged = merged
        self.summary: Dict[str, int] = dict(summary) if summary else {}

        missing = [c for c in self.snps + self.pheno_name + self.covar_name
                   if c not in merged.columns]
        if missing:
            raise ValueError(f"Merged table is missing columns: {missing}")

    @property
    def has_covariates(self) -> bool:
        return len(self.covar_name) > 0

    @property
    def n_individuals(self) -> int:
        """Number of samples left after joining all tables"""
        return len(self.merged)

    @property
    def n_tests(self) -> int:
        """Number of (phenotype, SNP) fits a full scan performs"""
        return len(self.pheno_name) * len(self.snps)


class AssociationResults:
    """Ordinal regression results for one phenotype

    One entry per SNP, in genotype file order. Entries whose fit failed hold
    NaN statistics and have a message in ``errors``.
    """

    def __init__(self, phenotype: str, snps: Sequence[str],
                 effects: np.ndarray, se: np.ndarray, tvalues: np.ndarray,
                 pvalues: np.ndarray, odds_ratios: np.ndarray,
                 lower95: np.ndarray, upper95: np.ndarray,
                 errors: Optional[Dict[str, str]] = None):

        arrays = (effects, se, tvalues, pvalues, odds_ratios, lower95, upper95)
        if not all(len(a) == len(snps) for a in arrays):
            raise ValueError("All result arrays must have same length as the SNP list")

        self.phenotype = phenotype
        self.snps = list(snps)
        self.effects = np.asarray(effects, dtype=float)
        self.se = np.asarray(se, dtype=float)
        self.tvalues = np.asarray(tvalues, dtype=float)
        self.pvalues = np.asarray(pvalues, dtype=float)
        self.odds_ratios = np.asarray(odds_ratios, dtype=float)
        self.lower95 = np.asarray(lower95, dtype=float)
        self.upper95 = np.asarray(upper95, dtype=float)
        self.errors: Dict[str, str] = dict(errors) if errors else {}

    @property
    def n_markers(self) -> int:
        """Number of markers"""
        return len(self.snps)

    @property
    def n_failed(self) -> int:
        """Number of fits that produced no statistics"""
        return len(self.errors)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to pandas DataFrame with columns SNP, BETA ... U95"""
        df = pd.DataFrame({
            'SNP': self.snps,
            'BETA': self.effects,
            'SE': self.se,
            'Tvalue': self.tvalues,
            'P': self.pvalues,
            'OR': self.odds_ratios,
            'L95': self.lower95,
            'U95': self.upper95,
        })
        return df[['SNP'] + RESULT_COLUMNS]

    def errors_to_dataframe(self) -> pd.DataFrame:
        """Failed fits as a Phenotype, SNP, Error table"""
        return pd.DataFrame({
            'Phenotype': [self.phenotype] * len(self.errors),
            'SNP': list(self.errors.keys()),
            'Error': list(self.errors.values()),
        }, columns=['Phenotype', 'SNP', 'Error'])

    def to_numpy(self) -> np.ndarray:
        """Convert to numpy array [BETA, SE, Tvalue, P, OR, L95, U95]"""
        return np.column_stack([self.effects, self.se, self.tvalues, self.pvalues,
                                self.odds_ratios, self.lower95, self.upper95])

