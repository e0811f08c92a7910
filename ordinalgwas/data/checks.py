"""
Analysis option checks and sample alignment for ordinal GWAS

``check_data`` resolves which phenotypes and covariates are analysed, joins
the genotype, phenotype and covariate tables on the sample ID and prepares
the columns for ordinal regression:

- phenotypes: -9 -> missing, then ordered categorical
- covariates: -9 -> missing
"""

import warnings
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from ..utils.data_types import InputData, AnalysisData
from ..utils.errors import ConfigurationError, ColumnNotFoundError
from .loaders import DEFAULT_PHENOTYPE

MISSING_SENTINEL = -9
MIN_ORDINAL_LEVELS = 3

NameSelection = Optional[Union[str, Iterable[str]]]


def _as_name_list(names: NameSelection, option: str) -> Optional[List[str]]:
    """Normalise a str / iterable selection into a list; None stays None."""
    if names is None:
        return None
    if isinstance(names, str):
        names = [names]
    names = [str(n) for n in names]
    if not names:
        raise ConfigurationError(f"Option {option} was given an empty selection")
    duplicated = sorted({n for n in names if names.count(n) > 1})
    if duplicated:
        raise ConfigurationError(f"Option {option} lists {duplicated} more than once")
    return names


def _require_columns(names: List[str], table: pd.DataFrame, table_name: str) -> None:
    missing = [n for n in names if n not in table.columns or n == 'ID']
    if missing:
        raise ColumnNotFoundError(missing, table_name)


def recode_missing(series: pd.Series, sentinel: int = MISSING_SENTINEL) -> pd.Series:
    """Replace the sentinel value (numeric or text) with a missing value"""
    numeric = pd.to_numeric(series, errors='coerce')
    return series.mask(numeric == sentinel)


def to_ordered_categorical(series: pd.Series) -> pd.Series:
    """Convert a column to an ordered categorical over its observed values

    Numeric columns are ordered numerically, anything else lexically.
    """
    observed = series.dropna()
    numeric = pd.to_numeric(observed, errors='coerce')
    if numeric.notna().all():
        values = pd.to_numeric(series, errors='coerce')
        levels = sorted(numeric.unique())
    else:
        values = series.map(lambda v: v if pd.isna(v) else str(v))
        levels = sorted(observed.astype(str).unique())
    categorical = pd.Categorical(values, categories=levels, ordered=True)
    return pd.Series(categorical, index=series.index, name=series.name)


def _resolve_phenotypes(obj: InputData,
                        pheno_name: Optional[List[str]],
                        all_pheno: bool) -> Optional[List[str]]:
    """Phenotype names, or None when they are derived from the covariate choice."""
    if obj.pheno is None:
        if all_pheno or (pheno_name is not None and pheno_name != [DEFAULT_PHENOTYPE]):
            raise ConfigurationError(
                "No phenotype file was loaded; only the genotype file "
                f"{DEFAULT_PHENOTYPE} column can be analysed."
            )
        return [DEFAULT_PHENOTYPE]

    if pheno_name is None and not all_pheno:
        raise ConfigurationError(
            "A phenotype file was loaded; select phenotypes with pheno_name or set all_pheno=True."
        )
    if pheno_name is not None:
        _require_columns(pheno_name, obj.pheno, 'phenotype')
        return pheno_name
    if obj.same_pheno_covar_file:
        return None
    return [c for c in obj.pheno.columns if c != 'ID']


def _resolve_covariates(obj: InputData,
                        covar_name: Optional[List[str]],
                        all_covar: bool,
                        pheno_name: Optional[List[str]]) -> List[str]:
    if obj.same_pheno_covar_file:
        if covar_name is not None:
            _require_columns(covar_name, obj.pheno, 'phenotype/covariate')
            return covar_name
        if all_covar:
            if pheno_name is None:
                raise ConfigurationError(
                    "Options all_pheno and all_covar cannot be used together when "
                    "phenotypes and covariates share one file."
                )
            return [c for c in obj.pheno.columns if c != 'ID' and c not in pheno_name]
        return []

    if obj.covar is None:
        if covar_name is not None or all_covar:
            raise ConfigurationError(
                "Covariates were requested but no covariate file was loaded "
                "(use same_pheno_covar_file when they are in the phenotype file)."
            )
        return []

    if covar_name is not None:
        _require_columns(covar_name, obj.covar, 'covariate')
        return covar_name
    if all_covar:
        return [c for c in obj.covar.columns if c != 'ID']
    warnings.warn(
        "A covariate file was loaded but no covariates were selected "
        "(covar_name / all_covar); the analysis will not include covariates."
    )
    return []


def check_data(obj: InputData,
               pheno_name: NameSelection = None,
               covar_name: NameSelection = None,
               all_pheno: bool = False,
               all_covar: bool = False,
               verbose: bool = True) -> AnalysisData:
    """Resolve analysis options and build the merged working table.

    Args:
        obj: InputData created by ``load_data``
        pheno_name: Phenotype name(s) to analyse
        covar_name: Covariate name(s) to adjust for
        all_pheno: Analyse every phenotype in the phenotype file
        all_covar: Adjust for every covariate in the covariate file

    Returns:
        AnalysisData with snps, pheno_name, covar_name, merged and a summary
        of sample counts before and after the join

    Raises:
        ConfigurationError: Options are mutually exclusive, a name is both a
            phenotype and a covariate, or a selection cannot be satisfied.
            Raised before any table is joined.
        ColumnNotFoundError: A requested column does not exist.
        ValueError: No sample is present in every table.

    Example:
        >>> data = load_data('example.A.raw', pheno_file='example.pheno.covar.txt',
        ...                  same_pheno_covar_file=True)
        >>> checked = check_data(data, pheno_name='PHENOTYPE1', covar_name='COVARIATE1')
    """
    pheno_name = _as_name_list(pheno_name, 'pheno_name')
    covar_name = _as_name_list(covar_name, 'covar_name')

    if pheno_name is not None and all_pheno:
        raise ConfigurationError("Options pheno_name and all_pheno cannot be used together.")
    if covar_name is not None and all_covar:
        raise ConfigurationError("Options covar_name and all_covar cannot be used together.")

    resolved_pheno = _resolve_phenotypes(obj, pheno_name, all_pheno)
    resolved_covar = _resolve_covariates(obj, covar_name, all_covar, resolved_pheno)
    if resolved_pheno is None:
        # all_pheno with a shared file: every column that is not a covariate
        resolved_pheno = [c for c in obj.pheno.columns if c != 'ID' and c not in resolved_covar]

    if not resolved_pheno:
        raise ConfigurationError("No phenotype columns left to analyse.")

    overlap = [c for c in resolved_pheno if c in resolved_covar]
    if overlap:
        raise ConfigurationError(
            f"Phenotypes and covariates cannot have same variable names: {overlap}"
        )

    snps = obj.snps
    clashes = [c for c in resolved_pheno + resolved_covar if c in snps or c == 'ID']
    if clashes:
        raise ConfigurationError(
            f"Phenotype/covariate names clash with genotype column names: {clashes}"
        )

    # Joins (inner, on sample ID, genotype order kept)
    summary: Dict[str, int] = {'n_genotype': len(obj.geno)}
    if obj.pheno is None:
        merged = obj.geno[['ID', DEFAULT_PHENOTYPE] + snps].copy()
    else:
        merged = obj.geno[['ID'] + snps]
        pheno_columns = resolved_pheno + (resolved_covar if obj.same_pheno_covar_file else [])
        merged = merged.merge(obj.pheno[['ID'] + pheno_columns], on='ID', how='inner')
        summary['n_phenotype'] = len(obj.pheno)

    if obj.covar is not None and not obj.same_pheno_covar_file and resolved_covar:
        merged = merged.merge(obj.covar[['ID'] + resolved_covar], on='ID', how='inner')
        summary['n_covariate'] = len(obj.covar)

    merged = merged.reset_index(drop=True)
    summary['n_merged'] = len(merged)
    summary['n_genotype_dropped'] = summary['n_genotype'] - summary['n_merged']

    if len(merged) == 0:
        raise ValueError("No common individuals found between genotype, phenotype and covariate data")
    if summary['n_genotype_dropped']:
        warnings.warn(
            f"{summary['n_genotype_dropped']} of {summary['n_genotype']} genotyped samples are missing "
            "from the phenotype/covariate tables and were dropped from the analysis."
        )

    for name in resolved_pheno:
        merged[name] = to_ordered_categorical(recode_missing(merged[name]))
        n_levels = len(merged[name].cat.categories)
        if n_levels < MIN_ORDINAL_LEVELS:
            warnings.warn(
                f"Phenotype '{name}' has {n_levels} distinct non-missing values; ordinal regression "
                f"needs at least {MIN_ORDINAL_LEVELS}, so every fit for it will fail."
            )

    for name in resolved_covar:
        merged[name] = recode_missing(merged[name])

    if verbose:
        print(f"   Phenotypes: {', '.join(resolved_pheno)}")
        print(f"   Covariates: {', '.join(resolved_covar) if resolved_covar else 'none'}")
        print(f"   Samples after matching: {summary['n_merged']} (dropped {summary['n_genotype_dropped']})")

    return AnalysisData(
        snps=snps,
        pheno_name=resolved_pheno,
        covar_name=resolved_covar,
        merged=merged,
        summary=summary,
    )
