"""
Proportional-odds ordinal logistic regression scan (one fit per SNP).

For every SNP j the model

    logit P(Y <= k) = theta_k - (beta_j * g_j + gamma' * CV)

is fitted with statsmodels' OrderedModel (logit link). Only the SNP term is
reported:
    BETA = beta_j, SE from the inverse Hessian, Tvalue = BETA / SE,
    P = 2 * sf(|Tvalue|) under N(0, 1), OR = exp(BETA),
    L95/U95 = exp(BETA -/+ 1.959964 * SE)

Rows with a missing response, dosage or covariate are dropped per fit and
unused response levels are removed before fitting. A fit that cannot be
completed (fewer than 3 response levels, monomorphic SNP, rank-deficient
design, no convergence, singular Hessian, solver error) gives NaN statistics
and an entry in ``AssociationResults.errors``; the scan always continues.
"""

import warnings
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from tqdm import tqdm
from statsmodels.miscmodels.ordinal_model import OrderedModel

from ..data.checks import to_ordered_categorical, MIN_ORDINAL_LEVELS
from ..utils.data_types import AssociationResults, AnalysisData
from ..utils.stats import wald_pvalue, odds_ratio_ci
from ..utils.formatting import combine_results

DEFAULT_MAXITER = 500

FitResult = Tuple[float, float, Optional[str]]


def _response_codes(phe: Union[pd.Series, np.ndarray]) -> np.ndarray:
    """Ordered category codes as float, NaN for missing values."""
    if not isinstance(phe, pd.Series):
        phe = pd.Series(phe)
    if not (isinstance(phe.dtype, pd.CategoricalDtype) and phe.cat.ordered):
        phe = to_ordered_categorical(phe)
    codes = phe.cat.codes.to_numpy().astype(float)
    codes[codes < 0] = np.nan
    return codes


def covariate_design(CV: Optional[pd.DataFrame]) -> Optional[np.ndarray]:
    """Numeric design matrix for the covariates

    Numeric columns are used as they are. Other columns are treatment
    coded, first (sorted) level as reference; rows missing the covariate
    are NaN in every indicator column.
    """
    if CV is None or CV.shape[1] == 0:
        return None

    parts = []
    for name in CV.columns:
        col = CV[name]
        converted = pd.to_numeric(col, errors='coerce')
        if converted.notna().sum() == col.notna().sum():
            parts.append(converted.astype(float).rename(name))
            continue
        dummies = pd.get_dummies(col.astype('string'), prefix=name, drop_first=True, dtype=float)
        dummies.loc[col.isna(), :] = np.nan
        parts.append(dummies)

    design = pd.concat(parts, axis=1)
    return design.to_numpy(dtype=float)


def _fit_single_snp(dosage: np.ndarray,
                    y: np.ndarray,
                    covariates: Optional[np.ndarray] = None,
                    maxiter: int = DEFAULT_MAXITER) -> FitResult:
    """Fit one ordinal model and return (beta, se, error) for the SNP term."""
    mask = np.isfinite(y) & np.isfinite(dosage)
    if covariates is not None:
        mask &= np.isfinite(covariates).all(axis=1)

    y_fit = y[mask]
    g_fit = dosage[mask]
    levels = np.unique(y_fit)
    if len(levels) < MIN_ORDINAL_LEVELS:
        return np.nan, np.nan, (
            f"response has {len(levels)} levels among {mask.sum()} complete samples; "
            f"at least {MIN_ORDINAL_LEVELS} are required"
        )
    if np.ptp(g_fit) == 0:
        return np.nan, np.nan, "SNP dosage has zero variance among complete samples"

    X = g_fit[:, None] if covariates is None else np.column_stack([g_fit, covariates[mask]])
    with_intercept = np.column_stack([np.ones(len(X)), X])
    if np.linalg.matrix_rank(with_intercept) < with_intercept.shape[1]:
        return np.nan, np.nan, "design matrix is rank deficient (SNP collinear with covariates)"

    # drop.unused.levels: recode the observed levels to 0..k-1
    y_codes = np.searchsorted(levels, y_fit)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter('always')
        try:
            model = OrderedModel(y_codes, X, distr='logit')
            res = model.fit(method='bfgs', maxiter=maxiter, disp=False)
            if not res.mle_retvals.get('converged', False):
                res = model.fit(method='newton', start_params=res.params, maxiter=maxiter, disp=False)
        except Exception as e:
            return np.nan, np.nan, f"{type(e).__name__}: {e}"

    if not res.mle_retvals.get('converged', False):
        return np.nan, np.nan, f"model did not converge within {maxiter} iterations"

    beta = float(np.asarray(res.params)[0])
    se = float(np.asarray(res.bse)[0])
    if not np.isfinite(beta) or not np.isfinite(se) or se <= 0:
        detail = f" ({caught[0].message})" if caught else ""
        return np.nan, np.nan, f"standard error unavailable, Hessian is singular{detail}"

    return beta, se, None


def OGWAS_POLR(phe: Union[pd.Series, np.ndarray],
               geno: pd.DataFrame,
               CV: Optional[pd.DataFrame] = None,
               phenotype_name: Optional[str] = None,
               maxiter: int = DEFAULT_MAXITER,
               cpu: int = 1,
               verbose: bool = True) -> AssociationResults:
    """Ordinal logistic regression scan of one phenotype over all SNPs

    Args:
        phe: Ordered categorical phenotype (n_individuals). Other types are
            converted to an ordered categorical over their observed values.
        geno: Dosage DataFrame (n_individuals x n_markers), one column per SNP
        CV: Covariates (n_individuals x n_covariates), entered additively
        phenotype_name: Label stored in the results (defaults to phe.name)
        maxiter: Iteration cap per fit
        cpu: Worker processes; 1 fits sequentially
        verbose: Show a progress bar

    Returns:
        AssociationResults with BETA, SE, Tvalue, P, OR, L95, U95 per SNP in
        the column order of ``geno``; failed fits hold NaN and are listed in
        ``errors``.
    """
    if len(phe) != len(geno):
        raise ValueError(f"Phenotype has {len(phe)} samples but genotype has {len(geno)}")
    if CV is not None and len(CV) != len(geno):
        raise ValueError(f"Covariates have {len(CV)} samples but genotype has {len(geno)}")

    if phenotype_name is None:
        phenotype_name = str(getattr(phe, 'name', None) or 'PHENOTYPE')

    snps: List[str] = [str(c) for c in geno.columns]
    y = _response_codes(phe)
    covariates = covariate_design(CV)
    dosages = geno.to_numpy(dtype=float)

    fit = partial(_fit_single_snp, y=y, covariates=covariates, maxiter=maxiter)
    columns = (dosages[:, j] for j in range(len(snps)))
    progress = dict(total=len(snps), desc=phenotype_name, unit='SNP', disable=not verbose)

    if cpu > 1 and len(snps) > 1:
        chunksize = max(1, len(snps) // (cpu * 4))
        with ProcessPoolExecutor(max_workers=cpu) as executor:
            fits = list(tqdm(executor.map(fit, columns, chunksize=chunksize), **progress))
    else:
        fits = [fit(col) for col in tqdm(columns, **progress)]

    effects = np.array([f[0] for f in fits], dtype=float)
    se = np.array([f[1] for f in fits], dtype=float)
    errors = {snp: f[2] for snp, f in zip(snps, fits) if f[2] is not None}

    with np.errstate(divide='ignore', invalid='ignore'):
        tvalues = effects / se
    pvalues = wald_pvalue(tvalues)
    odds_ratios, lower95, upper95 = odds_ratio_ci(effects, se)

    if errors:
        warnings.warn(
            f"{len(errors)} of {len(snps)} fits failed for phenotype '{phenotype_name}'; "
            "their statistics are NaN."
        )

    return AssociationResults(
        phenotype=phenotype_name,
        snps=snps,
        effects=effects,
        se=se,
        tvalues=tvalues,
        pvalues=pvalues,
        odds_ratios=odds_ratios,
        lower95=lower95,
        upper95=upper95,
        errors=errors,
    )


def run_association(obj: AnalysisData,
                    snps: Optional[Sequence[str]] = None,
                    maxiter: int = DEFAULT_MAXITER,
                    cpu: int = 1,
                    verbose: bool = True) -> List[AssociationResults]:
    """Scan every resolved phenotype; one AssociationResults per phenotype, in order."""
    snps = list(obj.snps if snps is None else snps)
    merged = obj.merged
    CV = merged[obj.covar_name] if obj.has_covariates else None

    results = []
    for pheno in obj.pheno_name:
        if verbose:
            print(f"   Analyzing phenotype: {pheno} ({len(snps)} SNPs, {obj.n_individuals} samples)")
        results.append(OGWAS_POLR(
            phe=merged[pheno],
            geno=merged[snps],
            CV=CV,
            phenotype_name=pheno,
            maxiter=maxiter,
            cpu=cpu,
            verbose=verbose,
        ))
    return results


def run_analysis(obj: AnalysisData,
                 maxiter: int = DEFAULT_MAXITER,
                 cpu: int = 1,
                 verbose: bool = True) -> pd.DataFrame:
    """Run the ordinal GWAS and return the combined result table

    Args:
        obj: AnalysisData created by ``check_data``
        maxiter: Iteration cap per fit
        cpu: Worker processes for the per-SNP fits
        verbose: Print progress

    Returns:
        DataFrame with columns Phenotype, SNP, BETA, SE, Tvalue, P, OR, L95,
        U95; one row per (phenotype, SNP), SNPs in genotype file order
        within each phenotype block.

    Example:
        >>> checked = check_data(load_data('example.A.raw'))
        >>> results = run_analysis(checked)
    """
    return combine_results(run_association(obj, maxiter=maxiter, cpu=cpu, verbose=verbose))
