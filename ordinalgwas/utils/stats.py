"""
Statistical utilities for ordinal GWAS analysis
"""

import numpy as np
from typing import Tuple, Union
from scipy import stats

# Two-sided 95% standard normal quantile, qnorm(0.975)
Z_95 = 1.959964

ArrayLike = Union[float, np.ndarray]


def wald_pvalue(tvalues: ArrayLike) -> ArrayLike:
    """Two-sided p-value of a Wald z statistic

    Args:
        tvalues: Wald statistic(s), BETA / SE

    Returns:
        2 * P(Z > |t|) under the standard normal
    """
    return 2.0 * stats.norm.sf(np.abs(tvalues))


def odds_ratio_ci(beta: ArrayLike, se: ArrayLike,
                  z: float = Z_95) -> Tuple[ArrayLike, ArrayLike, ArrayLike]:
    """Odds ratio and asymptotic normal confidence interval

    The interval is computed on the coefficient scale (beta +/- z * se)
    and exponentiated, i.e. a Wald interval rather than a profile-likelihood one.

    Args:
        beta: Regression coefficient(s)
        se: Standard error(s) of the coefficient(s)
        z: Normal quantile for the interval width (default: 95%)

    Returns:
        Tuple of (OR, lower bound, upper bound)
    """
    beta = np.asarray(beta, dtype=float)
    se = np.asarray(se, dtype=float)
    return np.exp(beta), np.exp(beta - z * se), np.exp(beta + z * se)


def genomic_inflation_factor(pvalues: np.ndarray) -> float:
    """Calculate genomic inflation factor (lambda)

    Args:
        pvalues: Array of p-values

    Returns:
        Genomic inflation factor (lambda)
    """
    pvalues = np.asarray(pvalues, dtype=float)
    valid_pvals = pvalues[np.isfinite(pvalues) & (pvalues > 0)]
    if len(valid_pvals) == 0:
        return 1.0

    chi2_values = stats.chi2.isf(valid_pvals, df=1)
    median_chi2 = np.median(chi2_values)
    expected_median = stats.chi2.ppf(0.5, df=1)

    lambda_gc = median_chi2 / expected_median
    return float(lambda_gc)


def qq_plot_data(pvalues: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Prepare data for Q-Q plot

    Args:
        pvalues: Array of observed p-values

    Returns:
        Tuple of (expected_pvalues, observed_pvalues) for plotting
    """
    pvalues = np.asarray(pvalues, dtype=float)
    valid_pvals = pvalues[np.isfinite(pvalues) & (pvalues > 0)]
    valid_pvals = np.sort(valid_pvals)
    n = len(valid_pvals)

    if n == 0:
        return np.array([]), np.array([])

    # Expected p-values under null hypothesis
    expected_pvals = np.arange(1, n + 1) / (n + 1)

    return expected_pvals, valid_pvals
