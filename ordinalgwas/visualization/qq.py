"""
Q-Q plot and summary report for ordinal GWAS results
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Dict, List, Sequence, Tuple, Union
import warnings

from ..utils.data_types import AssociationResults
from ..utils.stats import genomic_inflation_factor, qq_plot_data


def OGWAS_Report(results: Union[AssociationResults, Sequence[AssociationResults]],
                 plot_types: List[str] = ["qq"],
                 output_prefix: str = "ordinalGWAS",
                 dpi: int = 300,
                 figsize: Tuple[int, int] = (6, 6),
                 verbose: bool = True,
                 save_plots: bool = True) -> Dict:
    """Generate Q-Q plots and summary statistics per phenotype

    Args:
        results: AssociationResults or a list of them (one per phenotype)
        plot_types: Plots to generate; only "qq" is available
        output_prefix: Prefix for plot files, written as
            ``{output_prefix}_{phenotype}_qq.png``
        dpi: Plot resolution
        figsize: Figure size (width, height)
        verbose: Print progress information
        save_plots: Save plots to files

    Returns:
        Dictionary with 'plots', 'summary' (keyed by phenotype) and
        'files_created'
    """
    if isinstance(results, AssociationResults):
        results = [results]
    elif not all(isinstance(r, AssociationResults) for r in results):
        raise ValueError("Results must be AssociationResults or a list of AssociationResults")

    if verbose:
        print("Generating ordinal GWAS report...")

    report = {
        'plots': {},
        'summary': {},
        'files_created': []
    }

    for res in results:
        phenotype = res.phenotype
        report['summary'][phenotype] = calculate_gwas_summary(res)

        if "qq" in plot_types:
            if not np.isfinite(res.pvalues).any():
                warnings.warn(f"No valid p-values found for phenotype {phenotype}")
            else:
                if verbose:
                    print(f"Creating Q-Q plot for {phenotype}...")
                qq_fig = create_qq_plot(res.pvalues, title=f"Q-Q Plot - {phenotype}", figsize=figsize)
                report['plots'][phenotype] = {'qq': qq_fig}

                if save_plots:
                    filename = f"{output_prefix}_{phenotype}_qq.png"
                    qq_fig.savefig(filename, dpi=dpi, bbox_inches='tight')
                    plt.close(qq_fig)
                    report['files_created'].append(filename)

        if verbose:
            summary = report['summary'][phenotype]
            print(f"Summary for {phenotype}:")
            print(f"  SNPs tested: {summary['n_markers']}")
            print(f"  Fits failed: {summary['n_failed']}")
            print(f"  Minimum p-value: {summary['min_pvalue']:.2e}")
            print(f"  Lambda GC: {summary['lambda_gc']:.3f}")

    return report


def create_qq_plot(pvalues: np.ndarray,
                   title: str = "Q-Q Plot",
                   figsize: Tuple[int, int] = (6, 6)) -> plt.Figure:
    """Create Q-Q plot of observed against uniform-expected p-values

    Args:
        pvalues: Array of p-values; NaN entries from failed fits are skipped
        title: Plot title
        figsize: Figure size

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    expected_pvals, observed_pvals = qq_plot_data(pvalues)
    if len(observed_pvals) == 0:
        ax.text(0.5, 0.5, 'No valid p-values for Q-Q plot',
                ha='center', va='center', transform=ax.transAxes)
        ax.set_title(title)
        return fig

    obs_log = -np.log10(observed_pvals)
    exp_log = -np.log10(expected_pvals)

    ax.scatter(exp_log, obs_log, alpha=0.6, s=4, edgecolors='none')

    max_val = max(np.max(exp_log), np.max(obs_log))
    ax.plot([0, max_val], [0, max_val], 'r--', alpha=0.8, label='Null hypothesis')

    lambda_gc = genomic_inflation_factor(observed_pvals)

    ax.set_xlabel(r'Expected $-\log_{10}(P)$')
    ax.set_ylabel(r'Observed $-\log_{10}(P)$')
    ax.set_title(f'{title}\nλ = {lambda_gc:.3f}')
    ax.grid(True, alpha=0.3)
    ax.legend()

    plt.tight_layout()
    return fig


def calculate_gwas_summary(result: AssociationResults) -> Dict:
    """Per-phenotype summary: SNPs tested, failed fits, min P and lambda GC"""
    pvalues = result.pvalues
    valid = pvalues[np.isfinite(pvalues)]
    return {
        'n_markers': result.n_markers,
        'n_failed': result.n_failed,
        'min_pvalue': float(np.min(valid)) if len(valid) else np.nan,
        'lambda_gc': genomic_inflation_factor(valid) if len(valid) else np.nan,
    }
