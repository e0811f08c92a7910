"""
Ordinal GWAS Pipeline Module

Object-oriented wrapper around the functional API: loads the PLINK .raw and
phenotype/covariate tables, resolves analysis options, runs the ordinal
regression scan and writes result tables and plots to an output directory.
"""

import time
import pandas as pd
from pathlib import Path
from typing import List, Optional, Tuple, Union, Iterable

from ..data.loaders import load_data
from ..data.checks import check_data
from ..association.polr import run_association, DEFAULT_MAXITER
from ..utils.data_types import InputData, AnalysisData, AssociationResults
from ..utils.formatting import combine_results, split_snp
from ..visualization.qq import OGWAS_Report

OUTPUT_CHOICES: Tuple[str, ...] = (
    'all_marker_results',
    'failed_fits',
    'qq',
    'summary',
)

RESULTS_FILE = "ordinalGWAS_results.csv"
SPLIT_RESULTS_FILE = "ordinalGWAS_results_split.csv"
FAILED_FITS_FILE = "ordinalGWAS_failed_fits.csv"
SUMMARY_FILE = "ordinalGWAS_summary.csv"
PLOT_PREFIX = "ordinalGWAS"


class OrdinalGWASPipeline:
    """
    High-level pipeline for ordinal GWAS.

    Typical workflow:
        1. Initialize pipeline with output directory
        2. Load genotype (.raw) and optional phenotype/covariate files
        3. Select phenotypes and covariates and match samples
        4. Run the ordinal regression scan; results are saved to the output
           directory

    Attributes:
        input_data (InputData): Tables read by ``load_data``
        analysis_data (AnalysisData): Merged table and resolved options
        results (list): AssociationResults per phenotype
        results_df (DataFrame): Combined result table
        output_dir (Path): Output directory for results

    Example:
        >>> pipeline = OrdinalGWASPipeline(output_dir='./ordinal_gwas')
        >>> pipeline.load_data(genotype_file='example.A.raw',
        ...                    phenotype_file='example.pheno.txt',
        ...                    covariate_file='example.covar.txt')
        >>> pipeline.check_data(pheno_name=['PHENOTYPE1'], covar_name=['COVARIATE1'])
        >>> pipeline.run_analysis(split_snp=True)
    """

    def __init__(self, output_dir: Union[str, Path] = "./ordinalGWAS_results", verbose: bool = True):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.verbose = verbose

        self.input_data: Optional[InputData] = None
        self.analysis_data: Optional[AnalysisData] = None
        self.results: List[AssociationResults] = []
        self.results_df: Optional[pd.DataFrame] = None
        self.files_created: List[Path] = []

    def log(self, message: str):
        """Internal logger"""
        if self.verbose:
            print(message)

    def log_step(self, step_name: str, start_time: Optional[float] = None):
        """Log a pipeline step with optional timing"""
        if start_time is not None:
            elapsed = time.time() - start_time
            self.log(f"{step_name} completed in {elapsed:.2f} seconds")
        else:
            self.log(f"{step_name}...")

    def load_data(self,
                  genotype_file: Union[str, Path],
                  phenotype_file: Optional[Union[str, Path]] = None,
                  covariate_file: Optional[Union[str, Path]] = None,
                  same_pheno_covar_file: bool = False):
        """
        Load the genotype .raw file and optional phenotype/covariate files.

        Args:
            genotype_file: PLINK ``--recode A`` / ``--recode AD`` .raw file
            phenotype_file: Phenotype file (FID IID <phenotypes>)
            covariate_file: Covariate file (FID IID <covariates>)
            same_pheno_covar_file: Phenotypes and covariates share ``phenotype_file``

        Sets:
            self.input_data
        """
        step_start = time.time()
        self.log_step("Step 1: Loading input data")
        self.input_data = load_data(
            geno_file=genotype_file,
            pheno_file=phenotype_file,
            covar_file=covariate_file,
            same_pheno_covar_file=same_pheno_covar_file,
            verbose=self.verbose,
        )
        self.log_step("Data loading", step_start)

    def check_data(self,
                   pheno_name: Optional[Union[str, Iterable[str]]] = None,
                   covar_name: Optional[Union[str, Iterable[str]]] = None,
                   all_pheno: bool = False,
                   all_covar: bool = False):
        """
        Resolve phenotypes/covariates and match samples across tables.

        Raises:
            ValueError: If ``load_data`` has not been called
            ConfigurationError: If the selection is invalid
        """
        if self.input_data is None:
            raise ValueError("Data not loaded.")

        step_start = time.time()
        self.log_step("Step 2: Checking analysis options and matching individuals")
        self.analysis_data = check_data(
            self.input_data,
            pheno_name=pheno_name,
            covar_name=covar_name,
            all_pheno=all_pheno,
            all_covar=all_covar,
            verbose=self.verbose,
        )
        summary = self.analysis_data.summary
        self.log(f"   Original genotypes: {summary['n_genotype']}")
        if 'n_phenotype' in summary:
            self.log(f"   Original phenotypes: {summary['n_phenotype']}")
        if 'n_covariate' in summary:
            self.log(f"   Original covariates: {summary['n_covariate']}")
        self.log(f"   Matched intersection: {summary['n_merged']}")
        self.log_step("Individual matching", step_start)

    def run_analysis(self,
                     cpu: int = 1,
                     maxiter: int = DEFAULT_MAXITER,
                     split_snp: bool = False,
                     outputs: List[str] = list(OUTPUT_CHOICES)) -> pd.DataFrame:
        """
        Run the ordinal regression scan for every selected phenotype.

        Args:
            cpu: Worker processes for the per-SNP fits
            maxiter: Iteration cap per fit
            split_snp: Also write the table with SNP/A1 (and Model) split out
            outputs: Subset of OUTPUT_CHOICES to write

        Returns:
            Combined result table (Phenotype, SNP, BETA ... U95)
        """
        if self.analysis_data is None:
            raise ValueError("Data not checked. Call check_data() first.")

        step_start = time.time()
        self.log_step("Step 3: Running ordinal logistic regression")
        self.log(f"   {len(self.analysis_data.pheno_name)} phenotype(s) x "
                 f"{len(self.analysis_data.snps)} SNPs = {self.analysis_data.n_tests} fits")

        self.results = run_association(
            self.analysis_data,
            maxiter=maxiter,
            cpu=cpu,
            verbose=self.verbose,
        )
        self.results_df = combine_results(self.results)
        for res in self.results:
            self.log(f"   {res.phenotype}: {res.n_markers - res.n_failed} fits, {res.n_failed} failed")
        self.log_step("Association testing", step_start)

        self._save_results(outputs, split_snp)
        self.log("\nOrdinal GWAS Analysis Completed Successfully.")
        return self.results_df

    def _save_results(self, outputs: List[str], split: bool):
        step_start = time.time()
        self.log_step("Step 4: Saving results")

        if 'all_marker_results' in outputs:
            path = self.output_dir / RESULTS_FILE
            self.results_df.to_csv(path, index=False)
            self._record(path)

        if split:
            path = self.output_dir / SPLIT_RESULTS_FILE
            split_snp(self.results_df).to_csv(path, index=False)
            self._record(path)

        if 'failed_fits' in outputs:
            failed_frames = [res.errors_to_dataframe() for res in self.results if res.n_failed]
            if failed_frames:
                failed = pd.concat(failed_frames, ignore_index=True)
                path = self.output_dir / FAILED_FITS_FILE
                failed.to_csv(path, index=False)
                self._record(path)

        if 'qq' in outputs or 'summary' in outputs:
            report = OGWAS_Report(
                self.results,
                plot_types=['qq'] if 'qq' in outputs else [],
                output_prefix=str(self.output_dir / PLOT_PREFIX),
                verbose=False,
                save_plots=True,
            )
            for filename in report['files_created']:
                self._record(Path(filename))

            if 'summary' in outputs:
                rows = [
                    {
                        'Phenotype': phenotype,
                        'SNPs_Tested': stats['n_markers'],
                        'Fits_Failed': stats['n_failed'],
                        'Min_P': stats['min_pvalue'],
                        'Lambda_GC': stats['lambda_gc'],
                    }
                    for phenotype, stats in report['summary'].items()
                ]
                path = self.output_dir / SUMMARY_FILE
                pd.DataFrame(rows).to_csv(path, index=False)
                self._record(path)

        self.log_step("Saving results", step_start)

    def _record(self, path: Path):
        self.files_created.append(path)
        self.log(f"   Saved {path}")
