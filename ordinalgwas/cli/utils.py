import argparse
from typing import List, Optional

from ..association.polr import DEFAULT_MAXITER
from ..pipelines.gwas import OUTPUT_CHOICES


def normalize_outputs(outputs: List[str]) -> List[str]:
    """Helper to normalize output choices"""
    if not outputs:
        return list(OUTPUT_CHOICES)
    valid = []
    for item in outputs:
        for o in str(item).split(','):
            o = o.strip().lower()
            if o in OUTPUT_CHOICES and o not in valid:
                valid.append(o)
    return valid if valid else list(OUTPUT_CHOICES)


def split_names(value: Optional[str]) -> Optional[List[str]]:
    """Comma-separated column names to a list; None or blank stays None"""
    if value is None:
        return None
    names = [v.strip() for v in value.split(',') if v.strip()]
    return names or None


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments for the ordinal GWAS pipeline"""
    parser = argparse.ArgumentParser(
        description="Ordinal logistic regression GWAS on PLINK .raw genotype files",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Input files
    parser.add_argument("--genotype", "-g", required=True,
                        help="PLINK .raw genotype file (plink --recode A or --recode AD)")
    parser.add_argument("--phenotype", "-p", default=None,
                        help="Phenotype file (FID IID <phenotypes>); defaults to the "
                             "PHENOTYPE column of the genotype file")
    parser.add_argument("--covariates", "-c", default=None,
                        help="Covariate file (FID IID <covariates>)")
    parser.add_argument("--same-pheno-covar-file", action='store_true',
                        help="Phenotypes and covariates are both in the phenotype file")

    # Selections
    parser.add_argument("--pheno-name", default=None,
                        help="Comma-separated phenotype column names")
    parser.add_argument("--covar-name", default=None,
                        help="Comma-separated covariate column names")
    parser.add_argument("--all-pheno", action='store_true',
                        help="Analyse every phenotype column")
    parser.add_argument("--all-covar", action='store_true',
                        help="Adjust for every covariate column")

    # Fitting
    parser.add_argument("--cpu", type=int, default=1,
                        help="Worker processes for the per-SNP fits")
    parser.add_argument("--maxiter", type=int, default=DEFAULT_MAXITER,
                        help="Maximum optimizer iterations per fit")

    # Output
    parser.add_argument("--outputdir", "-o", default="./ordinalGWAS_results",
                        help="Output directory")
    parser.add_argument("--split-snp", action='store_true',
                        help="Also write results with SNP and A1 (and Model for AD files) split out")
    parser.add_argument("--outputs", nargs='+',
                        choices=list(OUTPUT_CHOICES),
                        default=list(OUTPUT_CHOICES),
                        help="Outputs to generate")
    parser.add_argument("--quiet", "-q", action='store_true',
                        help="Suppress progress messages")

    args = parser.parse_args(argv)
    if args.cpu < 1:
        parser.error("--cpu must be at least 1")
    if args.maxiter < 1:
        parser.error("--maxiter must be at least 1")
    return args
