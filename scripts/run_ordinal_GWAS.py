#!/usr/bin/env python3
"""
Ordinal GWAS Analysis Script (Pipeline Version)
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ordinalgwas.cli.utils import parse_args, normalize_outputs, split_names
from ordinalgwas.pipelines.gwas import OrdinalGWASPipeline


def main(argv=None):
    args = parse_args(argv)

    pipeline = OrdinalGWASPipeline(output_dir=args.outputdir, verbose=not args.quiet)

    try:
        # 1. Load Data
        pipeline.load_data(
            genotype_file=args.genotype,
            phenotype_file=args.phenotype,
            covariate_file=args.covariates,
            same_pheno_covar_file=args.same_pheno_covar_file,
        )

        # 2. Select phenotypes/covariates and match samples
        pipeline.check_data(
            pheno_name=split_names(args.pheno_name),
            covar_name=split_names(args.covar_name),
            all_pheno=args.all_pheno,
            all_covar=args.all_covar,
        )

        # 3. Run Analysis
        pipeline.run_analysis(
            cpu=args.cpu,
            maxiter=args.maxiter,
            split_snp=args.split_snp,
            outputs=normalize_outputs(args.outputs),
        )
    except (ValueError, FileNotFoundError) as e:
        # ConfigurationError, TableFormatError and SNPLabelError are ValueErrors
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
