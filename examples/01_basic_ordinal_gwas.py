#!/usr/bin/env python3
"""
Example 01: Basic Ordinal GWAS

Runs the ordinal regression scan on the PHENOTYPE column that PLINK writes
into the .raw file; no phenotype or covariate files are needed.

Prerequisites:
- example.A.raw: output of `plink --bfile data --recode A`
"""

from ordinalgwas.pipelines.gwas import OrdinalGWASPipeline


def main():
    print("=" * 70)
    print("EXAMPLE 01: Basic Ordinal GWAS")
    print("=" * 70)

    pipeline = OrdinalGWASPipeline(output_dir='./example01_results')

    print("\n1. Loading data...")
    pipeline.load_data(genotype_file='example.A.raw')

    # Without a phenotype file the PHENOTYPE column of the .raw file is used
    print("\n2. Checking data...")
    pipeline.check_data()

    print("\n3. Running ordinal logistic regression...")
    pipeline.run_analysis(split_snp=True)

    print("\n" + "=" * 70)
    print("Analysis Complete!")
    print("=" * 70)
    print("\nResults saved to: ./example01_results/")
    print("- ordinalGWAS_results.csv          (all SNPs)")
    print("- ordinalGWAS_results_split.csv    (SNP and A1 columns)")
    print("- ordinalGWAS_PHENOTYPE_qq.png     (QQ plot)")
    print("- ordinalGWAS_summary.csv          (fits, failures, lambda GC)")


if __name__ == '__main__':
    main()
