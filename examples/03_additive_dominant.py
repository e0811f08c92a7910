#!/usr/bin/env python3
"""
Example 03: Additive and Dominant Coding

PLINK `--recode AD` writes an extra <SNP>_HET column per variant. Each
column is tested on its own; split_snp labels the rows Additive/Dominant.

Prerequisites:
- example.AD.raw: output of `plink --recode AD`
- example.pheno.covar.txt: FID IID PHENOTYPE1 PHENOTYPE2 COVARIATE1 COVARIATE2
"""

from ordinalgwas import load_data, check_data, run_analysis, split_snp


def main():
    data = load_data(
        'example.AD.raw',
        pheno_file='example.pheno.covar.txt',
        same_pheno_covar_file=True,
    )

    # Every column that is not a covariate is analysed as a phenotype
    checked = check_data(data, covar_name=['COVARIATE1', 'COVARIATE2'], all_pheno=True)

    results = split_snp(run_analysis(checked))

    dominant = results[results['Model'] == 'Dominant']
    print(dominant.sort_values('P').head(10).to_string(index=False))


if __name__ == '__main__':
    main()
