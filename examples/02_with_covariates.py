#!/usr/bin/env python3
"""
Example 02: Several Phenotypes with Covariates

Uses the functional API with separate phenotype and covariate files and
fans the per-SNP fits out over four worker processes.

Prerequisites:
- example.A.raw: output of `plink --recode A`
- example.pheno.txt: FID IID PHENOTYPE1 PHENOTYPE2
- example.covar.txt: FID IID COVARIATE1 COVARIATE2
"""

from ordinalgwas import load_data, check_data, run_analysis, split_snp


def main():
    data = load_data(
        'example.A.raw',
        pheno_file='example.pheno.txt',
        covar_file='example.covar.txt',
    )

    checked = check_data(
        data,
        pheno_name=['PHENOTYPE1', 'PHENOTYPE2'],
        covar_name=['COVARIATE1', 'COVARIATE2'],
    )

    results = run_analysis(checked, cpu=4)
    results = split_snp(results)

    print(results.sort_values('P').head(10).to_string(index=False))
    results.to_csv('example02_results.csv', index=False)


if __name__ == '__main__':
    main()
