"""Shared fixtures that write small PLINK .raw and FID/IID tables."""

from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pytest

RAW_HEADER = ['FID', 'IID', 'PAT', 'MAT', 'SEX', 'PHENOTYPE']


def _fmt(value) -> str:
    if value is None:
        return 'NA'
    if isinstance(value, (float, np.floating)):
        if np.isnan(value):
            return 'NA'
        if float(value).is_integer():
            return str(int(value))
    return str(value)


def write_raw(path: Path,
              ids: Sequence[Tuple[str, str]],
              phenotype: Sequence,
              dosages: Dict[str, Sequence]) -> Path:
    """Write a single-space delimited .raw file."""
    lines = [' '.join(RAW_HEADER + list(dosages))]
    for i, (fid, iid) in enumerate(ids):
        row = [fid, iid, '0', '0', '1', _fmt(phenotype[i])]
        row += [_fmt(values[i]) for values in dosages.values()]
        lines.append(' '.join(row))
    path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
    return path


def write_table(path: Path,
                ids: Sequence[Tuple[str, str]],
                columns: Dict[str, Sequence],
                sep: str = ' ') -> Path:
    """Write an FID IID <columns> table; None/NaN are written as NA."""
    lines = [sep.join(['FID', 'IID'] + list(columns))]
    for i, (fid, iid) in enumerate(ids):
        lines.append(sep.join([fid, iid] + [_fmt(values[i]) for values in columns.values()]))
    path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
    return path


def simulate_ordinal(latent: np.ndarray, cutpoints: List[float]) -> np.ndarray:
    """Ordinal categories 1..K from a latent score and increasing cut points."""
    return np.searchsorted(np.asarray(cutpoints), latent) + 1


@pytest.fixture
def ordinal_dataset(tmp_path: Path):
    """200 samples, one causal SNP, two null SNPs, two covariates, two phenotypes."""
    rng = np.random.default_rng(2024)
    n = 200
    ids = [(f"FAM{i // 2}", f"IND{i}") for i in range(n)]

    causal = rng.binomial(2, 0.3, n).astype(float)
    null1 = rng.binomial(2, 0.4, n).astype(float)
    null2 = rng.binomial(2, 0.2, n).astype(float)
    null2[[3, 17, 101]] = np.nan

    cov1 = np.round(rng.normal(0, 1, n), 3)
    cov2 = rng.binomial(1, 0.5, n).astype(float)

    latent = 0.9 * causal + 0.5 * cov1 + rng.logistic(0, 1, n)
    pheno1 = simulate_ordinal(latent, [-0.5, 1.0, 2.5]).astype(float)
    pheno1[[0, 5, 50]] = -9
    pheno2 = simulate_ordinal(rng.logistic(0, 1, n), [-0.7, 0.7]).astype(float)

    dosages = {'rs1_A': causal, 'rs2_G': null1, 'rs3_T': null2}
    geno_file = write_raw(tmp_path / "example.A.raw", ids, pheno1, dosages)
    pheno_file = write_table(tmp_path / "example.pheno.txt", ids,
                             {'PHENOTYPE1': pheno1, 'PHENOTYPE2': pheno2})
    covar_file = write_table(tmp_path / "example.covar.txt", ids,
                             {'COVARIATE1': cov1, 'COVARIATE2': cov2}, sep='\t')
    pheno_covar_file = write_table(tmp_path / "example.pheno.covar.txt", ids,
                                   {'PHENOTYPE1': pheno1, 'PHENOTYPE2': pheno2,
                                    'COVARIATE1': cov1, 'COVARIATE2': cov2})

    return {
        'ids': ids,
        'geno_file': geno_file,
        'pheno_file': pheno_file,
        'covar_file': covar_file,
        'pheno_covar_file': pheno_covar_file,
        'snps': list(dosages),
        'dosages': dosages,
        'pheno1': pheno1,
        'pheno2': pheno2,
        'cov1': cov1,
        'cov2': cov2,
        'tmp_path': tmp_path,
    }


@pytest.fixture
def ad_dataset(tmp_path: Path):
    """Additive+dominant .raw file (plink --recode AD) with two variants."""
    rng = np.random.default_rng(7)
    n = 150
    ids = [(f"F{i}", f"I{i}") for i in range(n)]
    g1 = rng.binomial(2, 0.35, n).astype(float)
    g2 = rng.binomial(2, 0.45, n).astype(float)
    latent = 0.7 * g1 + rng.logistic(0, 1, n)
    pheno = simulate_ordinal(latent, [0.0, 1.2]).astype(float)
    dosages = {
        'rs10_C': g1,
        'rs10_HET': (g1 == 1).astype(float),
        'rs20_A': g2,
        'rs20_HET': (g2 == 1).astype(float),
    }
    geno_file = write_raw(tmp_path / "example.AD.raw", ids, pheno, dosages)
    return {'ids': ids, 'geno_file': geno_file, 'snps': list(dosages), 'pheno': pheno}
