"""
Result table assembly and SNP label splitting
"""

import re
from typing import Iterable, List

import numpy as np
import pandas as pd

from .data_types import AssociationResults, RESULT_COLUMNS
from .errors import SNPLabelError

COMBINED_COLUMNS = ['Phenotype', 'SNP'] + RESULT_COLUMNS
SPLIT_COLUMNS = ['Phenotype', 'SNP', 'A1'] + RESULT_COLUMNS
DOMINANT_TAG = 'HET'

# R's read.table prefixes names that start with a digit (e.g. 15:10001_A)
_R_NAME_PREFIX = re.compile(r'^X(?=\d)')


def combine_results(results: Iterable[AssociationResults]) -> pd.DataFrame:
    """Stack per-phenotype results into one table

    Args:
        results: AssociationResults, one per phenotype, in analysis order

    Returns:
        DataFrame with columns Phenotype, SNP, BETA, SE, Tvalue, P, OR, L95, U95
    """
    frames = []
    for res in results:
        df = res.to_dataframe()
        df.insert(0, 'Phenotype', res.phenotype)
        frames.append(df)

    if not frames:
        return pd.DataFrame(columns=COMBINED_COLUMNS)
    return pd.concat(frames, ignore_index=True)[COMBINED_COLUMNS]


def _split_label(label: str, strip_r_prefix: bool = False):
    cleaned = str(label)
    if strip_r_prefix:
        cleaned = _R_NAME_PREFIX.sub('', cleaned)
    variant, sep, tag = cleaned.rpartition('_')
    if not sep or not variant or not tag:
        raise SNPLabelError(label)
    return variant, tag


def split_snp(results: pd.DataFrame, strip_r_prefix: bool = False) -> pd.DataFrame:
    """Split PLINK variant labels into SNP and effect allele

    Labels from ``plink --recode A`` look like ``<SNP>_<A1>``; ``--recode AD``
    adds a ``<SNP>_HET`` column per variant. For additive files the result
    gains an ``A1`` column. When any ``HET`` label is present the dominant
    rows take the allele of the additive row of the same SNP and phenotype,
    and a ``Model`` column (Additive / Dominant) is appended.

    Labels are used exactly as written by default, so a variant ID such as
    ``X123`` is left intact. Tables whose labels went through R's
    ``read.table`` carry an extra ``X`` before names that start with a
    digit (``15:10001_A`` becomes ``X15:10001_A``); pass
    ``strip_r_prefix=True`` to remove it. That also strips a genuine
    leading ``X`` followed by a digit.

    Args:
        results: Table from ``run_analysis`` (Phenotype, SNP, BETA ... U95)
        strip_r_prefix: Drop a leading ``X`` that is followed by a digit

    Returns:
        New DataFrame; the input is not modified.

    Raises:
        SNPLabelError: A label has no underscore, or a HET row has no
            matching additive row.
    """
    missing = [c for c in COMBINED_COLUMNS if c not in results.columns]
    if missing:
        raise ValueError(f"Result table is missing columns: {missing}")

    out = results.copy()
    parts = [_split_label(label, strip_r_prefix) for label in out['SNP']]
    out['SNP'] = [variant for variant, _ in parts]
    tags = [tag for _, tag in parts]

    is_dominant = np.array([tag == DOMINANT_TAG for tag in tags], dtype=bool)
    if not is_dominant.any():
        out['A1'] = tags
        return out[SPLIT_COLUMNS].reset_index(drop=True)

    allele_of = {}
    for phenotype, variant, tag, dominant in zip(out['Phenotype'], out['SNP'], tags, is_dominant):
        if not dominant:
            allele_of[(phenotype, variant)] = tag

    alleles: List[str] = []
    for label, phenotype, variant, tag, dominant in zip(results['SNP'], out['Phenotype'], out['SNP'],
                                                         tags, is_dominant):
        if not dominant:
            alleles.append(tag)
            continue
        key = (phenotype, variant)
        if key not in allele_of:
            raise SNPLabelError(label, reason=f"no additive column found for variant '{variant}'")
        alleles.append(allele_of[key])

    out['A1'] = alleles
    out['Model'] = np.where(is_dominant, 'Dominant', 'Additive')
    return out[SPLIT_COLUMNS + ['Model']].reset_index(drop=True)
