"""
Data loading utilities for PLINK .raw genotype files and FID/IID tables
"""

import pandas as pd
from pathlib import Path
from typing import Union, Optional, List
import warnings
import time

from ..utils.data_types import InputData
from ..utils.errors import TableFormatError

# Leading columns written by `plink --recode A` / `--recode AD`
RAW_LEADING_COLUMNS = ['FID', 'IID', 'PAT', 'MAT', 'SEX', 'PHENOTYPE']
TABLE_ID_COLUMNS = ['FID', 'IID']
DEFAULT_PHENOTYPE = 'PHENOTYPE'
ID_SEPARATOR = ' '

NA_VALUES = [
    '', 'NA', 'NaN', 'nan', 'NAN', 'na', 'N/A', 'n/a', 'Null', 'NULL',
    'null', 'None', '<NA>', '#N/A', '#NA', '-NaN', '-nan', '.',
]


def make_sample_ids(fid: pd.Series, iid: pd.Series) -> pd.Series:
    """Composite sample identifier: family ID and individual ID joined by a space"""
    return fid.astype(str) + ID_SEPARATOR + iid.astype(str)


def _detect_separator(filepath: Union[str, Path]) -> str:
    """Tab-delimited files keep empty cells; anything else splits on whitespace runs."""
    filepath = Path(filepath)
    with filepath.open('r') as handle:
        for line in handle:
            if line.strip():
                return '\t' if '\t' in line else r'\s+'
    raise TableFormatError(f"File '{filepath}' is empty")


def _read_with_verbatim_ids(filepath: Path, sep: str, **kwargs) -> pd.DataFrame:
    """read_csv where FID and IID are never parsed as missing

    Missing-value tokens apply to every other column. An IID such as ``NA``
    or ``.`` is a real identifier and must stay distinct in the ID join.
    """
    columns = pd.read_csv(filepath, sep=sep, nrows=0).columns
    na_values = {c: NA_VALUES for c in columns if c not in TABLE_ID_COLUMNS}
    return pd.read_csv(filepath, sep=sep, na_values=na_values, keep_default_na=False,
                       dtype={'FID': str, 'IID': str}, **kwargs)


def _drop_blank_unnamed_columns(df: pd.DataFrame, filepath: Path) -> pd.DataFrame:
    """Remove header-less columns left by trailing delimiters; reject ones holding data"""
    unnamed = [c for c in df.columns if str(c).startswith('Unnamed:')]
    for column in unnamed:
        if df[column].notna().any():
            position = list(df.columns).index(column) + 1
            raise TableFormatError(
                f"Column {position} of '{filepath}' has values but no header name"
            )
    return df.drop(columns=unnamed)


def _check_unique_ids(df: pd.DataFrame, filepath: Path) -> None:
    duplicated = df['ID'][df['ID'].duplicated()]
    if len(duplicated):
        preview = ', '.join(sorted(set(map(str, duplicated)))[:5])
        raise TableFormatError(
            f"Detected {len(duplicated)} duplicated sample IDs (FID IID) in '{filepath}': {preview}"
        )


def _check_header(columns: List[str], expected: List[str], filepath: Path, min_data_columns: int = 1) -> None:
    if len(columns) < len(expected) + min_data_columns:
        raise TableFormatError(
            "File '{}' has {} columns; expected {} leading columns ({}) followed by data columns".format(
                filepath, len(columns), len(expected), ' '.join(expected)
            )
        )
    leading = [str(c) for c in columns[:len(expected)]]
    if leading != expected:
        raise TableFormatError(
            "Malformed header in '{}': expected leading columns {}, found {}".format(
                filepath, expected, leading
            )
        )


def load_genotype_raw(filepath: Union[str, Path]) -> pd.DataFrame:
    """Load a PLINK .raw genotype file (``--recode A`` or ``--recode AD``)

    The file is single-space delimited with header
    ``FID IID PAT MAT SEX PHENOTYPE <variant columns...>``.

    Args:
        filepath: Path to the .raw file

    Returns:
        DataFrame with columns ID, PHENOTYPE and one dosage column per variant,
        in file order. Parental and sex columns are dropped.

    Raises:
        TableFormatError: If the header is malformed, no variant columns are
            present, or a sample ID is duplicated
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Genotype file not found: {filepath}")

    try:
        df = _read_with_verbatim_ids(filepath, ' ', low_memory=False)
    except pd.errors.ParserError as e:
        raise TableFormatError(f"Could not parse genotype file '{filepath}': {e}") from e
    except pd.errors.EmptyDataError as e:
        raise TableFormatError(f"Genotype file '{filepath}' is empty") from e

    df = _drop_blank_unnamed_columns(df, filepath)
    _check_header(list(df.columns), RAW_LEADING_COLUMNS, filepath)

    snp_columns = list(df.columns[len(RAW_LEADING_COLUMNS):])
    dosages = df[snp_columns].apply(pd.to_numeric, errors='coerce')
    invalid = dosages.isna() & df[snp_columns].notna()
    if invalid.any().any():
        bad = [c for c in snp_columns if invalid[c].any()]
        raise TableFormatError(
            f"Genotype file '{filepath}' has non-numeric dosages in columns: {bad[:5]}"
        )

    geno = pd.concat(
        [
            make_sample_ids(df['FID'], df['IID']).rename('ID'),
            df[DEFAULT_PHENOTYPE],
            dosages,
        ],
        axis=1,
    )
    _check_unique_ids(geno, filepath)
    return geno.reset_index(drop=True)


def _load_fid_iid_table(filepath: Union[str, Path], kind: str) -> pd.DataFrame:
    """Shared reader for phenotype and covariate files (FID IID <columns...>)"""
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"{kind.capitalize()} file not found: {filepath}")

    separator = _detect_separator(filepath)
    try:
        df = _read_with_verbatim_ids(filepath, separator, index_col=False)
    except pd.errors.ParserError as e:
        raise TableFormatError(f"Could not parse {kind} file '{filepath}': {e}") from e

    df = _drop_blank_unnamed_columns(df, filepath)
    _check_header(list(df.columns), TABLE_ID_COLUMNS, filepath)

    data_columns = list(df.columns[len(TABLE_ID_COLUMNS):])
    if 'ID' in data_columns:
        raise TableFormatError(f"Column name 'ID' is reserved and cannot be used in '{filepath}'")

    table = df[data_columns].copy()
    table.insert(0, 'ID', make_sample_ids(df['FID'], df['IID']))
    _check_unique_ids(table, filepath)
    return table.reset_index(drop=True)


def load_phenotype_file(filepath: Union[str, Path]) -> pd.DataFrame:
    """Load phenotype file (FID IID <phenotypes...>)

    Args:
        filepath: Path to a whitespace- or tab-delimited phenotype file

    Returns:
        DataFrame with ID and phenotype columns. Values are kept as read;
        -9 recoding happens in ``check_data``.
    """
    return _load_fid_iid_table(filepath, 'phenotype')


def load_covariate_file(filepath: Union[str, Path]) -> pd.DataFrame:
    """Load covariate file (FID IID <covariates...>)."""
    return _load_fid_iid_table(filepath, 'covariate')


def load_data(geno_file: Union[str, Path],
              pheno_file: Optional[Union[str, Path]] = None,
              covar_file: Optional[Union[str, Path]] = None,
              same_pheno_covar_file: bool = False,
              verbose: bool = True) -> InputData:
    """Load genotype, phenotype and covariate files for an ordinal GWAS

    Args:
        geno_file: PLINK .raw genotype file (``--recode A`` or ``AD``)
        pheno_file: Optional phenotype file. Without it the PHENOTYPE column
            of the genotype file is analysed.
        covar_file: Optional covariate file. Not read when
            ``same_pheno_covar_file`` is True.
        same_pheno_covar_file: Set to True when ``pheno_file`` holds both
            phenotypes and covariates.
        verbose: Print progress

    Returns:
        InputData with geno, pheno, covar and same_pheno_covar_file

    Example:
        >>> data = load_data('example.A.raw', pheno_file='example.pheno.txt',
        ...                  covar_file='example.covar.txt')
    """
    start = time.time()

    geno = load_genotype_raw(geno_file)
    if verbose:
        print(f"   Loaded {len(geno)} individuals x {geno.shape[1] - 2} markers from {geno_file}")

    pheno = None
    if pheno_file is not None:
        pheno = load_phenotype_file(pheno_file)
        if verbose:
            label = 'phenotype/covariate' if same_pheno_covar_file else 'phenotype'
            print(f"   Loaded {len(pheno)} individuals with {pheno.shape[1] - 1} {label} columns")
    elif same_pheno_covar_file:
        warnings.warn("same_pheno_covar_file is set but no phenotype file was given; no covariates will be used.")

    covar = None
    if covar_file is not None:
        if same_pheno_covar_file:
            warnings.warn(
                f"Ignoring covariate file '{covar_file}' because same_pheno_covar_file is set; "
                "covariates are read from the phenotype file."
            )
        else:
            covar = load_covariate_file(covar_file)
            if verbose:
                print(f"   Loaded {len(covar)} individuals with {covar.shape[1] - 1} covariate columns")

    if verbose:
        print(f"   Data loading completed in {time.time() - start:.2f} seconds")

    return InputData(
        geno=geno,
        pheno=pheno,
        covar=covar,
        same_pheno_covar_file=same_pheno_covar_file and pheno is not None,
    )
