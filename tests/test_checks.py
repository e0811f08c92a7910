import numpy as np
import pandas as pd
import pytest

from ordinalgwas.data.checks import check_data, recode_missing, to_ordered_categorical
from ordinalgwas.data.loaders import load_data
from ordinalgwas.utils.errors import ConfigurationError, ColumnNotFoundError

from conftest import write_raw, write_table


@pytest.fixture
def separate_files(ordinal_dataset):
    return load_data(
        ordinal_dataset['geno_file'],
        pheno_file=ordinal_dataset['pheno_file'],
        covar_file=ordinal_dataset['covar_file'],
        verbose=False,
    )


@pytest.fixture
def combined_file(ordinal_dataset):
    return load_data(
        ordinal_dataset['geno_file'],
        pheno_file=ordinal_dataset['pheno_covar_file'],
        same_pheno_covar_file=True,
        verbose=False,
    )


def test_default_phenotype_from_genotype_file(ordinal_dataset) -> None:
    data = load_data(ordinal_dataset['geno_file'], verbose=False)

    checked = check_data(data, verbose=False)

    assert checked.pheno_name == ['PHENOTYPE']
    assert checked.covar_name == []
    assert checked.snps == ordinal_dataset['snps']
    assert checked.merged['PHENOTYPE'].cat.ordered
    # -9 in the .raw PHENOTYPE column is missing
    assert checked.merged['PHENOTYPE'].isna().sum() == 3


def test_default_phenotype_rejects_other_names(ordinal_dataset) -> None:
    data = load_data(ordinal_dataset['geno_file'], verbose=False)

    with pytest.raises(ConfigurationError):
        check_data(data, pheno_name='PHENOTYPE1', verbose=False)
    with pytest.raises(ConfigurationError):
        check_data(data, all_pheno=True, verbose=False)


def test_pheno_name_and_all_pheno_are_exclusive(separate_files) -> None:
    with pytest.raises(ConfigurationError, match="cannot be used together"):
        check_data(separate_files, pheno_name='PHENOTYPE1', all_pheno=True, verbose=False)


def test_covar_name_and_all_covar_are_exclusive(separate_files) -> None:
    with pytest.raises(ConfigurationError, match="cannot be used together"):
        check_data(separate_files, pheno_name='PHENOTYPE1', covar_name='COVARIATE1',
                   all_covar=True, verbose=False)


def test_phenotype_file_requires_a_selection(separate_files) -> None:
    with pytest.raises(ConfigurationError):
        check_data(separate_files, verbose=False)


def test_missing_phenotype_column_is_reported(separate_files) -> None:
    with pytest.raises(ColumnNotFoundError) as excinfo:
        check_data(separate_files, pheno_name=['PHENOTYPE1', 'NOPE'], verbose=False)

    assert excinfo.value.columns == ['NOPE']
    assert excinfo.value.table == 'phenotype'


def test_missing_covariate_column_is_reported(separate_files) -> None:
    with pytest.raises(ColumnNotFoundError, match="AGE"):
        check_data(separate_files, pheno_name='PHENOTYPE1', covar_name='AGE', verbose=False)


def test_phenotype_and_covariate_names_must_not_overlap(combined_file) -> None:
    with pytest.raises(ConfigurationError, match="same variable names"):
        check_data(combined_file, pheno_name=['PHENOTYPE1', 'COVARIATE1'],
                   covar_name='COVARIATE1', verbose=False)


def test_phenotype_and_covariate_overlap_across_separate_files(ordinal_dataset, tmp_path) -> None:
    ids = ordinal_dataset['ids']
    clash_file = write_table(tmp_path / "clash.covar.txt", ids,
                             {'PHENOTYPE1': np.ones(len(ids)), 'AGE': np.arange(len(ids))})
    data = load_data(ordinal_dataset['geno_file'], pheno_file=ordinal_dataset['pheno_file'],
                     covar_file=clash_file, verbose=False)

    with pytest.raises(ConfigurationError, match="same variable names"):
        check_data(data, pheno_name='PHENOTYPE1', covar_name=['PHENOTYPE1', 'AGE'], verbose=False)


def test_missing_value_tokens_in_iid_do_not_join_across_families(tmp_path) -> None:
    geno_file = write_raw(
        tmp_path / "na_ids.raw",
        [("FAM1", "NA"), ("FAM3", "I3"), ("FAM4", "I4"), ("FAM5", "I5")],
        [1, 2, 3, 1],
        {'rs1_A': [0, 1, 2, 1]},
    )
    pheno_file = write_table(
        tmp_path / "na_ids.pheno.txt",
        [("FAM2", "NA"), ("FAM3", "I3"), ("FAM4", "I4"), ("FAM5", "I5")],
        {'SCORE': [3, 1, 2, 3]},
    )
    data = load_data(geno_file, pheno_file=pheno_file, verbose=False)

    with pytest.warns(UserWarning, match="genotyped samples"):
        checked = check_data(data, pheno_name='SCORE', verbose=False)

    # FAM1 NA and FAM2 NA are different samples
    assert list(checked.merged['ID']) == ['FAM3 I3', 'FAM4 I4', 'FAM5 I5']
    assert checked.summary['n_genotype_dropped'] == 1


def test_separate_files_select_phenotypes_and_covariates(separate_files) -> None:
    checked = check_data(separate_files, pheno_name=['PHENOTYPE1', 'PHENOTYPE2'],
                         covar_name=['COVARIATE1', 'COVARIATE2'], verbose=False)

    assert checked.pheno_name == ['PHENOTYPE1', 'PHENOTYPE2']
    assert checked.covar_name == ['COVARIATE1', 'COVARIATE2']
    assert checked.n_individuals == 200
    assert checked.n_tests == 6
    assert checked.summary['n_genotype_dropped'] == 0


def test_all_pheno_and_all_covar_with_separate_files(separate_files) -> None:
    checked = check_data(separate_files, all_pheno=True, all_covar=True, verbose=False)

    assert checked.pheno_name == ['PHENOTYPE1', 'PHENOTYPE2']
    assert checked.covar_name == ['COVARIATE1', 'COVARIATE2']


def test_covariate_file_without_selection_is_ignored(separate_files) -> None:
    with pytest.warns(UserWarning, match="no covariates were selected"):
        checked = check_data(separate_files, pheno_name='PHENOTYPE1', verbose=False)

    assert checked.covar_name == []
    assert not checked.has_covariates


def test_covariates_requested_without_source(ordinal_dataset) -> None:
    data = load_data(ordinal_dataset['geno_file'], pheno_file=ordinal_dataset['pheno_file'], verbose=False)

    with pytest.raises(ConfigurationError, match="no covariate file"):
        check_data(data, pheno_name='PHENOTYPE1', covar_name='COVARIATE1', verbose=False)


def test_combined_file_all_pheno_takes_the_complement(combined_file) -> None:
    checked = check_data(combined_file, covar_name=['COVARIATE1', 'COVARIATE2'],
                         all_pheno=True, verbose=False)

    assert checked.pheno_name == ['PHENOTYPE1', 'PHENOTYPE2']
    assert checked.covar_name == ['COVARIATE1', 'COVARIATE2']


def test_combined_file_all_covar_takes_the_complement(combined_file) -> None:
    checked = check_data(combined_file, pheno_name='PHENOTYPE1', all_covar=True, verbose=False)

    assert checked.covar_name == ['PHENOTYPE2', 'COVARIATE1', 'COVARIATE2']


def test_combined_file_rejects_all_pheno_with_all_covar(combined_file) -> None:
    with pytest.raises(ConfigurationError):
        check_data(combined_file, all_pheno=True, all_covar=True, verbose=False)


def test_duplicate_names_in_selection(separate_files) -> None:
    with pytest.raises(ConfigurationError, match="more than once"):
        check_data(separate_files, pheno_name=['PHENOTYPE1', 'PHENOTYPE1'], verbose=False)


def test_inner_join_keeps_genotype_order_and_reports_drops(ordinal_dataset, tmp_path) -> None:
    ids = ordinal_dataset['ids']
    # subset of samples, written in reverse order
    kept = list(reversed(ids[10:60]))
    values = [ordinal_dataset['pheno2'][ids.index(i)] for i in kept]
    pheno_file = write_table(tmp_path / "subset.txt", kept, {'PHENOTYPE2': values})
    data = load_data(ordinal_dataset['geno_file'], pheno_file=pheno_file, verbose=False)

    with pytest.warns(UserWarning, match="150 of 200"):
        checked = check_data(data, pheno_name='PHENOTYPE2', verbose=False)

    expected_ids = [f"{fid} {iid}" for fid, iid in ids[10:60]]
    assert list(checked.merged['ID']) == expected_ids
    assert checked.summary == {
        'n_genotype': 200,
        'n_phenotype': 50,
        'n_merged': 50,
        'n_genotype_dropped': 150,
    }


def test_no_common_samples(ordinal_dataset, tmp_path) -> None:
    pheno_file = write_table(tmp_path / "other.txt", [("X", "1"), ("X", "2")], {'P': [1, 2]})
    data = load_data(ordinal_dataset['geno_file'], pheno_file=pheno_file, verbose=False)

    with pytest.raises(ValueError, match="No common individuals"):
        check_data(data, pheno_name='P', verbose=False)


def test_phenotype_with_two_levels_warns(ordinal_dataset, tmp_path) -> None:
    ids = ordinal_dataset['ids']
    pheno_file = write_table(tmp_path / "binary.txt", ids, {'CASE': [i % 2 for i in range(len(ids))]})
    data = load_data(ordinal_dataset['geno_file'], pheno_file=pheno_file, verbose=False)

    with pytest.warns(UserWarning, match="at least 3"):
        checked = check_data(data, pheno_name='CASE', verbose=False)

    assert list(checked.merged['CASE'].cat.categories) == [0, 1]


def test_covariate_minus_nine_is_missing_in_every_mode(ordinal_dataset, tmp_path) -> None:
    ids = ordinal_dataset['ids']
    cov = list(ordinal_dataset['cov1'])
    cov[4] = -9
    pheno_covar = write_table(tmp_path / "pc.txt", ids,
                              {'PHENOTYPE1': ordinal_dataset['pheno1'], 'COVARIATE1': cov})
    covar = write_table(tmp_path / "c.txt", ids, {'COVARIATE1': cov})

    combined = check_data(
        load_data(ordinal_dataset['geno_file'], pheno_file=pheno_covar,
                  same_pheno_covar_file=True, verbose=False),
        pheno_name='PHENOTYPE1', covar_name='COVARIATE1', verbose=False,
    )
    separate = check_data(
        load_data(ordinal_dataset['geno_file'], pheno_file=ordinal_dataset['pheno_file'],
                  covar_file=covar, verbose=False),
        pheno_name='PHENOTYPE1', covar_name='COVARIATE1', verbose=False,
    )

    assert np.isnan(combined.merged.loc[4, 'COVARIATE1'])
    assert np.isnan(separate.merged.loc[4, 'COVARIATE1'])


def test_recode_missing_handles_numbers_and_text() -> None:
    series = pd.Series(['-9', 'mild', -9, 2, None], dtype=object)

    recoded = recode_missing(series)

    assert recoded.isna().tolist() == [True, False, True, False, True]


def test_to_ordered_categorical_orders_numbers_numerically() -> None:
    series = pd.Series([10, 2, 1, np.nan, 2])

    ordered = to_ordered_categorical(series)

    assert ordered.cat.ordered
    assert list(ordered.cat.categories) == [1, 2, 10]
    assert ordered.isna().tolist() == [False, False, False, True, False]


def test_to_ordered_categorical_orders_text_lexically() -> None:
    series = pd.Series(['severe', 'mild', None, 'moderate'])

    ordered = to_ordered_categorical(series)

    assert list(ordered.cat.categories) == ['mild', 'moderate', 'severe']
    assert pd.isna(ordered.iloc[2])
