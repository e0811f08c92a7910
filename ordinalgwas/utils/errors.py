"""
Exception types raised while loading, checking and formatting GWAS data.

All of them derive from ValueError so callers that already guard input
handling with ``except ValueError`` keep working.
"""

from typing import Iterable


class ConfigurationError(ValueError):
    """Analysis options that cannot be used together or cannot be satisfied."""


class ColumnNotFoundError(ConfigurationError):
    """A requested phenotype/covariate column is absent from its table."""

    def __init__(self, columns: Iterable[str], table: str):
        self.columns = list(columns)
        self.table = table
        super().__init__(
            "Column(s) not found in {} table: {}".format(table, ', '.join(self.columns))
        )


class TableFormatError(ValueError):
    """An input table has a malformed header or violates its layout."""


class SNPLabelError(ValueError):
    """A result SNP label is not of the form <variant>_<allele>."""

    def __init__(self, label: str, reason: str = "expected <variant>_<allele>"):
        self.label = label
        super().__init__(f"Malformed SNP label '{label}': {reason}")
