"""
Feature terms for candidate models.
Builds the design frame from plain columns and power terms.
"""
import numpy as np
import pandas as pd
from typing import List, Tuple

from cvflow.errors import InvalidParameter

# ---------------------------------------------------------------------
# Candidate feature terms
# ---------------------------------------------------------------------
# A term is either a plain column name ("horsepower") or a power of a
# numeric column ("horsepower^2"). Candidates that differ only in their
# terms share one dataset and one fold assignment.
POWER_SEP = "^"


def parse_term(term: str) -> Tuple[str, int]:
    """Split a term into (column, degree); plain columns have degree 1."""
    if POWER_SEP not in term:
        return term.strip(), 1
    col, _, degree = term.partition(POWER_SEP)
    try:
        degree = int(degree)
    except ValueError:
        raise InvalidParameter(f"bad power in term {term!r}") from None
    if degree < 1:
        raise InvalidParameter(f"power must be >= 1 in term {term!r}")
    return col.strip(), degree


def polynomial_terms(col: str, degree: int) -> List[str]:
    """Terms for a raw polynomial in one column: col, col^2, ..., col^degree."""
    if degree < 1:
        raise InvalidParameter(f"degree must be >= 1, got {degree}")
    return [col] + [f"{col}{POWER_SEP}{d}" for d in range(2, degree + 1)]


def build_design(df: pd.DataFrame, terms) -> pd.DataFrame:
    """
    Build the feature frame for a candidate from its terms.
    Power terms require a numeric column.
    """
    out = {}
    for term in terms:
        col, degree = parse_term(term)
        if col not in df.columns:
            raise InvalidParameter(f"term {term!r} refers to unknown column {col!r}")
        if degree == 1:
            out[term] = df[col]
            continue
        if not pd.api.types.is_numeric_dtype(df[col]):
            raise InvalidParameter(f"power term {term!r} needs a numeric column")
        out[term] = np.power(df[col].astype(float), degree)
    return pd.DataFrame(out, index=df.index)
