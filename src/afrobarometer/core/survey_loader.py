from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import pandas as pd

from afrobarometer.core.errors import AfrbIOError, FormatError

logger = logging.getLogger(__name__)

RESPONDENT_COL = "respno"
ROUND_COL = "round"


@dataclass
class RoundTable:
    """
    One round of survey data after the schema transform.

    column_types maps every column to its pandas dtype name, fixed at load
    time so the merge and the writer do not need to rediscover types.
    """
    round: int
    frame: pd.DataFrame
    column_types: Dict[str, str] = field(default_factory=dict)

    def refresh_column_types(self) -> None:
        self.column_types = {str(c): str(t) for c, t in self.frame.dtypes.items()}


# ---------------------------------------------------------------------------
# Transform steps
# ---------------------------------------------------------------------------

def normalize_column_names(df: pd.DataFrame) -> pd.DataFrame:
    """
    Lowercase column names and drop literal '$' characters.

    Several released .sav files carry variable names such as 'Q1$A'.
    """
    out = df.copy()
    out.columns = [str(c).lower().replace("$", "") for c in out.columns]
    return out


def resolve_value_labels(df: pd.DataFrame) -> pd.DataFrame:
    """
    Replace coded categorical columns with their label text.

    Every categorical column becomes a pandas 'string' column. Codes without
    a label keep their value, rendered as text; missing values stay <NA>.
    """
    out = df.copy()
    for col in out.columns:
        if isinstance(out[col].dtype, pd.CategoricalDtype):
            out[col] = (
                out[col]
                .astype(object)
                .map(lambda v: _value_text(v) if pd.notna(v) else pd.NA)
                .astype("string")
            )
    return out


def _value_text(value: Any) -> str:
    # SPSS stores every numeric code as a double; 3.0 is written "3"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def identifier_text(series: pd.Series) -> pd.Series:
    """
    Render respondent ids as text comparable across sources.

    Integral numbers lose their decimal part (1.0 -> "1"), both for numeric
    columns and for text such as "1.0"; other text is only stripped.
    """
    if pd.api.types.is_numeric_dtype(series):
        values = series.dropna()
        if (values == values.round()).all():
            return series.astype("Int64").astype("string")
        return series.astype("string")
    text = series.astype("string").str.strip()
    return text.str.replace(r"^(\d+)\.0+$", r"\1", regex=True)


def sort_by_respondent(df: pd.DataFrame) -> pd.DataFrame:
    """Stable ascending sort on respno when the column is present."""
    if RESPONDENT_COL not in df.columns:
        return df
    return df.sort_values(RESPONDENT_COL, kind="mergesort", na_position="last").reset_index(drop=True)


def coerce_respondent_id(df: pd.DataFrame) -> pd.DataFrame:
    if RESPONDENT_COL not in df.columns:
        return df
    out = df.copy()
    out[RESPONDENT_COL] = identifier_text(out[RESPONDENT_COL])
    return out


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def _read_sav(path: Path, round_: int) -> pd.DataFrame:
    if not path.is_file():
        raise AfrbIOError(f"Questionnaire file not found: {path}", round_=round_, stage="read")
    try:
        return pd.read_spss(path, convert_categoricals=True)
    except ImportError:
        raise
    except Exception as exc:
        raise FormatError(
            f"Could not parse SPSS questionnaire {path}: {exc}", round_=round_, stage="read"
        ) from exc


def read_questionnaire(path: Path, round_: int) -> RoundTable:
    """
    Load a round's questionnaire into a RoundTable.

    Steps, in order:
      1. parse the .sav file with value labels as categoricals
      2. lowercase names and strip '$'
      3. resolve categorical codes to label text
      4. add the `round` column
      5. sort by respno if present
    """
    path = Path(path)
    logger.info("Round %s: reading %s", round_, path)
    df = _read_sav(path, round_)

    logger.info("Round %s: transforming %s rows x %s columns", round_, len(df), len(df.columns))
    df = normalize_column_names(df)
    if df.columns.duplicated().any():
        dupes = sorted(set(df.columns[df.columns.duplicated()]))
        raise FormatError(
            f"Column names collide after normalization: {dupes}", round_=round_, stage="transform"
        )
    df = resolve_value_labels(df)
    df = coerce_respondent_id(df)
    df[ROUND_COL] = round_
    df = sort_by_respondent(df)

    table = RoundTable(round=round_, frame=df)
    table.refresh_column_types()
    return table
