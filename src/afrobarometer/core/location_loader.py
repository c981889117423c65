from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from afrobarometer.config import DataDir
from afrobarometer.core.errors import AfrbIOError, FormatError
from afrobarometer.core.survey_loader import RESPONDENT_COL, identifier_text, sort_by_respondent

logger = logging.getLogger(__name__)

LATITUDE_COL = "latitude"
LONGITUDE_COL = "longitude"
LOCATION_COLS = [RESPONDENT_COL, LATITUDE_COL, LONGITUDE_COL]


def location_file_exists(round_: int, data_dir: DataDir) -> bool:
    return data_dir.location_path(round_).is_file()


def read_locations(path: Path, round_: int) -> pd.DataFrame:
    """
    Load a Locations_R<round>.csv file.

    Column names are matched case-insensitively. The result has exactly
    respno (string), latitude and longitude (float64), sorted by respno.
    """
    path = Path(path)
    logger.info("Round %s: reading locations %s", round_, path)

    try:
        # Everything as text first; coordinates are converted explicitly below
        df = pd.read_csv(path, dtype=str, keep_default_na=True)
    except FileNotFoundError as exc:
        raise AfrbIOError(f"Location file not found: {path}", round_=round_, stage="locations") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise FormatError(f"Malformed location CSV {path}: {exc}", round_=round_, stage="locations") from exc

    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = [c for c in LOCATION_COLS if c not in df.columns]
    if missing:
        raise FormatError(
            f"Location CSV {path} is missing required columns {missing}. "
            f"Present columns: {list(df.columns)}",
            round_=round_,
            stage="locations",
        )

    out = pd.DataFrame()
    out[RESPONDENT_COL] = identifier_text(df[RESPONDENT_COL])
    for col in (LATITUDE_COL, LONGITUDE_COL):
        try:
            out[col] = pd.to_numeric(df[col], errors="raise").astype("float64")
        except (TypeError, ValueError) as exc:
            raise FormatError(
                f"Column '{col}' in {path} is not numeric: {exc}", round_=round_, stage="locations"
            ) from exc

    logger.info("Round %s: %s location rows", round_, len(out))
    return sort_by_respondent(out)
