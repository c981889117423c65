from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from afrobarometer.core.errors import FormatError
from afrobarometer.core.location_loader import LOCATION_COLS
from afrobarometer.core.survey_loader import RESPONDENT_COL, RoundTable

logger = logging.getLogger(__name__)

LOCATION_SUFFIX = "_location"


def _duplicate_count(series: pd.Series) -> int:
    return int(series.dropna().duplicated().sum())


def merge_locations(survey: RoundTable, locations: Optional[pd.DataFrame]) -> RoundTable:
    """
    Left-join respondent coordinates onto a round's survey rows.

    Every survey row is kept and keeps its order; rows without a matching
    respno get null latitude/longitude, and location rows matching no survey
    row are dropped. Duplicate respno values are not collapsed: each matching
    pair yields one output row.
    """
    if locations is None:
        return survey

    if RESPONDENT_COL not in survey.frame.columns:
        raise FormatError(
            f"Questionnaire has no '{RESPONDENT_COL}' column; cannot attach locations.",
            round_=survey.round,
            stage="merge",
        )

    logger.info("Round %s: merging locations", survey.round)

    dup_survey = _duplicate_count(survey.frame[RESPONDENT_COL])
    dup_loc = _duplicate_count(locations[RESPONDENT_COL])
    if dup_survey or dup_loc:
        logger.warning(
            "Round %s: duplicate respondent ids (questionnaire=%s, locations=%s); "
            "matching rows are repeated in the merged table.",
            survey.round,
            dup_survey,
            dup_loc,
        )

    left = survey.frame.copy()
    right = locations[LOCATION_COLS].copy()
    left[RESPONDENT_COL] = left[RESPONDENT_COL].astype("string")
    right[RESPONDENT_COL] = right[RESPONDENT_COL].astype("string")
    # pandas matches missing keys with each other; a blank respno matches nothing
    right = right[right[RESPONDENT_COL].notna()]

    merged = left.merge(
        right,
        on=RESPONDENT_COL,
        how="left",
        sort=False,
        suffixes=("", LOCATION_SUFFIX),
    )

    matched = int(merged[RESPONDENT_COL].isin(right[RESPONDENT_COL].dropna()).sum())
    logger.info(
        "Round %s: %s of %s merged rows have coordinates", survey.round, matched, len(merged)
    )

    out = RoundTable(round=survey.round, frame=merged)
    out.refresh_column_types()
    return out
