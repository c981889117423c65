from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

import requests

from afrobarometer.config import SUPPORTED_ROUNDS, DataDir
from afrobarometer.core.data_dir import resolve_data_dir
from afrobarometer.core.errors import AfrbIOError, AfrobarometerError
from afrobarometer.core.fetcher import fetch_round_files
from afrobarometer.core.location_loader import location_file_exists, read_locations
from afrobarometer.core.merger import merge_locations
from afrobarometer.core.store import BuildStore, validate_round
from afrobarometer.core.survey_loader import read_questionnaire

logger = logging.getLogger(__name__)


@dataclass
class RoundBuildResult:
    round: int
    rows: int
    columns: int
    has_locations: bool
    path: Path
    elapsed_seconds: float


@dataclass
class BuildReport:
    data_dir: DataDir
    results: List[RoundBuildResult] = field(default_factory=list)

    @property
    def rounds(self) -> List[int]:
        return [r.round for r in self.results]


def _normalize_rounds(rounds: Iterable[int]) -> List[int]:
    cleaned = sorted({validate_round(r) for r in rounds})
    if not cleaned:
        raise ValueError("At least one round must be requested.")
    return cleaned


def build_round(
    round_: int,
    data_dir: DataDir,
    store: BuildStore,
    *,
    overwrite: bool = False,
    session: Optional[requests.Session] = None,
) -> RoundBuildResult:
    """Fetch, transform, merge and persist a single round."""
    t0 = time.perf_counter()

    q_path = fetch_round_files(round_, data_dir, session=session)
    table = read_questionnaire(q_path, round_)

    has_locations = location_file_exists(round_, data_dir)
    if has_locations:
        logger.info("Round %s: locations", round_)
        locations = read_locations(data_dir.location_path(round_), round_)
        table = merge_locations(table, locations)

    path = store.write(table, overwrite=overwrite)

    return RoundBuildResult(
        round=round_,
        rows=len(table.frame),
        columns=len(table.frame.columns),
        has_locations=has_locations,
        path=path,
        elapsed_seconds=time.perf_counter() - t0,
    )


def build(
    rounds: Iterable[int] = SUPPORTED_ROUNDS,
    overwrite: bool = False,
    *,
    data_dir: Optional[DataDir] = None,
    session: Optional[requests.Session] = None,
) -> BuildReport:
    """
    Build the local store for `rounds`.

    Runs after afrb_dir() (or with an explicit data_dir). Missing public files
    are downloaded, location CSVs found in `locations/` are merged in, and one
    Parquet file per round is written under `build/`.

    overwrite=False refuses to touch rounds that are already built;
    overwrite=True deletes the existing build output first. Rounds are built
    one after another and the first failure stops the batch; rounds finished
    before it stay built.
    """
    data_dir = resolve_data_dir(data_dir)
    requested = _normalize_rounds(rounds)

    store = BuildStore(data_dir)
    store.ensure_writable(requested, overwrite)

    logger.info("Building Afrobarometer rounds %s in %s", requested, data_dir.root)

    report = BuildReport(data_dir=data_dir)
    for round_ in requested:
        try:
            result = build_round(round_, data_dir, store, overwrite=overwrite, session=session)
        except AfrobarometerError:
            raise
        except OSError as exc:
            raise AfrbIOError(str(exc), round_=round_, stage="build") from exc
        logger.info(
            "Round %s: built %s rows x %s columns in %.1fs",
            round_, result.rows, result.columns, result.elapsed_seconds,
        )
        report.results.append(result)

    logger.info("Local Afrobarometer store complete. Use read_round(x) to load round x.")
    return report
