from __future__ import annotations

import enum
import json
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from afrobarometer.config import SUPPORTED_ROUNDS, DataDir
from afrobarometer.core.data_dir import resolve_data_dir
from afrobarometer.core.errors import AfrbIOError, AlreadyBuiltError, FormatError, NotBuiltError
from afrobarometer.core.survey_loader import RoundTable

logger = logging.getLogger(__name__)

_BUILD_FILE_RE = re.compile(r"^afrb_(\d+)\.parquet$")

# Parquet schema metadata key holding the declared column -> dtype map
COLUMN_TYPES_KEY = b"afrobarometer.column_types"


class RoundState(enum.Enum):
    NOT_BUILT = "not_built"
    BUILT = "built"


@dataclass
class BuiltRound:
    round: int
    path: Path
    size_bytes: int


def validate_round(round_: int) -> int:
    try:
        value = int(round_)
    except (TypeError, ValueError):
        raise ValueError(f"Round must be an integer, got {round_!r}") from None
    if value not in SUPPORTED_ROUNDS:
        raise ValueError(f"Round {value} is not supported. Supported rounds: {list(SUPPORTED_ROUNDS)}")
    return value


class BuildStore:
    """
    Per-round Parquet files under <root>/build.

    A round is BUILT exactly when build/afrb_<round>.parquet exists. Files are
    written to a temporary name and renamed into place, so that rename is the
    only NOT_BUILT -> BUILT transition.
    """

    def __init__(self, data_dir: DataDir):
        self.data_dir = data_dir

    @property
    def build_dir(self) -> Path:
        return self.data_dir.build

    # -- state ---------------------------------------------------------------

    def state(self, round_: int) -> RoundState:
        if self.data_dir.build_path(round_).is_file():
            return RoundState.BUILT
        return RoundState.NOT_BUILT

    def list_rounds(self) -> List[BuiltRound]:
        if not self.build_dir.is_dir():
            return []
        out: List[BuiltRound] = []
        for path in self.build_dir.iterdir():
            m = _BUILD_FILE_RE.match(path.name)
            if not m or not path.is_file():
                continue
            out.append(BuiltRound(round=int(m.group(1)), path=path, size_bytes=path.stat().st_size))
        return sorted(out, key=lambda b: b.round)

    def ensure_writable(self, rounds: Iterable[int], overwrite: bool) -> None:
        """
        Check, before any work is done, that `rounds` may be written.

        With overwrite=True the whole build directory is removed first.
        Otherwise any requested round that is already built is an error and
        nothing on disk is touched.
        """
        if overwrite:
            self.clear()
        else:
            built = [r for r in rounds if self.state(r) is RoundState.BUILT]
            if built:
                raise AlreadyBuiltError(
                    f"Rounds {built} are already built in {self.build_dir}. "
                    "Pass overwrite=True to rebuild.",
                    stage="write",
                )
        self.build_dir.mkdir(parents=True, exist_ok=True)

    def clear(self) -> None:
        if self.build_dir.exists():
            logger.info("Deleting build output: %s", self.build_dir)
            shutil.rmtree(self.build_dir)
        else:
            logger.info("Build output does not exist, nothing deleted: %s", self.build_dir)

    # -- write / read --------------------------------------------------------

    def write(self, table: RoundTable, *, overwrite: bool = False) -> Path:
        dest = self.data_dir.build_path(table.round)
        if dest.exists() and not overwrite:
            raise AlreadyBuiltError(
                f"{dest} already exists", round_=table.round, stage="write"
            )

        self.build_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Round %s: writing %s rows to %s", table.round, len(table.frame), dest)

        try:
            arrow_table = pa.Table.from_pandas(table.frame, preserve_index=False)
        except (pa.ArrowInvalid, pa.ArrowTypeError) as exc:
            raise FormatError(
                f"Merged table cannot be stored as Parquet: {exc}", round_=table.round, stage="write"
            ) from exc

        metadata = dict(arrow_table.schema.metadata or {})
        metadata[COLUMN_TYPES_KEY] = json.dumps(table.column_types).encode("utf-8")
        arrow_table = arrow_table.replace_schema_metadata(metadata)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".part", dir=self.build_dir)
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            pq.write_table(arrow_table, tmp_path)
            os.replace(tmp_path, dest)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise AfrbIOError(f"Failed to write {dest}: {exc}", round_=table.round, stage="write") from exc
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        return dest

    def read(self, round_: int) -> pd.DataFrame:
        round_ = validate_round(round_)

        if not self.build_dir.is_dir() or not self.list_rounds():
            raise NotBuiltError(
                f"No build output in {self.build_dir}. Run build() first.", round_=round_, stage="read"
            )
        path = self.data_dir.build_path(round_)
        if self.state(round_) is not RoundState.BUILT:
            raise NotBuiltError(
                f"Round {round_} has not been built (expected {path}).", round_=round_, stage="read"
            )

        logger.info("Round %s: loading %s", round_, path)
        return pq.read_table(path).to_pandas()

    def column_types(self, round_: int) -> Dict[str, str]:
        """Declared column -> dtype map stored alongside a built round."""
        path = self.data_dir.build_path(validate_round(round_))
        if not path.is_file():
            raise NotBuiltError(f"Round {round_} has not been built.", round_=round_, stage="read")
        metadata = pq.read_schema(path).metadata or {}
        raw = metadata.get(COLUMN_TYPES_KEY)
        return json.loads(raw.decode("utf-8")) if raw else {}


# ---------------------------------------------------------------------------
# Module-level accessors
# ---------------------------------------------------------------------------

def read_round(round_: int, data_dir: Optional[DataDir] = None) -> pd.DataFrame:
    """
    Load a built round fully into memory.

    Raises ValueError for a round outside SUPPORTED_ROUNDS and NotBuiltError
    when the round has no persisted output.
    """
    return BuildStore(resolve_data_dir(data_dir)).read(round_)


def list_built_rounds(data_dir: Optional[DataDir] = None) -> List[BuiltRound]:
    return BuildStore(resolve_data_dir(data_dir)).list_rounds()
