from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "afrobarometer"
APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Cache directory layout
#
#   <root>/questionnaires/<basename of questionnaire url>
#   <root>/codebooks/<basename of codebook url>
#   <root>/locations/Locations_R<round>.csv   (placed by the user)
#   <root>/build/afrb_<round>.parquet         (written by the build)
# ---------------------------------------------------------------------------

QUESTIONNAIRES_SUBDIR = "questionnaires"
LOCATIONS_SUBDIR = "locations"
CODEBOOKS_SUBDIR = "codebooks"
BUILD_SUBDIR = "build"

LOCATION_FILE_TEMPLATE = "Locations_R{round}.csv"
BUILD_FILE_TEMPLATE = "afrb_{round}.parquet"

# Optional default cache root. When unset, a per-process temp dir is used.
AFRB_DATA_DIR = os.getenv("AFRB_DATA_DIR", "").strip()

# ---------------------------------------------------------------------------
# HTTP
#
# Downloads are large (tens of MB per round) so the timeout is generous.
# Retries default to 0: a failed download is fatal for the round.
# ---------------------------------------------------------------------------

HTTP_TIMEOUT_SECONDS = int(os.getenv("AFRB_HTTP_TIMEOUT", "300").strip() or 300)
HTTP_RETRIES = int(os.getenv("AFRB_HTTP_RETRIES", "0").strip() or 0)
DOWNLOAD_CHUNK_SIZE = 1024 * 1024

# ---------------------------------------------------------------------------
# Remote resources per round
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoundSource:
    questionnaire_url: str
    codebook_url: str


_BASE_URL = "http://afrobarometer.org/sites/default/files/data"

ROUND_SOURCES: Dict[int, RoundSource] = {
    1: RoundSource(
        questionnaire_url=f"{_BASE_URL}/round-1/merged_r1_data.sav",
        codebook_url=f"{_BASE_URL}/round-1/merged_r1_codebook2.pdf",
    ),
    2: RoundSource(
        questionnaire_url=f"{_BASE_URL}/round-2/merged_r2_data.sav",
        codebook_url=f"{_BASE_URL}/round-2/merged_r2_codebook2.pdf",
    ),
    3: RoundSource(
        questionnaire_url=f"{_BASE_URL}/round-3/merged_r3_data.sav",
        codebook_url=f"{_BASE_URL}/round-3/merged_r3_codebook2_0.pdf",
    ),
    4: RoundSource(
        questionnaire_url=f"{_BASE_URL}/round-4/merged_r4_data.sav",
        codebook_url=f"{_BASE_URL}/round-4/merged_r4_codebook3.pdf",
    ),
    5: RoundSource(
        questionnaire_url=(
            f"{_BASE_URL}/round-5/"
            "merged-round-5-data-34-countries-2011-2013-last-update-july-2015.sav"
        ),
        codebook_url=(
            "http://afrobarometer.org/data/"
            "merged-round-5-codebook-34-countries-2011-2013-last-update-july-2015"
        ),
    ),
    6: RoundSource(
        questionnaire_url=f"{_BASE_URL}/round-6/merged_r6_data_2016_36countries2.sav",
        codebook_url="http://afrobarometer.org/data/merged-round-6-codebook-36-countries-2016",
    ),
}

SUPPORTED_ROUNDS: Tuple[int, ...] = tuple(sorted(ROUND_SOURCES))


def _basename(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# Explicit configuration object passed to every component
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DataDir:
    """
    Paths of one local Afrobarometer cache.

    Only the root is stored; subdirectories and per-round file names are
    derived so two DataDir objects with the same root are interchangeable.
    """
    root: Path

    @property
    def questionnaires(self) -> Path:
        return self.root / QUESTIONNAIRES_SUBDIR

    @property
    def locations(self) -> Path:
        return self.root / LOCATIONS_SUBDIR

    @property
    def codebooks(self) -> Path:
        return self.root / CODEBOOKS_SUBDIR

    @property
    def build(self) -> Path:
        return self.root / BUILD_SUBDIR

    def questionnaire_path(self, round_: int) -> Path:
        return self.questionnaires / _basename(ROUND_SOURCES[round_].questionnaire_url)

    def codebook_path(self, round_: int) -> Path:
        return self.codebooks / _basename(ROUND_SOURCES[round_].codebook_url)

    def location_path(self, round_: int) -> Path:
        return self.locations / LOCATION_FILE_TEMPLATE.format(round=round_)

    def build_path(self, round_: int) -> Path:
        return self.build / BUILD_FILE_TEMPLATE.format(round=round_)
