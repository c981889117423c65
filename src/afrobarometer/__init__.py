"""
Local cache of the merged Afrobarometer survey rounds.

    from afrobarometer import afrb_dir, build, read_round

    afrb_dir("~/afrobarometer")
    build(rounds=[3, 4])
    r3 = read_round(3)

Questionnaires and codebooks are downloaded when missing. Restricted-access
location files are optional and must be placed by the user as
`locations/Locations_R<round>.csv` under the data directory.
"""
from __future__ import annotations

from afrobarometer.config import APP_VERSION, ROUND_SOURCES, SUPPORTED_ROUNDS, DataDir
from afrobarometer.core.builder import BuildReport, RoundBuildResult, build
from afrobarometer.core.data_dir import afrb_dir, get_data_dir
from afrobarometer.core.errors import (
    AfrbIOError,
    AfrobarometerError,
    AlreadyBuiltError,
    ConfigurationError,
    DownloadError,
    FormatError,
    NotBuiltError,
    StateError,
)
from afrobarometer.core.store import BuiltRound, list_built_rounds, read_round

__version__ = APP_VERSION

__all__ = [
    "afrb_dir",
    "get_data_dir",
    "build",
    "read_round",
    "list_built_rounds",
    "BuildReport",
    "RoundBuildResult",
    "BuiltRound",
    "DataDir",
    "ROUND_SOURCES",
    "SUPPORTED_ROUNDS",
    "AfrobarometerError",
    "ConfigurationError",
    "AfrbIOError",
    "DownloadError",
    "FormatError",
    "StateError",
    "AlreadyBuiltError",
    "NotBuiltError",
]
