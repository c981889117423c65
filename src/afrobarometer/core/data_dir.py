from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional, Union

from afrobarometer.config import (
    AFRB_DATA_DIR,
    CODEBOOKS_SUBDIR,
    LOCATIONS_SUBDIR,
    QUESTIONNAIRES_SUBDIR,
    DataDir,
)
from afrobarometer.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Active cache root for this process (set by afrb_dir)
_ACTIVE: Optional[DataDir] = None

# Lazily created fallback root when neither a path nor AFRB_DATA_DIR is given
_PROCESS_TEMP_ROOT: Optional[Path] = None


def _default_root() -> Path:
    global _PROCESS_TEMP_ROOT
    if AFRB_DATA_DIR:
        return Path(AFRB_DATA_DIR)
    if _PROCESS_TEMP_ROOT is None:
        _PROCESS_TEMP_ROOT = Path(tempfile.mkdtemp(prefix="afrobarometer-"))
    return _PROCESS_TEMP_ROOT


def make_data_dir(root: Path) -> None:
    """
    Create the cache root and its fixed subdirectories.

    Safe to call on an existing tree: directories that already exist are
    left untouched and reported as such.
    """
    logger.info("Creating directories")
    for path in (root, root / QUESTIONNAIRES_SUBDIR, root / LOCATIONS_SUBDIR, root / CODEBOOKS_SUBDIR):
        if path.is_dir():
            logger.info(" - %s (exists)", path)
        else:
            path.mkdir(parents=True, exist_ok=True)
            logger.info(" - %s (created)", path)


def afrb_dir(path: Union[str, Path, None] = None) -> DataDir:
    """
    Initialize the Afrobarometer cache root for this process.

    Creates `questionnaires`, `locations` and `codebooks` under `path` and
    makes the returned DataDir the default for build/read calls that are not
    given one explicitly. Calling again with another path replaces it.
    """
    global _ACTIVE

    root = Path(path).expanduser() if path is not None else _default_root()
    root = root.resolve()
    data_dir = DataDir(root=root)

    logger.info("Setting Afrobarometer data directory to %s", root)
    logger.info(
        "Spatial data should be placed in the `%s` subdirectory, one file per round, e.g. %s",
        LOCATIONS_SUBDIR,
        data_dir.location_path(3),
    )

    make_data_dir(root)

    _ACTIVE = data_dir
    return data_dir


def get_data_dir() -> DataDir:
    if _ACTIVE is None:
        raise ConfigurationError(
            "Afrobarometer data directory has not been set. Run afrb_dir(path) "
            "before building or reading rounds; afrb_dir() with no argument uses "
            "a temporary directory."
        )
    return _ACTIVE


def resolve_data_dir(data_dir: Optional[DataDir] = None) -> DataDir:
    """Explicit DataDir wins; otherwise the one set by afrb_dir()."""
    if data_dir is not None:
        return data_dir
    return get_data_dir()


def reset_data_dir() -> None:
    global _ACTIVE
    _ACTIVE = None
