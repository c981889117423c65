from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from afrobarometer.config import (
    DOWNLOAD_CHUNK_SIZE,
    HTTP_RETRIES,
    HTTP_TIMEOUT_SECONDS,
    ROUND_SOURCES,
    DataDir,
)
from afrobarometer.core.errors import DownloadError

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    url: str
    path: Path
    downloaded: bool


def _build_session(retries: int = HTTP_RETRIES) -> requests.Session:
    """
    Build a requests Session for the survey file downloads.

    With the default retries=0 a connection or HTTP failure surfaces on the
    first attempt.
    """
    session = requests.Session()

    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.6,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


_SESSION: Optional[requests.Session] = None


def _get_session() -> requests.Session:
    global _SESSION
    if _SESSION is None:
        _SESSION = _build_session()
    return _SESSION


def download_file(
    url: str,
    dest: Path,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[int] = None,
) -> FetchResult:
    """
    Download `url` to `dest` unless `dest` already exists.

    An existing file is trusted as-is (no size or freshness check). The body
    is streamed into a `.part` file next to `dest` and renamed into place only
    once complete, so a failed download never leaves a file under `dest`.
    """
    dest = Path(dest)
    if dest.exists():
        logger.debug("Skipping download, %s already exists", dest)
        return FetchResult(url=url, path=dest, downloaded=False)

    dest.parent.mkdir(parents=True, exist_ok=True)
    http = session or _get_session()

    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".part", dir=dest.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out:
            try:
                with http.get(url, stream=True, timeout=timeout or HTTP_TIMEOUT_SECONDS) as resp:
                    resp.raise_for_status()
                    for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            out.write(chunk)
            except requests.RequestException as exc:
                raise DownloadError(f"Failed to download {url}: {exc}") from exc
        os.replace(tmp_path, dest)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info("Downloaded %s -> %s", url, dest)
    return FetchResult(url=url, path=dest, downloaded=True)


def fetch_round_files(
    round_: int,
    data_dir: DataDir,
    *,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Make sure the codebook and questionnaire for a round are cached locally.

    Returns the local questionnaire path.
    """
    source = ROUND_SOURCES[round_]

    try:
        cb = download_file(source.codebook_url, data_dir.codebook_path(round_), session=session)
        if cb.downloaded:
            logger.info("Round %s: codebook cached at %s", round_, cb.path)

        logger.info("Round %s: questionnaire", round_)
        q = download_file(source.questionnaire_url, data_dir.questionnaire_path(round_), session=session)
    except DownloadError as exc:
        exc.round = round_
        exc.stage = "download"
        raise

    return q.path
