"""
Shared fixtures: a fresh cache root per test, SPSS/CSV fixture writers and a
fake HTTP session so no test touches the network.
"""

from contextlib import contextmanager
from pathlib import Path

import pandas as pd
import pyreadstat
import pytest
import requests

from afrobarometer.core import data_dir as data_dir_module
from afrobarometer.core.data_dir import afrb_dir


@pytest.fixture(autouse=True)
def _reset_active_data_dir():
    data_dir_module.reset_data_dir()
    yield
    data_dir_module.reset_data_dir()


@pytest.fixture
def data_dir(tmp_path):
    return afrb_dir(tmp_path / "afrb")


def write_questionnaire(path: Path, respondents=("003", "001", "002")) -> pd.DataFrame:
    """Write a small labelled .sav file with upper-case variable names."""
    n = len(respondents)
    df = pd.DataFrame(
        {
            "RESPNO": list(respondents),
            "COUNTRY": [float(1 + i % 2) for i in range(n)],
            "Q1": [float(1 + (i + 1) % 2) for i in range(n)],
            "AGE": [30.0 + i for i in range(n)],
        }
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    pyreadstat.write_sav(
        df,
        str(path),
        variable_value_labels={
            "COUNTRY": {1.0: "Benin", 2.0: "Botswana"},
            "Q1": {1.0: "Yes", 2.0: "No"},
        },
    )
    return df


def write_locations(path: Path, rows) -> None:
    """rows: iterable of (respno, latitude, longitude)."""
    lines = ["RespNo,District,Latitude,Longitude"]
    for respno, lat, lon in rows:
        lines.append(f"{respno},Somewhere,{lat},{lon}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n")


def place_round_files(data_dir, round_: int, respondents=("003", "001", "002")) -> pd.DataFrame:
    """Pre-place questionnaire and codebook so the fetcher skips downloads."""
    data_dir.codebook_path(round_).write_bytes(b"%PDF-1.4 codebook")
    return write_questionnaire(data_dir.questionnaire_path(round_), respondents)


class FakeResponse:
    def __init__(self, status_code=200, chunks=(b"data",), fail_after=None):
        self.status_code = status_code
        self._chunks = list(chunks)
        self._fail_after = fail_after

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size=1):
        for i, chunk in enumerate(self._chunks):
            if self._fail_after is not None and i >= self._fail_after:
                raise requests.ConnectionError("connection reset")
            yield chunk


class FakeSession:
    """Maps URL -> FakeResponse; unknown URLs get a 404."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    @contextmanager
    def get(self, url, stream=False, timeout=None):
        self.calls.append(url)
        yield self.responses.get(url, FakeResponse(status_code=404))
