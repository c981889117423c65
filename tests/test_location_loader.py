"""
Tests for the optional per-round location CSV.
"""

import pandas as pd
import pytest

from afrobarometer.core.errors import FormatError
from afrobarometer.core.location_loader import location_file_exists, read_locations

from conftest import write_locations


class TestReadLocations:

    def test_projects_and_sorts(self, tmp_path):
        path = tmp_path / "Locations_R3.csv"
        write_locations(path, [("002", 6.5, 2.6), ("001", -24.6, 25.9)])

        df = read_locations(path, 3)

        assert list(df.columns) == ["respno", "latitude", "longitude"]
        assert list(df["respno"]) == ["001", "002"]
        assert df["latitude"].tolist() == [-24.6, 6.5]
        assert df["longitude"].dtype == "float64"

    def test_column_names_case_insensitive(self, tmp_path):
        path = tmp_path / "loc.csv"
        path.write_text("RESPNO,LATITUDE,LONGITUDE,COUNTRY\nA1,1.5,2.5,X\n")
        df = read_locations(path, 1)
        assert df.iloc[0]["respno"] == "A1"
        assert df.iloc[0]["longitude"] == 2.5

    def test_missing_coordinates_are_null(self, tmp_path):
        path = tmp_path / "loc.csv"
        path.write_text("respno,latitude,longitude\n001,,\n")
        df = read_locations(path, 1)
        assert pd.isna(df.iloc[0]["latitude"])

    def test_missing_required_column(self, tmp_path):
        path = tmp_path / "loc.csv"
        path.write_text("respno,latitude\n001,1.0\n")
        with pytest.raises(FormatError, match="longitude"):
            read_locations(path, 3)

    def test_non_numeric_latitude(self, tmp_path):
        path = tmp_path / "loc.csv"
        path.write_text("respno,latitude,longitude\n001,north,2.0\n")
        with pytest.raises(FormatError, match="latitude"):
            read_locations(path, 3)

    def test_wrong_field_count(self, tmp_path):
        path = tmp_path / "loc.csv"
        path.write_text("respno,latitude,longitude\n001,1.0,2.0\n002,1.0,2.0,extra,fields\n")
        with pytest.raises(FormatError):
            read_locations(path, 3)

    def test_decimal_respondent_ids_normalized(self, tmp_path):
        path = tmp_path / "loc.csv"
        path.write_text("respno,latitude,longitude\n2.0,1.0,2.0\n001,3.0,4.0\n")
        df = read_locations(path, 1)
        assert list(df["respno"]) == ["001", "2"]


class TestLocationFileExists:

    def test_absent_is_not_an_error(self, data_dir):
        assert location_file_exists(3, data_dir) is False

    def test_present(self, data_dir):
        write_locations(data_dir.location_path(3), [("001", 1.0, 2.0)])
        assert location_file_exists(3, data_dir) is True
