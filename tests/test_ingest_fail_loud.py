"""
Data Loader: Fail-Loud Tests

The loader must reject bad input with LoadError instead of coercing:
- Missing file
- Wrong number of columns / missing date column
- Unparseable dates, non-numeric values
"""

import pandas as pd
import pytest

from src.tbcast.errors import LoadError
from src.tbcast.ingest import load_incidence_table

from ._data import synthetic_incidence


@pytest.mark.fail_loud
class TestLoaderRejects:
    """Bad files raise LoadError with the stage tag"""

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError) as exc:
            load_incidence_table(tmp_path / "nope.xlsx")
        assert exc.value.stage == "load"
        assert "not found" in str(exc.value)

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{}")
        with pytest.raises(LoadError):
            load_incidence_table(path)

    def test_three_columns_rejected(self, tmp_path):
        df = synthetic_incidence(n=12)
        df["extra"] = 1
        path = tmp_path / "data.csv"
        df.to_csv(path, index=False)

        with pytest.raises(LoadError, match="exactly 2 columns"):
            load_incidence_table(path)

    def test_missing_date_column(self, tmp_path):
        df = synthetic_incidence(n=12).rename(columns={"Time": "Month"})
        path = tmp_path / "data.csv"
        df.to_csv(path, index=False)

        with pytest.raises(LoadError, match="Missing date column"):
            load_incidence_table(path)

    def test_unparseable_dates(self, tmp_path):
        df = pd.DataFrame({
            "Time": ["2012-01-01", "2012-02-01", "INVALID"],
            "Incidence": [10.0, 9.5, 9.0],
        })
        path = tmp_path / "data.csv"
        df.to_csv(path, index=False)

        with pytest.raises(LoadError, match="not parseable as dates"):
            load_incidence_table(path)

    def test_non_numeric_values(self, tmp_path):
        df = pd.DataFrame({
            "Time": ["2012-01-01", "2012-02-01", "2012-03-01"],
            "Incidence": ["10.0", "NOT_A_NUMBER", "9.0"],
        })
        path = tmp_path / "data.csv"
        df.to_csv(path, index=False)

        with pytest.raises(LoadError, match="not numeric"):
            load_incidence_table(path)


@pytest.mark.smoke
class TestLoaderReads:
    """Valid files load in file order"""

    def test_csv_preserves_order(self, tmp_path):
        df = synthetic_incidence(n=24)
        path = tmp_path / "data.csv"
        df.to_csv(path, index=False)

        loaded = load_incidence_table(path)

        assert list(loaded.columns) == ["Time", "Incidence"]
        assert len(loaded) == 24
        assert loaded["Incidence"].tolist() == df["Incidence"].tolist()

    def test_empty_cells_allowed(self, tmp_path):
        df = synthetic_incidence(n=12)
        df.loc[3, "Incidence"] = None
        path = tmp_path / "data.csv"
        df.to_csv(path, index=False)

        loaded = load_incidence_table(path)
        assert loaded["Incidence"].isna().sum() == 1

    def test_excel(self, tmp_path):
        pytest.importorskip("openpyxl")
        df = synthetic_incidence(n=24)
        path = tmp_path / "data.xlsx"
        df.to_excel(path, index=False)

        loaded = load_incidence_table(path)

        assert len(loaded) == 24
        assert pd.to_datetime(loaded["Time"]).iloc[0] == pd.Timestamp("2012-01-01")
