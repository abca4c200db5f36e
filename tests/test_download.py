import io
import zipfile

import pytest
import requests

import metadata
from adapters import LocalMetadataAdapter, LocalStorageAdapter
from ingestion_api import download_indicator_csv, extract_indicator_csv, raw_key
from ingestion_api import world_bank_download
from metadata import DOWNLOAD_SCOPE
from transformations import CO2

CSV_BODY = b'"Data Source","World Development Indicators",\n\n"Country Name","Country Code",\n'


def _archive(members):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as bundle:
        for name, content in members.items():
            bundle.writestr(name, content)
    return buf.getvalue()


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_extract_ignores_metadata_members():
    archive = _archive(
        {
            "Metadata_Indicator_API_EN.ATM.CO2E.PC_DS2_en_csv_v2_1.csv": b"meta",
            "Metadata_Country_API_EN.ATM.CO2E.PC_DS2_en_csv_v2_1.csv": b"meta",
            "API_EN.ATM.CO2E.PC_DS2_en_csv_v2_1.csv": CSV_BODY,
        }
    )

    name, content = extract_indicator_csv(archive, "EN.ATM.CO2E.PC")

    assert name == "API_EN.ATM.CO2E.PC_DS2_en_csv_v2_1.csv"
    assert content == CSV_BODY


def test_extract_without_data_member():
    archive = _archive({"Metadata_Country_API_X_DS2.csv": b"meta"})

    with pytest.raises(RuntimeError, match="No data CSV"):
        extract_indicator_csv(archive, "X")


def test_extract_rejects_non_zip_payload():
    with pytest.raises(RuntimeError, match="not a zip"):
        extract_indicator_csv(b"<html>error</html>", "X")


def test_download_stores_csv_under_raw_prefix(tmp_path, monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        return FakeResponse(_archive({"API_EN.ATM.CO2E.PC_DS2_en_csv_v2_9.csv": CSV_BODY}))

    monkeypatch.setattr(world_bank_download.requests, "get", fake_get)
    storage = LocalStorageAdapter(tmp_path)

    key = download_indicator_csv(CO2, storage, LocalMetadataAdapter(), timeout=5)

    assert key == raw_key(CO2) == "raw/world_bank/co2_emissions_per_capita.csv"
    assert storage.read_raw(key) == CSV_BODY
    assert calls == [
        ("https://api.worldbank.org/v2/en/indicator/EN.ATM.CO2E.PC", {"downloadformat": "csv"}, 5)
    ]
    assert metadata.get_last_run(DOWNLOAD_SCOPE)["status"] == "SUCCESS"


def test_download_failure_is_recorded_and_raised(tmp_path, monkeypatch):
    monkeypatch.setattr(
        world_bank_download.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse(status_code=503),
    )

    with pytest.raises(requests.HTTPError):
        download_indicator_csv(CO2, LocalStorageAdapter(tmp_path), LocalMetadataAdapter())

    run = metadata.get_last_run(DOWNLOAD_SCOPE)
    assert run["status"] == "FAILED"
    assert "503" in run["error_message"]
    assert not (tmp_path / raw_key(CO2)).exists()


def test_download_counts_data_rows_not_preamble_lines(tmp_path, monkeypatch, make_indicator_csv):
    body = make_indicator_csv(
        [("Brazil", "BRA", [1.0, 2.0]), ("Chile", "CHL", [3.0, None])],
        [2000, 2001],
        indicator_code="EN.ATM.CO2E.PC",
    )
    monkeypatch.setattr(
        world_bank_download.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse(
            _archive({"API_EN.ATM.CO2E.PC_DS2_en_csv_v2_9.csv": body})
        ),
    )

    download_indicator_csv(CO2, LocalStorageAdapter(tmp_path), LocalMetadataAdapter())

    assert metadata.get_last_run(DOWNLOAD_SCOPE)["rows_processed"] == 2
