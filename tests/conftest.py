from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

Row = Tuple[str, str, Sequence[Optional[float]]]


def _cell(value: Optional[float]) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return '""'
    return f'"{value}"'


def build_indicator_csv(
    rows: List[Row],
    years: Sequence[int],
    *,
    indicator_name: str = "Test indicator",
    indicator_code: str = "TEST.CODE",
    preamble: bool = True,
) -> bytes:
    """World Bank bulk-download layout, trailing comma on every line included."""
    lines: List[str] = []
    if preamble:
        lines += [
            '"Data Source","World Development Indicators",',
            "",
            '"Last Updated Date","2024-06-28",',
            "",
        ]
    header = ['"Country Name"', '"Country Code"', '"Indicator Name"', '"Indicator Code"']
    header += [f'"{year}"' for year in years]
    lines.append(",".join(header) + ",")
    for name, code, values in rows:
        cells = [f'"{name}"', f'"{code}"', f'"{indicator_name}"', f'"{indicator_code}"']
        cells += [_cell(v) for v in values]
        lines.append(",".join(cells) + ",")
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def make_indicator_csv():
    return build_indicator_csv


@pytest.fixture(autouse=True)
def metadata_file(tmp_path, monkeypatch):
    """Keep the run ledger of every test inside its own tmp directory."""
    path = tmp_path / "ledger" / "local_metadata.json"
    monkeypatch.setenv("METADATA_LOCAL_FILE", str(path))
    return path


class FakeS3Client:
    """In-memory stand-in for the handful of boto3 S3 calls the adapter makes."""

    def __init__(self) -> None:
        self.objects: Dict[Tuple[str, str], bytes] = {}

    def put_object(self, *, Bucket, Key, Body):
        self.objects[(Bucket, Key)] = bytes(Body)
        return {}

    def get_object(self, *, Bucket, Key):
        import io

        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}

    def list_objects_v2(self, *, Bucket, Prefix, MaxKeys=1000):
        keys = sorted(k for b, k in self.objects if b == Bucket and k.startswith(Prefix))
        return {"Contents": [{"Key": k} for k in keys[:MaxKeys]]}

    def get_paginator(self, name):
        client = self

        class _Paginator:
            def paginate(self, *, Bucket, Prefix):
                yield client.list_objects_v2(Bucket=Bucket, Prefix=Prefix)

        assert name == "list_objects_v2"
        return _Paginator()


@pytest.fixture
def fake_s3():
    return FakeS3Client()
