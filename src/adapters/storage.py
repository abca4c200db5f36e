from __future__ import annotations

import io
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

import pandas as pd


class StorageAdapter(ABC):
    """
    Abstraction over where indicator files and analysis artefacts live.

    Keys are logical, slash-separated paths such as
    "raw/world_bank/gdp_per_capita.csv" or "analysis/regression_summary.csv";
    each implementation maps them to a physical location.
    """

    @abstractmethod
    def write_raw(self, key: str, content: bytes) -> str:
        """
        Persist bytes at the given key.

        Returns the fully-qualified location string, for example
        "out/analysis/co2_trend.png" locally or "s3://bucket/analysis/co2_trend.png".
        """

    @abstractmethod
    def read_raw(self, key: str) -> bytes:
        """Read bytes previously stored at the given key."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether an object is stored at the given key."""

    @abstractmethod
    def list_keys(self, prefix: str) -> List[str]:
        """Logical keys stored under `prefix`, sorted."""

    # Tabular helpers shared by every backend: serialize in memory, then
    # go through write_raw/read_raw.

    def write_parquet(self, df: pd.DataFrame, key: str) -> str:
        payload = io.BytesIO()
        df.to_parquet(payload, index=False)
        return self.write_raw(key, payload.getvalue())

    def read_parquet(self, key: str) -> pd.DataFrame:
        return pd.read_parquet(io.BytesIO(self.read_raw(key)))

    def write_csv(self, df: pd.DataFrame, key: str) -> str:
        text = df.to_csv(index=False)
        return self.write_raw(key, text.encode("utf-8"))


class LocalStorageAdapter(StorageAdapter):
    """
    Filesystem-backed storage; keys are relative paths under `root_dir`.

        root_dir = Path("out")
        key      = "analysis/co2_trend.png"
        -> out/analysis/co2_trend.png
    """

    def __init__(self, root_dir: Path | str = ".") -> None:
        self.root_dir = Path(root_dir)

    def path_for(self, key: str) -> Path:
        return self.root_dir.joinpath(*key.strip("/").split("/"))

    def _prepare(self, key: str) -> Path:
        target = self.path_for(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        return target

    def write_raw(self, key: str, content: bytes) -> str:
        target = self._prepare(key)
        target.write_bytes(content)
        return str(target)

    def read_raw(self, key: str) -> bytes:
        return self.path_for(key).read_bytes()

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def write_parquet(self, df: pd.DataFrame, key: str) -> str:
        target = self._prepare(key)
        df.to_parquet(target, index=False)
        return str(target)

    def read_parquet(self, key: str) -> pd.DataFrame:
        return pd.read_parquet(self.path_for(key))

    def list_keys(self, prefix: str) -> List[str]:
        base = self.path_for(prefix)
        if not base.is_dir():
            return []
        return sorted(
            p.relative_to(self.root_dir).as_posix() for p in base.rglob("*") if p.is_file()
        )


class S3StorageAdapter(StorageAdapter):
    """
    S3-backed storage using boto3.

    Logical keys are stored as object keys under `base_prefix` in `bucket`:

        bucket="analysis-bucket", base_prefix="co2"
        key="analysis/co2_trend.png"
        -> s3://analysis-bucket/co2/analysis/co2_trend.png
    """

    def __init__(
        self,
        bucket: str,
        *,
        base_prefix: Optional[str] = None,
        boto3_client=None,
    ) -> None:
        if boto3_client is None:
            import boto3  # lazy import to keep local-only runs lighter

            boto3_client = boto3.client("s3")

        self.bucket = bucket
        self.base_prefix = (base_prefix or "").strip("/")
        self._s3 = boto3_client

    def object_key(self, key: str) -> str:
        parts = [self.base_prefix, key.lstrip("/")]
        return "/".join(p for p in parts if p)

    def _logical_key(self, object_key: str) -> str:
        if self.base_prefix and object_key.startswith(self.base_prefix + "/"):
            return object_key[len(self.base_prefix) + 1 :]
        return object_key

    def write_raw(self, key: str, content: bytes) -> str:
        target = self.object_key(key)
        self._s3.put_object(Bucket=self.bucket, Key=target, Body=content)
        return f"s3://{self.bucket}/{target}"

    def read_raw(self, key: str) -> bytes:
        obj = self._s3.get_object(Bucket=self.bucket, Key=self.object_key(key))
        return obj["Body"].read()

    def exists(self, key: str) -> bool:
        target = self.object_key(key)
        listing = self._s3.list_objects_v2(Bucket=self.bucket, Prefix=target, MaxKeys=1)
        return any(item.get("Key") == target for item in listing.get("Contents") or [])

    def list_keys(self, prefix: str) -> List[str]:
        folder = self.object_key(prefix).rstrip("/") + "/"
        pages = self._s3.get_paginator("list_objects_v2").paginate(Bucket=self.bucket, Prefix=folder)
        return sorted(
            self._logical_key(item["Key"]) for page in pages for item in page.get("Contents") or []
        )


__all__ = ["StorageAdapter", "LocalStorageAdapter", "S3StorageAdapter"]
