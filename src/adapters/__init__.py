"""
Adapters package
----------------

I/O and run-metadata abstractions so the analysis can read its indicator
files and write its artefacts either on the local filesystem or in S3
with the same business logic.
"""

from .storage import (  # noqa: F401
    LocalStorageAdapter,
    S3StorageAdapter,
    StorageAdapter,
)
from .metadata import (  # noqa: F401
    LocalMetadataAdapter,
    MetadataAdapter,
)

__all__ = [
    "StorageAdapter",
    "LocalStorageAdapter",
    "S3StorageAdapter",
    "MetadataAdapter",
    "LocalMetadataAdapter",
]
