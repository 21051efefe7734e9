"""Local license corpus source.

A corpus is a folder with one license per file; the file name is the license name:

    licenses/RAW/
      Apache-2.0
      BSD-3-Clause
      MIT

Files are read in file-name order so that building the same corpus twice produces
the same registry order (and byte-identical stores).
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Iterator, Optional

from ..storage.base import LocalStorageBackend, StorageBackend

logger = logging.getLogger(__name__)


@dataclass
class RawLicense:
    name: str
    text: str


def load_licenses_from_folder(
    path: str,
    pattern: str = "*",
    storage: Optional[StorageBackend] = None,
) -> Iterator[RawLicense]:
    storage = storage or LocalStorageBackend()
    files = storage.list_files(path, pattern)
    if not files:
        logger.warning("no license files under %s matching %r", path, pattern)
    for file_path in files:
        data = storage.read_file(file_path)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("skipping %s: not UTF-8 text", file_path)
            continue
        yield RawLicense(name=os.path.basename(file_path), text=text)
