from __future__ import annotations

import datetime as dt
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import InputError

SOURCE_SUFFIX = ".md"
OVERVIEW_NAME = "README.md"
FILENAME_DATE_FMT = "%d-%m-%Y"


@dataclass(frozen=True)
class Document:
    path: Path
    data: bytes
    modified: dt.datetime


def slugify(text: str, separator: str = "-") -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", separator, text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", separator)
    return text or "section"


def is_source_document(path: Path) -> bool:
    return path.suffix == SOURCE_SUFFIX and path.name != OVERVIEW_NAME


def identifier_for(path: Path) -> str:
    name = path.name
    if name.endswith(SOURCE_SUFFIX):
        name = name[: -len(SOURCE_SUFFIX)]
    return name


def filename_timestamp(identifier: str) -> Optional[dt.datetime]:
    try:
        parsed = dt.datetime.strptime(identifier, FILENAME_DATE_FMT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=dt.timezone.utc)


def modified_time(stat_result: os.stat_result) -> dt.datetime:
    return dt.datetime.fromtimestamp(stat_result.st_mtime).astimezone()


def walk_files(root: Path) -> list[Path]:
    # Entries of each directory in name order, subdirectories descended where they sort.
    found: list[Path] = []
    with os.scandir(root) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            found.extend(walk_files(path))
        elif entry.is_file():
            found.append(path)
    return found


def read_document(path: Path) -> Document:
    try:
        data = path.read_bytes()
        stat_result = path.stat()
    except OSError as exc:
        raise InputError(f"Cannot read {path}: {exc}") from exc
    return Document(path=path, data=data, modified=modified_time(stat_result))


def scan_documents(root: Path) -> list[Document]:
    try:
        paths = walk_files(root)
    except OSError as exc:
        raise InputError(f"Cannot scan {root}: {exc}") from exc
    return [read_document(path) for path in paths if is_source_document(path)]


def read_overview(root: Path) -> bytes:
    path = root / OVERVIEW_NAME
    try:
        return path.read_bytes()
    except OSError as exc:
        raise InputError(f"Cannot read overview document {path}: {exc}") from exc
