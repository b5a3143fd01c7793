from __future__ import annotations

import datetime as dt
import shutil
from email.utils import format_datetime
from pathlib import Path

from .errors import OutputError


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def rfc1123z_date(value: dt.datetime) -> str:
    # Numeric zone offset, e.g. "Mon, 25 Dec 2023 00:00:00 +0000"
    return format_datetime(as_utc(value))


def rfc1123_date(value: dt.datetime) -> str:
    value = as_utc(value)
    return value.strftime("%a, %d %b %Y %H:%M:%S ") + (value.tzname() or "UTC")


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise OutputError("Refusing to clean project root.")
    if not output_resolved.is_relative_to(root_resolved):
        raise OutputError(f"Refusing to clean output directory outside project root: {output_dir}")
    try:
        shutil.rmtree(output_dir)
    except OSError as exc:
        raise OutputError(f"Cannot clean output directory {output_dir}: {exc}") from exc
