"""
Creation and modification date resolution for content documents.
"""
from __future__ import annotations

import datetime as dt
from pathlib import Path

from .config import DATE_FMT
from .errors import MetadataError
from .pretty_utils import print_notice


def parse_date(value: str) -> dt.date:
    """
    Parse a declared date in `YYYY-MM-DD` form.
    """
    try:
        return dt.datetime.strptime(value.strip(), DATE_FMT).date()
    except ValueError as e:
        raise MetadataError(f'{value!r} is not a date in {DATE_FMT} format') from e


def filesystem_date(path: Path, is_creation: bool) -> dt.date:
    """
    Read the creation or modification time of @path as a local calendar date.
    """
    try:
        stat = path.stat()
    except OSError as e:
        raise MetadataError(f'cannot stat {path}: {e.strerror or e}') from e

    if is_creation:
        timestamp = getattr(stat, 'st_birthtime', None)
        if timestamp is None:
            raise MetadataError(f'creation time is not available for {path} on this platform')
    else:
        timestamp = stat.st_mtime

    try:
        return dt.date.fromtimestamp(timestamp)
    except (OverflowError, OSError, ValueError) as e:
        raise MetadataError(f'invalid timestamp {timestamp} for {path}') from e


def resolve_date(path: Path, is_creation: bool, declared: str | None = None) -> dt.date:
    """
    Resolve a document date: the @declared value if it parses, then the
    filesystem timestamp, then today. Problems are reported as notices.
    """
    kind = 'creation' if is_creation else 'modification'
    if declared is not None:
        try:
            return parse_date(declared)
        except MetadataError as e:
            print_notice(f'{path}: ignoring declared {kind} date, {e}')

    try:
        return filesystem_date(path, is_creation)
    except MetadataError as e:
        print_notice(f'{path}: using today as {kind} date, {e}')

    return dt.date.today()
