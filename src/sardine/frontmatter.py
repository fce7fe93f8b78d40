"""
Parsing for the `+++`-fenced `key = value` front matter at the start of
content documents.
"""
from __future__ import annotations

from pathlib import Path

from .config import FRONT_MATTER_FENCE, META_TAG_SEPARATOR, META_VALUE_SEPARATOR
from .errors import FrontMatterError
from .pretty_utils import print_notice


def _label(path: Path | None):
    return str(path) if path else '<text>'


def parse_front_matter(text: str, path: Path | None = None) -> tuple[dict[str, str], int]:
    """
    Read metadata from the front of a document, returning the metadata and the
    offset at which the body starts.

    A missing opening fence yields no metadata and a body offset of 0. A
    missing closing fence makes all remaining text metadata. Lines without a
    separator are skipped. All of these are reported as notices, never raised.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_FENCE:
        print_notice(f'{_label(path)}: no front matter found')
        return {}, 0

    meta: dict[str, str] = {}
    offset = len(lines[0])
    for lineno, line in enumerate(lines[1:], start=2):
        offset += len(line)
        stripped = line.strip()
        if stripped == FRONT_MATTER_FENCE:
            return meta, offset
        if not stripped:
            continue
        try:
            key, value = split_meta_line(stripped)
        except FrontMatterError as e:
            print_notice(f'{_label(path)}:{lineno}: {e}')
            continue
        meta[key] = value

    print_notice(f'{_label(path)}: front matter is never closed, treating the whole file as metadata')
    return meta, len(text)


def split_meta_line(line: str):
    """
    Split a single `key = value` line, trimming both sides.
    """
    if META_VALUE_SEPARATOR not in line:
        raise FrontMatterError(f'expected "key {META_VALUE_SEPARATOR} value", got {line!r}')
    key, value = line.split(META_VALUE_SEPARATOR, 1)
    return key.strip(), value.strip()


def parse_tags(value: str):
    """
    Split a comma-separated tag list, dropping empty entries.
    """
    return tuple(
        cleaned for tag in value.split(META_TAG_SEPARATOR)
        if (cleaned := tag.strip())
    )


def resolve_template_path(value: str, document: Path, source_root: Path):
    """
    Resolve a `template` metadata value. A leading `/` makes it relative to
    @source_root, otherwise it is relative to the directory of @document.
    """
    if value.startswith('/'):
        return source_root / value.lstrip('/')
    return document.parent / value
