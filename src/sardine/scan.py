"""
Single-pass classification of a content tree.
"""
from __future__ import annotations

import collections
import dataclasses
from pathlib import Path

from . import config
from .document import ContentDocument
from .errors import ScanIoError


@dataclasses.dataclass
class ScanResult:
    """
    The raw parts of a Site, as discovered by `scan()`.
    """
    source_root: Path
    documents: list[ContentDocument] = dataclasses.field(default_factory=list)
    directories: list[Path] = dataclasses.field(default_factory=list)
    copies: list[Path] = dataclasses.field(default_factory=list)
    stylesheets: list[Path] = dataclasses.field(default_factory=list)
    # canonical template path: [documents using it]
    template_refs: dict[Path, list[Path]] = dataclasses.field(default_factory=dict)
    header: Path | None = None
    footer: Path | None = None


def canonical(path: Path):
    """
    Canonicalize @path so that different spellings of one file compare equal.
    """
    return path.resolve()


def _list_dir(path: Path):
    try:
        return sorted(path.iterdir())
    except OSError as e:
        raise ScanIoError(path, 'list directory', e) from e


def _is_dir(path: Path):
    try:
        return path.is_dir()
    except OSError as e:
        raise ScanIoError(path, 'stat', e) from e


def scan(source_root: Path, default_template: Path | None = None) -> ScanResult:
    """
    Walk @source_root and classify everything in it. Directories are visited
    through an explicit worklist, so arbitrarily deep trees are fine.

    Template files referenced by documents (or given as @default_template) are
    not copied. Files inside `<stem>/` next to a document become that
    document's assets.
    """
    if not _is_dir(source_root):
        raise ScanIoError(source_root, 'open source directory')

    result = ScanResult(source_root)
    worklist = collections.deque([source_root])
    while worklist:
        directory = worklist.popleft()
        for child in _list_dir(directory):
            if _is_dir(child):
                result.directories.append(child)
                worklist.append(child)
                continue

            ext = child.suffix.lower().lstrip('.')
            if directory == source_root and child.name == config.HEADER_FILE_NAME:
                result.header = child
            elif directory == source_root and child.name == config.FOOTER_FILE_NAME:
                result.footer = child
            elif ext == config.SOURCE_FILE_EXT:
                result.documents.append(ContentDocument.from_source_file(child, source_root))
            elif ext == config.STYLE_FILE_EXT:
                result.stylesheets.append(child)
                result.copies.append(child)
            else:
                result.copies.append(child)

    _collect_templates(result, default_template)
    _attach_assets(result)
    return result


def _collect_templates(result: ScanResult, default_template: Path | None):
    if default_template:
        result.template_refs.setdefault(canonical(default_template), [])
    for document in result.documents:
        if document.template:
            key = canonical(document.template)
            result.template_refs.setdefault(key, []).append(document.source)

    result.copies = [
        path for path in result.copies
        if canonical(path) not in result.template_refs
    ]


def _attach_assets(result: ScanResult):
    asset_dirs = {
        document.source.parent / document.stem: i
        for i, document in enumerate(result.documents)
    }
    assets: dict[int, list[Path]] = {}
    remaining: list[Path] = []
    for path in result.copies:
        if (index := asset_dirs.get(path.parent)) is not None:
            assets.setdefault(index, []).append(path)
        else:
            remaining.append(path)

    result.copies = remaining
    result.directories = [d for d in result.directories if d not in asset_dirs]
    for index, paths in assets.items():
        result.documents[index] = result.documents[index].with_assets(sorted(paths))
