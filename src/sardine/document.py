"""
Content documents: markdown sources with their resolved metadata.
"""
from __future__ import annotations

import dataclasses
import datetime as dt
import typing as t
from pathlib import Path
from types import MappingProxyType

from . import config
from .dates import resolve_date
from .errors import ScanIoError
from .frontmatter import parse_front_matter, parse_tags, resolve_template_path


@dataclasses.dataclass(frozen=True)
class ContentDocument:
    """
    A parsed markdown document. Created while scanning and never modified
    afterwards.
    """
    source: Path
    title: str
    created: dt.date
    modified: dt.date
    category: str | None = None
    tags: tuple[str, ...] = ()
    template: Path | None = None
    meta: t.Mapping[str, str] = dataclasses.field(default_factory=dict)
    body_offset: int = 0
    assets: tuple[Path, ...] = ()
    text: str = ''

    def __post_init__(self):
        # Freeze the metadata mapping along with the rest of the document.
        object.__setattr__(self, 'meta', MappingProxyType(dict(self.meta)))

    @classmethod
    def from_source_file(cls, path: Path, source_root: Path, encoding: str = 'utf-8'):
        """
        Read and parse the document at @path. @source_root anchors
        root-relative template references.
        """
        try:
            text = path.read_text(encoding)
        except OSError as e:
            raise ScanIoError(path, 'read document', e) from e
        except UnicodeDecodeError as e:
            raise ScanIoError(path, f'decode ({encoding}) document') from e
        return cls.from_text(path, text, source_root)

    @classmethod
    def from_text(cls, path: Path, text: str, source_root: Path):
        """
        Build a document from already loaded source @text.
        """
        meta, body_offset = parse_front_matter(text, path)

        template = None
        if template_value := meta.get(config.META_KEY_TEMPLATE):
            template = resolve_template_path(template_value, path, source_root)

        return cls(
            source=path,
            title=meta.get(config.META_KEY_TITLE) or path.name,
            created=resolve_date(path, True, meta.get(config.META_KEY_CREATION_DATE)),
            modified=resolve_date(path, False, meta.get(config.META_KEY_MODIFIED_DATE)),
            category=meta.get(config.META_KEY_CATEGORY) or None,
            tags=parse_tags(meta.get(config.META_KEY_TAGS, '')),
            template=template,
            meta=meta,
            body_offset=body_offset,
            text=text,
        )

    @property
    def body(self):
        """
        The markdown body, without front matter.
        """
        return self.text[self.body_offset:]

    @property
    def stem(self):
        """
        The name of the output directory for this document.
        """
        return self.source.stem

    def with_assets(self, assets: t.Iterable[Path]):
        """
        Return a copy of this document with its co-located @assets attached.
        """
        return dataclasses.replace(self, assets=tuple(assets))

    def to_context_dict(self, source_root: Path) -> dict[str, t.Any]:
        """
        A JSON-ready description of this document.
        """
        return {
            'path': self.source.relative_to(source_root).as_posix(),
            'title': self.title,
            'date': self.created.strftime(config.DATE_FMT),
            'updated': self.modified.strftime(config.DATE_FMT),
            'category': self.category,
            'tags': list(self.tags),
            'meta': dict(self.meta),
        }
