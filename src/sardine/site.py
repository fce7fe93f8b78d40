"""
The Site: a fully parsed content tree, ready for generation.
"""
from __future__ import annotations

import typing as t
from pathlib import Path

from . import config
from .actions import CreateDir, FsAction, execute, plan
from .config import BuildSettings, InputBuildSettings, MinifyLevel, resolve_settings
from .errors import ScanIoError, TemplateParseError
from .processor import RuleProcessor, check_delegate_configured
from .scan import canonical, scan
from .template import Template

if t.TYPE_CHECKING:
    from collections.abc import Sequence
    from .document import ContentDocument


def _read_fragment(path: Path | None, encoding: str = 'utf-8'):
    if not path:
        return None
    try:
        return path.read_text(encoding)
    except OSError as e:
        raise ScanIoError(path, 'read fragment', e) from e


class Site:
    """
    Owns the documents, deduplicated templates, and assets of one content tree.
    """
    def __init__(self,
                 source_root: Path,
                 dist_root: Path,
                 documents: Sequence[ContentDocument] = (),
                 *,
                 templates: dict[Path, Template] | None = None,
                 default_template: Template | None = None,
                 directories: Sequence[Path] = (),
                 copies: Sequence[Path] = (),
                 stylesheets: Sequence[Path] = (),
                 header: str | None = None,
                 footer: str | None = None,
                 dist_ext: str = config.DIST_FILE_EXT,
                 feed_ext: str = config.FEED_FILE_EXT,
                 minify: MinifyLevel = 'no',
                 processor: Sequence[str] = ()):
        self.source_root = source_root
        self.dist_root = dist_root
        self.documents = list(documents)
        self.templates = templates or {}
        self.default_template = default_template or Template.default()
        self.directories = list(directories)
        self.copies = list(copies)
        self.stylesheets = list(stylesheets)
        self.header = header
        self.footer = footer
        self.dist_ext = dist_ext
        self.feed_ext = feed_ext
        self.minify: MinifyLevel = minify
        self.processor = list(processor)

    @classmethod
    def from_settings(cls, settings: BuildSettings | InputBuildSettings | None = None):
        """
        Scan `<root>/content` and parse every referenced template exactly once.
        """
        final = resolve_settings(t.cast(InputBuildSettings, settings))
        source_root = final['root'] / config.SOURCE_PATH
        dist_root = final['root'] / config.TARGET_PATH

        result = scan(source_root, final['template'])

        templates: dict[Path, Template] = {}
        for path, documents in result.template_refs.items():
            try:
                templates[path] = Template.from_file(path)
            except TemplateParseError as e:
                raise e.with_documents(documents) from None
            except OSError as e:
                raise ScanIoError(path, 'read template', e) from e
            except UnicodeDecodeError as e:
                raise ScanIoError(path, 'decode template') from e

        default_template = None
        if final['template']:
            default_template = templates[canonical(final['template'])]

        return cls(
            source_root,
            dist_root,
            result.documents,
            templates=templates,
            default_template=default_template,
            directories=result.directories,
            copies=result.copies,
            stylesheets=result.stylesheets,
            header=_read_fragment(result.header),
            footer=_read_fragment(result.footer),
            dist_ext=final['dist_ext'],
            feed_ext=final['feed_ext'],
            minify=final['minify'],
            processor=final['processor'],
        )

    def template_for(self, document: ContentDocument) -> Template:
        """
        The template used to render @document.
        """
        if document.template:
            return self.templates[canonical(document.template)]
        return self.default_template

    def destination_for(self, document: ContentDocument) -> Path:
        """
        The output directory for @document, named after its stem directly under
        the destination root.
        """
        return self.dist_root / document.stem

    def used_templates(self):
        return [self.template_for(d) for d in self.documents]

    def plan(self) -> list[FsAction]:
        """
        Render every document and plan all actions, with the delegate
        processor running only for the duration of rendering.
        """
        check_delegate_configured(self.used_templates(), self.processor)
        with RuleProcessor(self.processor) as processor:
            actions = plan(self, processor)
        return [CreateDir(self.dist_root, allow_exists=True), *actions]

    def generate(self):
        """
        Plan and then apply every action for this site.
        """
        actions = self.plan()
        execute(actions)
        return actions
