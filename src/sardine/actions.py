"""
Declarative filesystem actions: planning them from a Site, and applying them.

Every check in `apply_action()` is followed by the action itself without any
locking, so concurrent changes to the destination tree may change which error
surfaces. The destination tree is assumed to have a single writer.
"""
from __future__ import annotations

import dataclasses
import os
import shutil
import typing as t
from pathlib import Path

from . import config
from .errors import ExecutionIoError, PlanningInvariantError
from .minify import minify_document
from .pretty_utils import print_with_style, track_progress
from .processor import EvaluationContext

if t.TYPE_CHECKING:
    from collections.abc import Sequence
    from .document import ContentDocument
    from .processor import RuleProcessor
    from .site import Site


@dataclasses.dataclass(frozen=True)
class Copy:
    source: Path
    dest: Path

    def __str__(self):
        return f'copy {self.source} ⇒ {self.dest}'


@dataclasses.dataclass(frozen=True)
class DeleteDir:
    path: Path
    allow_missing: bool = False
    recursive: bool = False

    def __str__(self):
        return f'delete directory {self.path}'


@dataclasses.dataclass(frozen=True)
class CreateDir:
    path: Path
    allow_exists: bool = False

    def __str__(self):
        return f'create directory {self.path}'


@dataclasses.dataclass(frozen=True)
class WriteFile:
    """
    Creates the file if it does not exist, overwrites it if it does.
    """
    path: Path
    content: str

    def __str__(self):
        return f'write {self.path} ({len(self.content)} characters)'


FsAction = t.Union[Copy, DeleteDir, CreateDir, WriteFile]


def _relative_href(target: Path, directory: Path):
    return Path(os.path.relpath(target, directory)).as_posix()


class Planner:
    """
    Turns a Site into an ordered list of actions, rendering every document with
    a RuleProcessor on the way.
    """
    def __init__(self, site: Site, processor: RuleProcessor):
        self.site = site
        self.processor = processor
        self.actions: list[FsAction] = []
        # Asset directory in the source tree -> output directory of its document
        self.asset_dirs = {
            d.source.parent / d.stem: site.destination_for(d)
            for d in site.documents
        }

    def add(self, action: FsAction):
        reads = [action.source] if isinstance(action, Copy) else []
        writes = [action.dest] if isinstance(action, Copy) else [action.path]
        for path in reads:
            if not path.is_relative_to(self.site.source_root):
                raise PlanningInvariantError(action, len(self.actions), f'{path} is outside of {self.site.source_root}')
        for path in writes:
            if not path.is_relative_to(self.site.dist_root):
                raise PlanningInvariantError(action, len(self.actions), f'{path} is outside of {self.site.dist_root}')
        self.actions.append(action)

    def mirror(self, path: Path):
        """
        The destination counterpart of a source @path. Anything below a
        document's asset directory follows that document's output directory.
        Paths outside of the source root come back unchanged for `add()` to
        reject.
        """
        if not path.is_relative_to(self.site.source_root):
            return path
        for source, dest in self.asset_dirs.items():
            if path.is_relative_to(source):
                return dest / path.relative_to(source)
        return self.site.dist_root / path.relative_to(self.site.source_root)

    def plan(self):
        site = self.site
        document_dirs: list[Path] = []
        for document in site.documents:
            dest = site.destination_for(document)
            if dest in document_dirs:
                raise PlanningInvariantError(
                    DeleteDir(dest, allow_missing=True, recursive=True),
                    len(self.actions),
                    f'{document.source} would overwrite the output of another document named {document.stem!r}',
                )
            document_dirs.append(dest)

        def inside_document(path: Path):
            return any(path.is_relative_to(d) for d in document_dirs)

        outer = [d for d in map(self.mirror, site.directories) if not inside_document(d)]
        inner = [d for d in map(self.mirror, site.directories) if inside_document(d)]

        for directory in outer:
            self.add(CreateDir(directory, allow_exists=True))
        for document in track_progress(site.documents, 'Rendering...'):
            self.plan_document(document)
        for directory in inner:
            self.add(CreateDir(directory, allow_exists=True))
        for path in site.copies:
            self.add(Copy(path, self.mirror(path)))
        return self.actions

    def plan_document(self, document: ContentDocument):
        """
        Add the actions regenerating one document: remove its directory, create
        it again, write the page, then copy its assets.
        """
        site = self.site
        dest = site.destination_for(document)
        self.add(DeleteDir(dest, allow_missing=True, recursive=True))
        self.add(CreateDir(dest, allow_exists=False))

        context = EvaluationContext(
            document,
            site.source_root,
            stylesheets=self.stylesheet_hrefs(document, dest),
            documents=site.documents,
        )
        body = site.template_for(document).render(context, self.processor)
        content = ''.join([
            config.HTML_START,
            site.header or '',
            body,
            site.footer or '',
            config.HTML_END,
        ])
        index = dest / f'{config.INDEX_BASE}.{site.dist_ext}'
        self.add(WriteFile(index, minify_document(content, site.minify)))

        for asset in document.assets:
            self.add(Copy(asset, dest / asset.name))

    def stylesheet_hrefs(self, document: ContentDocument, dest: Path):
        """
        Links, relative to @dest, for the style sheets next to @document's
        source and those among its own assets.
        """
        hrefs = [
            _relative_href(self.mirror(sheet), dest)
            for sheet in self.site.stylesheets
            if sheet.parent == document.source.parent
        ]
        hrefs.extend(
            asset.name for asset in document.assets
            if asset.suffix.lower().lstrip('.') == config.STYLE_FILE_EXT
        )
        return hrefs


def plan(site: Site, processor: RuleProcessor) -> list[FsAction]:
    """
    Plan every action needed to generate @site. Documents are rendered with
    @processor while planning; nothing is written.
    """
    return Planner(site, processor).plan()


def apply_action(action: FsAction, index: int = 0):
    """
    Apply a single action, raising `PlanningInvariantError` when a path exists
    as the wrong type and `ExecutionIoError` for any other failure.
    """
    try:
        if isinstance(action, Copy):
            if action.dest.is_dir():
                raise PlanningInvariantError(
                    action, index, f'There is already a directory (not a file) at {action.dest}'
                )
            shutil.copyfile(action.source, action.dest)

        elif isinstance(action, DeleteDir):
            if not action.path.exists():
                if action.allow_missing:
                    return
                raise ExecutionIoError(action, index, f'There is nothing to delete at {action.path}')
            if not action.path.is_dir():
                raise PlanningInvariantError(action, index, f'There is a file (not a directory) at {action.path}')
            if action.recursive:
                shutil.rmtree(action.path)
            else:
                # Requires that the directory is empty
                action.path.rmdir()

        elif isinstance(action, CreateDir):
            if action.path.exists():
                if not action.path.is_dir():
                    raise PlanningInvariantError(
                        action, index, f'There is already a file (not a directory) at {action.path}'
                    )
                if action.allow_exists:
                    return
            action.path.mkdir()

        elif isinstance(action, WriteFile):
            if action.path.is_dir():
                raise PlanningInvariantError(
                    action, index, f'There is already a directory (not a file) at {action.path}'
                )
            action.path.write_text(action.content, encoding='utf-8')

        else:
            raise TypeError(f'Unknown action {action!r}')

    except OSError as e:
        raise ExecutionIoError(action, index, e.strerror or str(e)) from e


def execute(actions: Sequence[FsAction]):
    """
    Apply @actions in order, stopping at the first failure. Nothing is retried
    or rolled back: after a failure, the destination reflects exactly the
    actions applied before it.
    """
    for index, action in enumerate(track_progress(actions, 'Generating...')):
        apply_action(action, index)
        print_with_style(str(action))
