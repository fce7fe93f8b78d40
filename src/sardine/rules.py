"""
The closed set of substitution rules a template placeholder can name.

`Contents`, `Css` and `Meta` are computed by sardine itself; every other rule
is delegated to an external processor.
"""
from __future__ import annotations

import dataclasses
import typing as t


DEFAULT_TOC_DEPTH = 6


@dataclasses.dataclass(frozen=True)
class Contents:
    """
    The rendered body of the current document.
    """
    kind: t.ClassVar[str] = 'contents'
    native: t.ClassVar[bool] = True

    def options(self) -> dict[str, t.Any]:
        return {}


@dataclasses.dataclass(frozen=True)
class Css:
    """
    Links to the style sheets next to the current document.
    """
    kind: t.ClassVar[str] = 'css'
    native: t.ClassVar[bool] = True

    def options(self) -> dict[str, t.Any]:
        return {}


@dataclasses.dataclass(frozen=True)
class TableOfContents:
    """
    A table of contents covering headings down to @depth.
    """
    depth: int = DEFAULT_TOC_DEPTH
    kind: t.ClassVar[str] = 'toc'
    native: t.ClassVar[bool] = False

    def options(self) -> dict[str, t.Any]:
        return {'depth': self.depth}


@dataclasses.dataclass(frozen=True)
class Listing:
    """
    A listing of the documents found under @path.
    """
    path: str
    kind: t.ClassVar[str] = 'listing'
    native: t.ClassVar[bool] = False

    def options(self) -> dict[str, t.Any]:
        return {'path': self.path}


@dataclasses.dataclass(frozen=True)
class Meta:
    """
    A single metadata value of the current document.
    """
    key: str
    kind: t.ClassVar[str] = 'meta'
    native: t.ClassVar[bool] = True

    def options(self) -> dict[str, t.Any]:
        return {'key': self.key}


@dataclasses.dataclass(frozen=True)
class Include:
    """
    The contents of another file.
    """
    path: str
    kind: t.ClassVar[str] = 'include'
    native: t.ClassVar[bool] = False

    def options(self) -> dict[str, t.Any]:
        return {'path': self.path}


Rule = t.Union[Contents, Css, TableOfContents, Listing, Meta, Include]
RULE_TYPES: tuple[type[Rule], ...] = t.get_args(Rule)


def _no_options(cls: type[Rule]):
    def build(args: list[str]):
        if args:
            raise ValueError(f'{cls.kind} takes no options, got {" ".join(args)!r}')
        return cls()
    return build


def _one_option(cls: type[Rule], name: str):
    def build(args: list[str]):
        if len(args) != 1:
            raise ValueError(f'{cls.kind} takes exactly one option ({name}), got {len(args)}')
        return cls(args[0])
    return build


def _toc(args: list[str]):
    if not args:
        return TableOfContents()
    if len(args) > 1:
        raise ValueError(f'toc takes at most one option (depth), got {len(args)}')
    try:
        depth = int(args[0])
    except ValueError:
        raise ValueError(f'toc depth must be an integer, got {args[0]!r}') from None
    if depth < 1:
        raise ValueError(f'toc depth must be positive, got {depth}')
    return TableOfContents(depth)


RULE_PARSERS: dict[str, t.Callable[[list[str]], Rule]] = {
    'contents': _no_options(Contents),
    'css': _no_options(Css),
    'toc': _toc,
    'tableofcontents': _toc,
    'listing': _one_option(Listing, 'path'),
    'meta': _one_option(Meta, 'key'),
    'include': _one_option(Include, 'path'),
}


def parse_rule(text: str) -> Rule:
    """
    Parse the text between two template markers. The first word selects the
    rule kind (case-insensitively) and the remaining words are its options.
    """
    words = text.split()
    if not words:
        raise ValueError('empty placeholder')
    name, *args = words
    try:
        parser = RULE_PARSERS[name.lower()]
    except KeyError:
        raise ValueError(f'unknown placeholder kind {name!r}') from None
    return parser(args)
