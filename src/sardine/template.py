"""
HTML templates with `<!--P/ ... /P-->` placeholders.
"""
from __future__ import annotations

import dataclasses
import typing as t
from pathlib import Path

from .config import DEFAULT_HTML_TEMPLATE, TEMPLATE_CLOSE_MARKER, TEMPLATE_OPEN_MARKER
from .errors import TemplateParseError
from .rules import Rule, parse_rule

if t.TYPE_CHECKING:
    from .processor import EvaluationContext, RuleProcessor


@dataclasses.dataclass(frozen=True)
class Placeholder:
    """
    A marker in a template, with the offsets it occupied in the source text.
    """
    span: tuple[int, int]
    rule: Rule


Span = t.Union[str, Placeholder]


@dataclasses.dataclass(frozen=True)
class Template:
    """
    A parsed template: literal text interleaved with placeholders. A template
    without a path is the embedded default.
    """
    path: Path | None
    spans: tuple[Span, ...]

    @classmethod
    def parse(cls, text: str, path: Path | None = None):
        """
        Split @text into literal spans and placeholders. Unbalanced markers and
        unknown rules raise `TemplateParseError`.
        """
        spans: list[Span] = []
        pos = 0
        while True:
            start = text.find(TEMPLATE_OPEN_MARKER, pos)
            stray_close = text.find(TEMPLATE_CLOSE_MARKER, pos, None if start == -1 else start)
            if stray_close != -1:
                raise TemplateParseError(path, stray_close, 'closing marker without an opening marker')
            if start == -1:
                break

            inner_start = start + len(TEMPLATE_OPEN_MARKER)
            end = text.find(TEMPLATE_CLOSE_MARKER, inner_start)
            if end == -1:
                raise TemplateParseError(path, start, 'opening marker is never closed')
            nested = text.find(TEMPLATE_OPEN_MARKER, inner_start, end)
            if nested != -1:
                raise TemplateParseError(path, nested, 'opening marker inside another placeholder')

            try:
                rule = parse_rule(text[inner_start:end])
            except ValueError as e:
                raise TemplateParseError(path, start, str(e)) from None

            if start > pos:
                spans.append(text[pos:start])
            stop = end + len(TEMPLATE_CLOSE_MARKER)
            spans.append(Placeholder((start, stop), rule))
            pos = stop

        if pos < len(text):
            spans.append(text[pos:])
        return cls(path, tuple(spans))

    @classmethod
    def from_file(cls, path: Path, encoding: str = 'utf-8'):
        """
        Read and parse the template at @path.
        """
        return cls.parse(path.read_text(encoding), path)

    @classmethod
    def default(cls):
        """
        The embedded default template.
        """
        return cls.parse(DEFAULT_HTML_TEMPLATE)

    @property
    def rules(self) -> list[Rule]:
        return [s.rule for s in self.spans if isinstance(s, Placeholder)]

    @property
    def delegated_kinds(self) -> set[str]:
        return {r.kind for r in self.rules if not r.native}

    def render(self, context: EvaluationContext, processor: RuleProcessor) -> str:
        """
        Render this template for one document, resolving placeholders in order.
        """
        parts: list[str] = []
        for span in self.spans:
            if isinstance(span, Placeholder):
                parts.append(processor.resolve(span.rule, context))
            else:
                parts.append(span)
        return ''.join(parts)
