"""
Resolution of template placeholders, natively or through a delegate process.

The delegate is any program reading one JSON request per line on its standard
input and writing exactly one JSON response per line on its standard output,
in request order. Requests look like:

    {"v": 1, "ctx": {...}, "ty": "toc", "options": {"depth": 3}, "value": [...]}

and responses like either of:

    {"v": 1, "value": "<ul>...</ul>"}
    {"v": 1, "error": "something went wrong"}

`ctx` describes the document being rendered. `value` depends on `ty`:

- `toc`: the document's headings, as `{"level", "text", "id"}` objects.
- `listing`: `ctx`-style objects for every document under the listed path.
- `include`: `{"path", "text", "raw"}` for the included file, where `raw` is
  true for HTML files.
"""
from __future__ import annotations

import contextlib
import dataclasses
import json
import os
import subprocess
import typing as t
from pathlib import Path

from markdown_it.common.utils import escapeHtml

from . import config
from .errors import IncludeError, ProcessorConfigError, ProcessorProtocolError
from .markdown import extract_headings, render_markdown
from .pretty_utils import print_notice, print_with_style
from .rules import Contents, Css, Include, Listing, Meta, Rule, TableOfContents

if t.TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from .document import ContentDocument
    from .template import Template


PROTOCOL_VERSION = 1


@dataclasses.dataclass
class EvaluationContext:
    """
    Everything a placeholder may need while rendering one document.
    """
    document: ContentDocument
    source_root: Path
    stylesheets: list[str] = dataclasses.field(default_factory=list)
    documents: Sequence[ContentDocument] = ()

    def to_json(self) -> dict[str, t.Any]:
        data = self.document.to_context_dict(self.source_root)
        data['css'] = list(self.stylesheets)
        return data

    def resolve_path(self, value: str):
        """
        Resolve a path option. A leading `/` makes it relative to the source
        root, otherwise it is relative to the document's directory. `..`
        segments are collapsed.
        """
        if value.startswith('/'):
            path = self.source_root / value.lstrip('/')
        else:
            path = self.document.source.parent / value
        return Path(os.path.normpath(path))


def check_delegate_configured(templates: Iterable[Template], command: Sequence[str] | None):
    """
    Raise `ProcessorConfigError` if any of @templates needs the delegate but no
    @command was given.
    """
    if command:
        return
    for template in templates:
        if kinds := template.delegated_kinds:
            label = template.path or 'the default template'
            raise ProcessorConfigError(
                f'{label} uses {", ".join(sorted(kinds))}, which requires a processor command'
            )


class RuleProcessor:
    """
    Resolves placeholder rules. Must be used as a context manager: the delegate
    process, if a @command is configured, lives exactly as long as the `with`
    block.
    """
    encoding = 'utf-8'
    terminate_timeout = 5

    def __init__(self, command: Sequence[str] | None = None):
        self.command = list(command or ())
        self._process: subprocess.Popen[str] | None = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def running(self):
        return self._process is not None

    def start(self):
        """
        Launch the delegate process, if one is configured.
        """
        if not self.command or self._process:
            return
        print_with_style(f'Starting processor: {" ".join(self.command)}', style='cyan')
        try:
            self._process = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                encoding=self.encoding,
                bufsize=1,
            )
        except OSError as e:
            raise ProcessorProtocolError(f'Failed to start processor {self.command[0]!r}: {e}') from e

    def close(self):
        """
        Shut down the delegate process, killing it if it does not exit on its
        own once its input is closed.
        """
        process, self._process = self._process, None
        if not process:
            return
        for stream in (process.stdin, process.stdout):
            if stream:
                with contextlib.suppress(OSError):
                    stream.close()
        try:
            process.wait(self.terminate_timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def resolve(self, rule: Rule, context: EvaluationContext) -> str:
        """
        Compute the substitution for @rule in @context.
        """
        if isinstance(rule, Contents):
            return render_markdown(context.document.body)
        if isinstance(rule, Css):
            return ''.join(
                f'<link rel="stylesheet" href="{escapeHtml(href)}">\n'
                for href in context.stylesheets
            )
        if isinstance(rule, Meta):
            return escapeHtml(self.lookup_meta(rule.key, context))

        if isinstance(rule, TableOfContents):
            value: t.Any = extract_headings(context.document.body, rule.depth)
        elif isinstance(rule, Listing):
            value = self.listing_value(context.resolve_path(rule.path), context)
        elif isinstance(rule, Include):
            value = self.include_value(context.resolve_path(rule.path), context)
        else:
            raise TypeError(f'Unknown rule {rule!r}')
        return self.request(rule.kind, context.to_json(), rule.options(), value)

    def lookup_meta(self, key: str, context: EvaluationContext) -> str:
        """
        Find a metadata value, preferring the resolved document fields for the
        well-known keys.
        """
        document = context.document
        known = {
            config.META_KEY_TITLE: document.title,
            config.META_KEY_CREATION_DATE: document.created.strftime(config.DATE_FMT),
            config.META_KEY_MODIFIED_DATE: document.modified.strftime(config.DATE_FMT),
            config.META_KEY_CATEGORY: document.category,
            config.META_KEY_TAGS: ', '.join(document.tags) or None,
        }
        value = known.get(key) or document.meta.get(key)
        if value is None:
            print_notice(f'{document.source}: no metadata value for {key!r}')
            return ''
        return value

    def listing_value(self, directory: Path, context: EvaluationContext):
        directory = Path(os.path.normpath(directory))
        return [
            d.to_context_dict(context.source_root)
            for d in context.documents
            if Path(os.path.normpath(d.source)).is_relative_to(directory)
        ]

    def include_value(self, path: Path, context: EvaluationContext):
        if not path.resolve().is_relative_to(context.source_root.resolve()):
            raise IncludeError(path, f'outside of {context.source_root}')
        try:
            text = path.read_text(self.encoding)
        except OSError as e:
            raise IncludeError(path, e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise IncludeError(path, f'not valid {self.encoding}') from e
        raw = path.suffix.lower().lstrip('.') in config.INCLUDE_RAW_EXTENSIONS
        return {'path': str(path), 'text': text, 'raw': raw}

    def request(self, ty: str, ctx: dict[str, t.Any], options: dict[str, t.Any], value: t.Any) -> str:
        """
        Send one request to the delegate and wait for its response.
        """
        process = self._process
        if not process or not process.stdin or not process.stdout:
            if not self.command:
                raise ProcessorConfigError(f'{ty!r} placeholders require a processor command')
            raise ProcessorProtocolError('Processor is not running')

        message: dict[str, t.Any] = {'v': PROTOCOL_VERSION, 'ctx': ctx, 'ty': ty, 'value': value}
        if options:
            message['options'] = options

        try:
            process.stdin.write(json.dumps(message) + '\n')
            process.stdin.flush()
            line = process.stdout.readline()
        except (BrokenPipeError, ValueError, OSError) as e:
            raise ProcessorProtocolError(f'Lost connection to processor while sending {ty!r}: {e}') from e

        if not line:
            code = process.poll()
            detail = f' (exit status {code})' if code is not None else ''
            raise ProcessorProtocolError(f'Processor closed its output before answering {ty!r}{detail}')
        return self.parse_response(ty, line)

    def parse_response(self, ty: str, line: str) -> str:
        """
        Validate a single response line and extract the substitution value.
        """
        try:
            response = json.loads(line)
        except json.JSONDecodeError as e:
            raise ProcessorProtocolError(f'Malformed response to {ty!r}: {e}') from e
        if not isinstance(response, dict):
            raise ProcessorProtocolError(f'Response to {ty!r} is not a JSON object')
        if response.get('v') != PROTOCOL_VERSION:
            raise ProcessorProtocolError(
                f'Response to {ty!r} has protocol version {response.get("v")!r}, expected {PROTOCOL_VERSION}'
            )
        if 'error' in response:
            raise ProcessorProtocolError(f'Processor failed on {ty!r}: {response["error"]}')
        value = response.get('value')
        if not isinstance(value, str):
            raise ProcessorProtocolError(f'Response to {ty!r} has no string "value"')
        return value
