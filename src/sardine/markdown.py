"""
Markdown rendering based on markdown-it-py, with Pygments highlighting for
code fences and anchors on headings.
"""
from __future__ import annotations

import functools
import typing as t

import markdown_it
from markdown_it.common.utils import escapeHtml, unescapeAll
from markdown_it.renderer import RendererHTML
from mdit_py_plugins.anchors import anchors_plugin  # type: ignore[reportPrivateImportUsage]

if t.TYPE_CHECKING:
    from collections.abc import Sequence
    from markdown_it.token import Token
    from markdown_it.utils import EnvType, OptionsDict


class SardineRendererHTML(RendererHTML):
    """
    A markdown-it-py HTML renderer which hands code fences to the highlighter
    without the default `<pre><code>` wrapper, as Pygments supplies its own.
    """
    # https://github.com/executablebooks/markdown-it-py/issues/256
    def fence(self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType):
        token = tokens[idx]
        info = unescapeAll(token.info).strip() if token.info else ''
        lang_name = info.split(maxsplit=1)[0] if info else ''

        highlighted = options.highlight and options.highlight(token.content, lang_name, '')
        if highlighted:
            return highlighted
        return f'<pre><code>{escapeHtml(token.content)}</code></pre>\n'


def highlight_code(code: str, lang: str, _lang_attrs: str):
    """
    Apply Pygments syntax highlighting to @code, returning HTML markup, or an
    empty string when no lexer fits.
    """
    from pygments import highlight
    from pygments.formatters.html import HtmlFormatter
    from pygments.lexers import get_lexer_by_name
    from pygments.util import ClassNotFound
    if not lang:
        return ''
    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound:
        return ''
    return highlight(code, lexer, HtmlFormatter())


@functools.cache
def get_processor():
    """
    Build (once) the markdown-it processor used for all documents.
    """
    processor = markdown_it.MarkdownIt(
        'commonmark',
        {'highlight': highlight_code},
        renderer_cls=SardineRendererHTML,
    )
    processor.enable(['strikethrough', 'table'])
    anchors_plugin(processor, min_level=1, max_level=6)
    return processor


def render_markdown(text: str) -> str:
    """
    Render a markdown string to HTML.
    """
    return get_processor().render(text)


def extract_headings(text: str, depth: int = 6) -> list[dict[str, t.Any]]:
    """
    List the headings of a markdown string down to level @depth, with the
    anchor ids `render_markdown()` gives them.
    """
    tokens = get_processor().parse(text)
    headings = []
    for i, token in enumerate(tokens):
        if token.type != 'heading_open':
            continue
        level = int(token.tag[1:])
        if level > depth:
            continue
        inline = tokens[i + 1]
        headings.append({
            'level': level,
            'text': inline.content,
            'id': token.attrGet('id'),
        })
    return headings
