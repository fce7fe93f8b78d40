"""
Minification of generated HTML documents.
"""
from __future__ import annotations

from .config import MinifyLevel


def minify_document(html: str, level: MinifyLevel) -> str:
    """
    Minify a generated document. `'no'` leaves @html untouched, `'yes'`
    minifies markup, and `'full'` additionally minifies inline CSS and JS.
    """
    if level == 'no':
        return html
    if level not in ('yes', 'full'):
        raise ValueError(f'Unknown minification level {level!r}!')

    from minify_html import minify
    full = level == 'full'
    return minify(html, minify_css=full, minify_js=full)
