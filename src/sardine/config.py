"""
Constants and build settings for sardine projects.
"""
from __future__ import annotations

import typing as t
from pathlib import Path


# Program defaults.
SOURCE_PATH = 'content'
TARGET_PATH = 'dist'

# Source file metadata.
FRONT_MATTER_FENCE = '+++'
META_VALUE_SEPARATOR = '='
META_TAG_SEPARATOR = ','
DATE_FMT = '%Y-%m-%d'
META_KEY_TITLE = 'title'
META_KEY_CREATION_DATE = 'date'
META_KEY_MODIFIED_DATE = 'updated'
META_KEY_CATEGORY = 'category'
META_KEY_TAGS = 'tags'
META_KEY_TEMPLATE = 'template'

# Templates.
TEMPLATE_OPEN_MARKER = '<!--P/'
TEMPLATE_CLOSE_MARKER = '/P-->'
INCLUDE_RAW_EXTENSIONS = frozenset({'html', 'htm', 'xhtml', 'xht'})
HEADER_FILE_NAME = '_header.html'
FOOTER_FILE_NAME = '_footer.html'

# Site options.
SOURCE_FILE_EXT = 'md'
DIST_FILE_EXT = 'html'
STYLE_FILE_EXT = 'css'
FEED_FILE_EXT = 'atom'
INDEX_BASE = 'index'

DEFAULT_HTML_TEMPLATE = """\
<!--P/ CSS /P-->
<article>
<h1><!--P/ META title /P--></h1>
<!--P/ CONTENTS /P-->
</article>
"""

HTML_START = """\
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8" />
</head>
<body>
    <main>
"""

HTML_END = """\
    </main>
</body>
</html>
"""

MinifyLevel = t.Literal['no', 'yes', 'full']
MINIFY_LEVELS: tuple[MinifyLevel, ...] = t.get_args(MinifyLevel)
DEFAULT_MINIFY_LEVEL: MinifyLevel = 'yes'


class InputBuildSettings(t.TypedDict, total=False):
    """
    TypedDict for partially specified build settings, as a caller or the CLI
    provides them.
    """
    root: Path
    template: Path | None
    dist_ext: str
    feed_ext: str
    minify: MinifyLevel
    processor: list[str]


class BuildSettings(t.TypedDict):
    """
    TypedDict for complete build settings ready for passing to a Site.
    """
    root: Path
    template: Path | None
    dist_ext: str
    feed_ext: str
    minify: MinifyLevel
    processor: list[str]


def resolve_settings(settings: InputBuildSettings | None = None) -> BuildSettings:
    """
    Fill in defaults for any build settings missing from @settings. The root
    defaults to the current working directory.
    """
    settings = settings or InputBuildSettings()
    minify = settings.get('minify', 'no')
    if minify not in MINIFY_LEVELS:
        raise ValueError(f'Unknown minification level {minify!r}!')
    return BuildSettings(
        root=Path(settings.get('root') or Path.cwd()),
        template=settings.get('template'),
        dist_ext=settings.get('dist_ext', DIST_FILE_EXT).lstrip('.'),
        feed_ext=settings.get('feed_ext', FEED_FILE_EXT).lstrip('.'),
        minify=minify,
        processor=list(settings.get('processor') or ()),
    )
