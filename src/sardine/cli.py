"""
sardine's command line interface.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import (
    DEFAULT_MINIFY_LEVEL, DIST_FILE_EXT, FEED_FILE_EXT, MINIFY_LEVELS, InputBuildSettings,
)
from .errors import SardineError
from .pretty_utils import print_error
from .site import Site


class BuildNamespace:
    """
    Internal used to preserve typing between argparse and InputBuildSettings.
    """
    root: Path | None
    template: Path | None
    dist_ext: str
    feed_ext: str
    minify: str

    def to_build_settings(self, processor: list[str]):
        return InputBuildSettings(
            root=self.root or Path.cwd(),
            template=self.template,
            dist_ext=self.dist_ext,
            feed_ext=self.feed_ext,
            minify=self.minify,  # type: ignore[typeddict-item]
            processor=processor,
        )


def split_processor_args(argv: list[str]):
    """
    Separate the trailing processor command (everything after `--`) from
    sardine's own arguments.
    """
    if '--' in argv:
        index = argv.index('--')
        return argv[:index], argv[index + 1:]
    return argv, []


def parse_args(argv: list[str] | None = None, **kw):
    """
    Parse command line arguments into InputBuildSettings.
    """
    own_args, processor = split_processor_args(list(sys.argv[1:] if argv is None else argv))

    parser = argparse.ArgumentParser(
        description='A static site generator for slow connections.',
        epilog=(
            'Anything after "--" is a processor command, which receives one JSON '
            'object per line on its standard input for each placeholder sardine '
            'cannot fill itself, and must answer each with one JSON object per line.'
        ),
        **kw
    )
    parser.add_argument('root',
                        help='root directory holding content/ [default: current directory]',
                        nargs='?',
                        type=Path,
                        default=None)
    parser.add_argument('-t', '--default-template',
                        help='default HTML template for documents [default: basic embedded template]',
                        type=Path,
                        dest='template',
                        default=None)
    parser.add_argument('-e', '--generated-extension',
                        help='file extension for generated documents',
                        dest='dist_ext',
                        default=DIST_FILE_EXT)
    parser.add_argument('-a', '--feed-extension',
                        help='file extension for feed files',
                        dest='feed_ext',
                        default=FEED_FILE_EXT)
    parser.add_argument('-m', '--minify',
                        help='minification level',
                        type=str.lower,
                        choices=MINIFY_LEVELS,
                        default=DEFAULT_MINIFY_LEVEL)

    namespace = parser.parse_args(own_args, namespace=BuildNamespace())
    return namespace.to_build_settings(processor)


def main(arguments: list[str] | None = None):
    """
    sardine main function. Builds the site found under the given root.
    """
    settings = parse_args(arguments)
    try:
        Site.from_settings(settings).generate()
    except SardineError as e:
        print_error(str(e))
        sys.exit(1)


if __name__ == '__main__':
    main()
