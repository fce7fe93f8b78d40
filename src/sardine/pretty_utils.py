"""
Console output for sardine: progress bars while rendering and generating, plus
the notice and error channels on stderr.
"""
import sys
import typing as t

import rich.console
import rich.progress


_consoles = {
    'stdout': rich.console.Console(file=sys.stdout),
    'stderr': rich.console.Console(file=sys.stderr),
}


T = t.TypeVar('T')


def track_progress(iterable: t.Iterable[T], desc: str) -> t.Iterable[T]:
    """
    Yield from @iterable while a progress bar labelled @desc advances on stdout.
    """
    yield from rich.progress.track(iterable, desc, console=_consoles['stdout'])


def print_with_style(*args, sep=' ', end='\n', file: str = 'stdout', style=None):
    """
    Print @args to the `stdout` or `stderr` console in @style. Paths and HTML
    are printed literally, never read as rich markup.
    """
    _consoles[file].print(*args, sep=sep, end=end, style=style, markup=False, highlight=False)


def print_notice(message: str):
    """
    Report a recoverable problem on the notice channel.
    """
    print_with_style(f'⚠ {message}', file='stderr', style='yellow')


def print_error(message: str):
    """
    Report a fatal problem on the error channel.
    """
    print_with_style(f'✗ {message}', file='stderr', style='red')
