from pathlib import Path

import pytest

from sardine.cli import main, parse_args, split_processor_args


@pytest.mark.parametrize('argv,expected', [
    ([], ([], [])),
    (['site', '-m', 'no'], (['site', '-m', 'no'], [])),
    (['site', '--', 'python', 'proc.py', '--flag'], (['site'], ['python', 'proc.py', '--flag'])),
    (['--', 'proc'], ([], ['proc'])),
])
def test_split_processor_args(argv: list[str], expected: tuple[list[str], list[str]]):
    assert split_processor_args(argv) == expected


def test_parse_args_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    settings = parse_args([])
    assert settings == {
        'root': tmp_path,
        'template': None,
        'dist_ext': 'html',
        'feed_ext': 'atom',
        'minify': 'yes',
        'processor': [],
    }


def test_parse_args_everything(tmp_path: Path):
    settings = parse_args([
        str(tmp_path),
        '-t', 'layout.html',
        '-e', 'htm',
        '--feed-extension', 'xml',
        '--minify', 'FULL',
        '--', 'python', 'processor.py',
    ])
    assert settings == {
        'root': tmp_path,
        'template': Path('layout.html'),
        'dist_ext': 'htm',
        'feed_ext': 'xml',
        'minify': 'full',
        'processor': ['python', 'processor.py'],
    }


def test_parse_args_rejects_unknown_minify_level():
    with pytest.raises(SystemExit):
        parse_args(['-m', 'extreme'])


def test_main_builds_site(tmp_path: Path):
    (tmp_path / 'content').mkdir()
    (tmp_path / 'content' / 'hello.md').write_text('+++\ntitle = Hello\n+++\nHello, world!')
    main([str(tmp_path), '-m', 'no'])
    page = (tmp_path / 'dist' / 'hello' / 'index.html').read_text()
    assert '<h1>Hello</h1>' in page
    assert '<p>Hello, world!</p>' in page


def test_main_reports_fatal_errors(tmp_path: Path):
    (tmp_path / 'content').mkdir()
    (tmp_path / 'content' / 'toc.html').write_text('<!--P/ TOC /P-->')
    (tmp_path / 'content' / 'post.md').write_text('+++\ntemplate = toc.html\n+++\nBody')
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path)])
    assert excinfo.value.code == 1
    assert not (tmp_path / 'dist').exists()
