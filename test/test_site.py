import shutil
import sys
from pathlib import Path

import pytest

from sardine.config import BuildSettings
from sardine.errors import ProcessorConfigError, ProcessorProtocolError, TemplateParseError
from sardine.site import Site
from sardine.template import Template


EXAMPLE_SITE = Path(__file__).parent.parent / 'examples' / 'basic_site'
EXAMPLE_PROCESSOR = Path(__file__).parent.parent / 'examples' / 'processor.py'


@pytest.fixture
def example_root(tmp_path: Path):
    root = tmp_path / 'site'
    shutil.copytree(EXAMPLE_SITE, root)
    return root


def build_settings(root: Path, **kw) -> BuildSettings:
    settings = BuildSettings(
        root=root,
        template=None,
        dist_ext='html',
        feed_ext='atom',
        minify='no',
        processor=[],
    )
    settings.update(kw)  # type: ignore[typeddict-item]
    return settings


def test_example_site(example_root: Path):
    processor = [sys.executable, str(EXAMPLE_PROCESSOR)]
    Site.from_settings(build_settings(example_root, processor=processor)).generate()
    dist = example_root / 'dist'

    home = (dist / 'home' / 'index.html').read_text()
    assert '<header><a href="/">Basic site</a></header>' in home
    assert '<footer>Built with sardine.</footer>' in home
    assert '<link rel="stylesheet" href="../site.css">' in home
    assert '<h1>Home</h1>' in home
    assert 'Welcome to the <em>basic</em> site.' in home
    assert home.index('Second post') < home.index('First post')
    assert 'A tiny site for trying out sardine.' in home

    post = (dist / 'first-post' / 'index.html').read_text()
    assert '<h1>First post</h1>' in post
    assert '2023-02-03' in post
    assert 'href="#with-a-picture"' in post
    assert '<h2 id="with-a-picture">' in post
    assert (dist / 'first-post' / 'dot.svg').exists()
    assert (dist / 'second-post' / 'index.html').exists()

    assert (dist / 'site.css').exists()
    assert (dist / 'about.txt').exists()
    for name in ['post.html', 'index.html', '_header.html', '_footer.html', 'home.md']:
        assert not (dist / name).exists()


def test_example_site_rerun_is_identical(example_root: Path):
    processor = [sys.executable, str(EXAMPLE_PROCESSOR)]

    def snapshot():
        dist = example_root / 'dist'
        return {p.relative_to(dist): p.read_bytes() for p in dist.rglob('*') if p.is_file()}

    Site.from_settings(build_settings(example_root, processor=processor)).generate()
    first = snapshot()
    Site.from_settings(build_settings(example_root, processor=processor)).generate()
    assert snapshot() == first


def test_delegated_rule_without_processor_writes_nothing(example_root: Path):
    site = Site.from_settings(build_settings(example_root))
    with pytest.raises(ProcessorConfigError):
        site.generate()
    assert not (example_root / 'dist').exists()


def test_broken_processor_writes_nothing(example_root: Path, tmp_path: Path):
    script = tmp_path / 'broken.py'
    script.write_text('import sys\nsys.stdin.readline()\nprint("garbage", flush=True)\n')
    site = Site.from_settings(build_settings(example_root, processor=[sys.executable, str(script)]))
    with pytest.raises(ProcessorProtocolError):
        site.generate()
    assert not (example_root / 'dist').exists()


def test_shared_template_parsed_once(tmp_path: Path, write_tree, monkeypatch: pytest.MonkeyPatch):
    write_tree(tmp_path / 'content', {
        'a.md': '+++\ntemplate = /shared.html\n+++\nA',
        'b.md': '+++\ntemplate = shared.html\n+++\nB',
        'shared.html': '<div><!--P/ CONTENTS /P--></div>',
    })

    parsed: list[Path | None] = []
    original = Template.parse.__func__  # type: ignore[attr-defined]

    def counting_parse(cls, text: str, path: Path | None = None):
        parsed.append(path)
        return original(cls, text, path)

    monkeypatch.setattr(Template, 'parse', classmethod(counting_parse))
    site = Site.from_settings(build_settings(tmp_path))

    assert len([p for p in parsed if p is not None]) == 1
    a, b = site.documents
    assert site.template_for(a) is site.template_for(b)

    site.generate()
    assert (tmp_path / 'dist' / 'a' / 'index.html').read_text().count('<div><p>A</p>') == 1
    assert not (tmp_path / 'dist' / 'shared.html').exists()


def test_template_error_names_all_documents(tmp_path: Path, write_tree):
    write_tree(tmp_path / 'content', {
        'a.md': '+++\ntemplate = broken.html\n+++\nA',
        'b.md': '+++\ntemplate = /broken.html\n+++\nB',
        'c.md': 'C',
        'broken.html': '<!--P/ NOPE /P-->',
    })
    with pytest.raises(TemplateParseError) as excinfo:
        Site.from_settings(build_settings(tmp_path))
    error = excinfo.value
    assert error.path == (tmp_path / 'content' / 'broken.html').resolve()
    assert sorted(error.documents) == [tmp_path / 'content' / 'a.md', tmp_path / 'content' / 'b.md']


def test_default_template_setting(tmp_path: Path, write_tree):
    write_tree(tmp_path, {
        'content/a.md': 'A',
        'layout.html': '<section><!--P/ CONTENTS /P--></section>',
    })
    site = Site.from_settings(build_settings(tmp_path, template=tmp_path / 'layout.html', dist_ext='xhtml'))
    site.generate()
    page = (tmp_path / 'dist' / 'a' / 'index.xhtml').read_text()
    assert '<section><p>A</p>\n</section>' in page


def test_minified_output(tmp_path: Path, write_tree):
    write_tree(tmp_path / 'content', {'a.md': '+++\ntitle = A\n+++\nSome text'})
    Site.from_settings(build_settings(tmp_path, minify='yes')).generate()
    page = (tmp_path / 'dist' / 'a' / 'index.html').read_text()
    assert 'Some text' in page
    assert '\n    ' not in page
