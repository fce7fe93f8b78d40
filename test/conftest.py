import datetime as dt
import sys
import textwrap
from pathlib import Path

import pytest

from sardine.document import ContentDocument


EXAMPLES_PATH = Path(__file__).parent.parent / 'examples'

ECHO_PROCESSOR = textwrap.dedent('''
    import json
    import sys

    for line in sys.stdin:
        request = json.loads(line)
        value = request['ty'] + ':' + json.dumps(request.get('options', {}), sort_keys=True)
        sys.stdout.write(json.dumps({'v': 1, 'value': value}) + '\\n')
        sys.stdout.flush()
''')


@pytest.fixture
def make_document():
    def factory(source: Path, text: str = '', **kw):
        kw.setdefault('title', source.name)
        kw.setdefault('created', dt.date(2023, 1, 1))
        kw.setdefault('modified', dt.date(2023, 1, 2))
        return ContentDocument(source=source, text=text, **kw)
    return factory


@pytest.fixture
def echo_processor(tmp_path: Path):
    script = tmp_path / 'echo_processor.py'
    script.write_text(ECHO_PROCESSOR)
    return [sys.executable, str(script)]


@pytest.fixture
def write_tree():
    def writer(root: Path, files: dict[str, str]):
        for name, content in files.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root
    return writer
