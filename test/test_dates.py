import datetime as dt
import os
from pathlib import Path

import pytest

from sardine import dates
from sardine.dates import parse_date, resolve_date
from sardine.errors import MetadataError


OLD_TIME = dt.datetime(2001, 2, 3, 12, 0, 0).timestamp()


@pytest.fixture
def old_file(tmp_path: Path):
    path = tmp_path / 'post.md'
    path.write_text('hello')
    os.utime(path, (OLD_TIME, OLD_TIME))
    return path


@pytest.fixture
def notices(monkeypatch: pytest.MonkeyPatch):
    collected: list[str] = []
    monkeypatch.setattr(dates, 'print_notice', collected.append)
    return collected


def test_parse_date():
    assert parse_date(' 2023-04-05 ') == dt.date(2023, 4, 5)


@pytest.mark.parametrize('value', ['', 'yesterday', '2023-13-01', '05/04/2023'])
def test_parse_date_invalid(value: str):
    with pytest.raises(MetadataError):
        parse_date(value)


@pytest.mark.parametrize('is_creation', [True, False])
def test_declared_date_wins(old_file: Path, is_creation: bool, notices: list[str]):
    assert resolve_date(old_file, is_creation, '2020-06-07') == dt.date(2020, 6, 7)
    assert not notices


def test_modification_date_from_filesystem(old_file: Path, notices: list[str]):
    assert resolve_date(old_file, False) == dt.date(2001, 2, 3)
    assert not notices


def test_invalid_declared_date_falls_back(old_file: Path, notices: list[str]):
    assert resolve_date(old_file, False, 'not a date') == dt.date(2001, 2, 3)
    assert len(notices) == 1


def test_missing_file_falls_back_to_today(tmp_path: Path, notices: list[str]):
    assert resolve_date(tmp_path / 'missing.md', False) == dt.date.today()
    assert len(notices) == 1


def test_creation_date_without_birth_time(old_file: Path, notices: list[str], monkeypatch: pytest.MonkeyPatch):
    def no_birth_time(path: Path, is_creation: bool):
        raise MetadataError('creation time is not available')
    monkeypatch.setattr(dates, 'filesystem_date', no_birth_time)
    assert resolve_date(old_file, True) == dt.date.today()
    assert len(notices) == 1
