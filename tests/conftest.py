import datetime
import logging

import pytest

from omnisnip.snippet import StorageService


class _FakeClock:
    """Hands out strictly increasing UTC timestamps, one second apart."""

    def __init__(self):
        self.current = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)

    def __call__(self):
        self.current += datetime.timedelta(seconds=1)
        return self.current


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / "omnisnip"


@pytest.fixture
def store(storage_dir):
    return StorageService(storage_dir)


@pytest.fixture
def clock(monkeypatch):
    fake = _FakeClock()
    monkeypatch.setattr("omnisnip.snippet.storage._utcnow", fake)
    return fake


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("omnisnip")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def _make_input(**overrides):
    data = {
        "title": "Logging Middleware",
        "description": "A middleware for logging",
        "code": "console.log('Hello, World!');",
        "language": "javascript",
        "category": "config",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_input():
    return _make_input
