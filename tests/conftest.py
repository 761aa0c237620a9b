# tests/conftest.py
import sys, os

import pytest

# Put scripts/ on sys.path so `split_csv`, `split_options` and `tempnam` import directly
SCRIPTS = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "scripts")
if SCRIPTS not in sys.path:
    sys.path.insert(0, SCRIPTS)

import split_options  # noqa: E402


class FakeNamer:
    """Deterministic temp namer: plain join under one directory, records every request."""

    def __init__(self, directory):
        self.directory = directory
        self.requested = []

    def __call__(self, desired_name):
        self.requested.append(desired_name)
        return os.path.join(str(self.directory), desired_name)


@pytest.fixture
def out_dir(tmp_path):
    d = tmp_path / "out"
    d.mkdir()
    return d


@pytest.fixture
def namer(out_dir):
    return FakeNamer(out_dir)


@pytest.fixture(autouse=True)
def _no_filters(monkeypatch):
    split_options.clear_options_filters()
    for name in (split_options.ENV_LINES_PER_FILE, split_options.ENV_PAD_WITH, split_options.ENV_DELETE_SOURCE):
        monkeypatch.delenv(name, raising=False)
    yield
    split_options.clear_options_filters()


@pytest.fixture
def make_csv(tmp_path):
    """make_csv(n_data, name="data.csv", header=...) -> (path, lines)"""

    def _make(n_data, name="data.csv", header="id,name\n"):
        path = tmp_path / name
        lines = [header] + [f"{i},row{i}\n" for i in range(n_data)]
        path.write_bytes("".join(lines).encode("utf-8"))
        return path, lines

    return _make
