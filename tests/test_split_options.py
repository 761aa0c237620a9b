# tests/test_split_options.py
import os
import pytest

import split_options as so
from split_options import SplitOptions, parse_options, validate_options, options_from_env


def test_defaults():
    opts = parse_options()
    assert opts == SplitOptions(delete_source_after_split=False, lines_per_file=5, pad_filename_with="0")


def test_merge_ignores_unknown_keys():
    opts = parse_options({"lines_per_file": 9, "colour": "blue"})
    assert opts.lines_per_file == 9
    assert opts.pad_filename_with == "0"
    assert not hasattr(opts, "colour")


def test_camel_case_aliases():
    opts = parse_options({"linesPerFile": 2, "padFilenameWith": "-", "deleteSourceAfterSplit": True})
    assert opts == SplitOptions(delete_source_after_split=True, lines_per_file=2, pad_filename_with="-")


def test_merge_over_custom_defaults():
    base = SplitOptions(lines_per_file=100, pad_filename_with="_")
    assert parse_options({"lines_per_file": 3}, defaults=base) == SplitOptions(lines_per_file=3, pad_filename_with="_")


@pytest.mark.parametrize("lines", [0, -1, 2.5, None, False])
def test_validate_rejects_lines(lines):
    with pytest.raises(ValueError, match="lines_per_file"):
        validate_options(SplitOptions(lines_per_file=lines))


@pytest.mark.parametrize("pad", ["", "ab", 0, None, os.sep])
def test_validate_rejects_pad(pad):
    with pytest.raises(ValueError, match="pad_filename_with"):
        validate_options(SplitOptions(pad_filename_with=pad))


def test_validate_returns_options():
    opts = SplitOptions(lines_per_file=1)
    assert validate_options(opts) is opts


def test_env_overrides():
    env = {
        so.ENV_LINES_PER_FILE: "250",
        so.ENV_PAD_WITH: "x",
        so.ENV_DELETE_SOURCE: "Yes",
    }
    assert options_from_env(env) == SplitOptions(delete_source_after_split=True, lines_per_file=250, pad_filename_with="x")


def test_env_empty_gives_defaults():
    assert options_from_env({}) == SplitOptions()


def test_env_delete_falsy():
    assert options_from_env({so.ENV_DELETE_SOURCE: "0"}).delete_source_after_split is False


def test_env_bad_integer():
    with pytest.raises(ValueError, match=so.ENV_LINES_PER_FILE):
        options_from_env({so.ENV_LINES_PER_FILE: "many"})


def test_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv(so.ENV_LINES_PER_FILE, "7")
    assert options_from_env().lines_per_file == 7


def test_filters_run_in_order():
    calls = []

    def first(options, path):
        calls.append(("first", path))
        return {"lines_per_file": options.lines_per_file * 2}

    def second(options, path):
        calls.append(("second", path))
        return None

    def third(options, path):
        calls.append(("third", path))
        if path.endswith("big.csv"):
            return SplitOptions(lines_per_file=1000)
        return options

    for f in (first, second, third):
        so.add_options_filter(f)

    assert so.apply_options_filters(SplitOptions(), "/in/small.csv").lines_per_file == 10
    assert [c[0] for c in calls] == ["first", "second", "third"]
    assert so.apply_options_filters(SplitOptions(), "/in/big.csv").lines_per_file == 1000


def test_remove_filter():
    def halve(options, path):
        return {"lines_per_file": 1}

    so.add_options_filter(halve)
    so.remove_options_filter(halve)
    so.remove_options_filter(halve)
    assert so.apply_options_filters(SplitOptions(), "a.csv") == SplitOptions()
