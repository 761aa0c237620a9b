#!/usr/bin/env python3
# scripts/split_options.py
# split_csv 的选项：默认值、合并、校验、环境变量覆盖与过滤器。

import os
import logging
from dataclasses import dataclass, fields, replace

# ==============================
# 配置
# ==============================
DEFAULT_DELETE_SOURCE = False
DEFAULT_LINES_PER_FILE = 5
DEFAULT_PAD_WITH = "0"

ENV_LINES_PER_FILE = "SPLIT_CSV_LINES_PER_FILE"
ENV_PAD_WITH = "SPLIT_CSV_PAD_WITH"
ENV_DELETE_SOURCE = "SPLIT_CSV_DELETE_SOURCE"

TRUTHY = ("1", "true", "yes", "on")

# camelCase spellings accepted from callers
ALIASES = {
    "deleteSourceAfterSplit": "delete_source_after_split",
    "linesPerFile": "lines_per_file",
    "padFilenameWith": "pad_filename_with",
}

log = logging.getLogger("split_csv")


@dataclass(frozen=True)
class SplitOptions:
    delete_source_after_split: bool = DEFAULT_DELETE_SOURCE
    lines_per_file: int = DEFAULT_LINES_PER_FILE
    pad_filename_with: str = DEFAULT_PAD_WITH


OPTION_NAMES = tuple(f.name for f in fields(SplitOptions))


def parse_options(args=None, defaults=None) -> SplitOptions:
    """
    Merge ``args`` over ``defaults`` (a SplitOptions, default: built-in defaults).

    ``args`` may be None, a SplitOptions or a mapping. Unknown keys are ignored.
    """
    base = defaults if defaults is not None else SplitOptions()
    if args is None:
        return base
    if isinstance(args, SplitOptions):
        return args

    picked = {}
    for key, value in dict(args).items():
        name = ALIASES.get(key, key)
        if name in OPTION_NAMES:
            picked[name] = value
        else:
            log.debug(f"Ignoring unknown option: {key}")
    return replace(base, **picked)


def validate_options(options: SplitOptions) -> SplitOptions:
    lines = options.lines_per_file
    # bool is an int subclass, True would silently mean 1
    if isinstance(lines, bool) or not isinstance(lines, int) or lines < 1:
        raise ValueError(f"lines_per_file must be a positive integer, got {lines!r}")
    pad = options.pad_filename_with
    if not isinstance(pad, str) or len(pad) != 1:
        raise ValueError(f"pad_filename_with must be a single character, got {pad!r}")
    # the pad ends up in the chunk file name
    if pad in (os.sep, os.altsep):
        raise ValueError(f"pad_filename_with must not be a path separator, got {pad!r}")
    return options


def options_from_env(environ=None) -> SplitOptions:
    """Build options from SPLIT_CSV_* environment variables over the defaults."""
    env = os.environ if environ is None else environ
    picked = {}

    lines = env.get(ENV_LINES_PER_FILE)
    if lines:
        try:
            picked["lines_per_file"] = int(lines)
        except ValueError:
            raise ValueError(f"{ENV_LINES_PER_FILE} is not an integer: {lines!r}") from None

    pad = env.get(ENV_PAD_WITH)
    if pad:
        picked["pad_filename_with"] = pad

    delete = env.get(ENV_DELETE_SOURCE)
    if delete is not None:
        picked["delete_source_after_split"] = delete.strip().lower() in TRUTHY

    return parse_options(picked)


# ==============================
# 过滤器
# ==============================
_filters = []


def add_options_filter(func):
    """Register ``func(options, source_path)``; it returns replacement options or None."""
    _filters.append(func)
    return func


def remove_options_filter(func):
    if func in _filters:
        _filters.remove(func)


def clear_options_filters():
    _filters.clear()


def apply_options_filters(options: SplitOptions, source_path: str) -> SplitOptions:
    for func in list(_filters):
        result = func(options, source_path)
        if result is None:
            continue
        options = parse_options(result, defaults=options)
    return options
