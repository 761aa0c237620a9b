#!/usr/bin/env python3
# scripts/split_csv.py
# 用法: python scripts/split_csv.py data.csv --lines-per-file 1000
# 将 CSV 按行数拆分为带编号的分片文件，每个分片都以源文件表头行开头。
# 按行拆分：跨行的带引号字段不会被保留在同一分片中。

import os
import sys
import logging
import argparse
import mimetypes

import chardet
from tqdm import tqdm

from split_options import (
    parse_options,
    validate_options,
    options_from_env,
    apply_options_filters,
)
from tempnam import TempNamer

# ==============================
# 配置
# ==============================
SEQUENCE_WIDTH = 6
DETECT_SAMPLE_BYTES = 64 * 1024
MIN_CONFIDENCE = 0.5
FALLBACK_ENCODING = "utf-8"
CSV_MIME_TYPE = "text/csv"
LOG_FILE = "split_csv.log"

log = logging.getLogger("split_csv")


# ==============================
# 异常
# ==============================
class SplitError(Exception):
    kind = "split-error"

    def __init__(self, message, path=None, kind=None):
        super().__init__(message)
        self.message = message
        self.path = path
        if kind is not None:
            self.kind = kind


class SourceUnreadable(SplitError):
    kind = "file-not-exists"


class TargetUnwritable(SplitError):
    kind = "file-write-error"


# ==============================
# 工具函数
# ==============================
def detect_encoding(path, sample_size=DETECT_SAMPLE_BYTES):
    """Guess the text encoding from the head of the file, UTF-8 when unsure."""
    with open(path, "rb") as f:
        raw = f.read(sample_size)
    if not raw:
        return FALLBACK_ENCODING
    result = chardet.detect(raw)
    enc = result.get("encoding")
    if not enc or (result.get("confidence") or 0) < MIN_CONFIDENCE:
        return FALLBACK_ENCODING
    # plain ASCII heads are usually UTF-8 bodies
    if enc.lower() == "ascii":
        return FALLBACK_ENCODING
    return enc


def chunk_name(basename: str, ext: str, file_number: int, pad: str) -> str:
    seq = str(file_number).rjust(SEQUENCE_WIDTH, pad)
    if ext:
        return f"{basename}_{seq}.{ext}"
    return f"{basename}_{seq}"


def _open_chunk(namer, desired, header, encoding):
    try:
        target_path = os.path.abspath(namer(desired))
    except OSError as e:
        raise TargetUnwritable(f"Unable to open/write to file {desired}, {e}", path=desired) from e

    try:
        target = open(target_path, "w", encoding=encoding, newline="")
    except OSError as e:
        # drop the empty file the namer may have reserved
        try:
            os.remove(target_path)
        except OSError:
            pass
        raise TargetUnwritable(f"Unable to open/write to file {target_path}, {e}", path=target_path) from e

    try:
        target.write(header)
    except (OSError, UnicodeError) as e:
        target.close()
        raise TargetUnwritable(f"Unable to open/write to file {target_path}, {e}", path=target_path) from e

    log.info(f"Opened chunk: {target_path}")
    return target_path, target


def _write_line(target, target_path, line):
    try:
        target.write(line)
    except (OSError, UnicodeError) as e:
        raise TargetUnwritable(f"Unable to open/write to file {target_path}, {e}", path=target_path) from e


def _close_chunk(target, target_path):
    try:
        target.close()
    except OSError as e:
        raise TargetUnwritable(f"Unable to open/write to file {target_path}, {e}", path=target_path) from e


# ==============================
# 拆分
# ==============================
def split_csv(source_path, args=None, tempnam=None, progress=False, encoding=None):
    """
    Split ``source_path`` into chunk files of at most ``lines_per_file`` data lines.

    ``args`` is a mapping or SplitOptions merged over the defaults, then passed
    through the registered options filters. ``tempnam`` turns a desired chunk
    name into a unique path (default: a TempNamer on a fresh temp dir).

    Returns the chunk paths in sequence order. Raises SourceUnreadable or
    TargetUnwritable; chunks finished before a failure stay on disk.
    """
    options = parse_options(args)
    options = apply_options_filters(options, source_path)
    validate_options(options)

    if not os.path.exists(source_path):
        raise SourceUnreadable(f"File {source_path} does not exist", path=source_path)

    namer = tempnam if tempnam is not None else TempNamer()
    name = os.path.basename(source_path)
    basename, ext = os.path.splitext(name)
    ext = ext[1:]

    try:
        enc = encoding or detect_encoding(source_path)
        # lines end at "\n" only; a bare "\r" stays inside its line
        src = open(source_path, "r", encoding=enc, newline="\n")
    except (OSError, LookupError) as e:
        raise SourceUnreadable(
            f"Unable to open file {source_path}, {e}", path=source_path, kind="file-read-error"
        ) from e

    results = []
    target = None
    target_path = None
    try:
        with src:
            lines = iter(src)
            header = next(lines, None)
            if header is None:
                log.info(f"Empty file, nothing to split: {source_path}")
                return []

            file_number = 0
            written = 0
            for line in tqdm(lines, desc=name, unit="line", disable=not progress):
                if target is None:
                    desired = chunk_name(basename, ext, file_number, options.pad_filename_with)
                    target_path, target = _open_chunk(namer, desired, header, enc)
                    results.append(target_path)

                _write_line(target, target_path, line)
                written += 1

                if written >= options.lines_per_file:
                    chunk, target = target, None
                    _close_chunk(chunk, target_path)
                    file_number += 1
                    written = 0

            # last chunk may be short
            if target is not None:
                chunk, target = target, None
                _close_chunk(chunk, target_path)
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnreadable(
            f"Unable to read file {source_path}, {e}", path=source_path, kind="file-read-error"
        ) from e
    finally:
        if target is not None:
            target.close()

    log.info(f"Split {source_path} into {len(results)} file(s)")

    if options.delete_source_after_split and results:
        try:
            os.remove(source_path)
            log.info(f"Deleted source: {source_path}")
        except OSError as e:
            log.warning(f"Failed to delete source {source_path}: {e}")

    return results


def split_added_csv(path, mime_type=None, tempnam=None):
    """Split a newly added file when it is a CSV; other types return None."""
    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(path)
    if mime_type != CSV_MIME_TYPE:
        log.debug(f"Skipping {path}: type {mime_type}")
        return None
    return split_csv(path, tempnam=tempnam)


# ==============================
# 主程序
# ==============================
def setup_logging(log_file=LOG_FILE):
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def build_parser(defaults):
    p = argparse.ArgumentParser(description="Split CSV files into chunks that keep the header line")
    p.add_argument("files", nargs="+", help="CSV files to split")
    p.add_argument("--lines-per-file", "-n", type=int, default=defaults.lines_per_file,
                   help="Data lines per chunk, header excluded")
    p.add_argument("--pad-with", default=defaults.pad_filename_with,
                   help="Pad character for the 6-digit chunk number")
    p.add_argument("--delete-source", action=argparse.BooleanOptionalAction, default=defaults.delete_source_after_split,
                   help="Delete each source after a successful split (--no-delete-source keeps it)")
    p.add_argument("--out-dir", "-o", default=None, help="Chunk directory (default: new temp dir)")
    p.add_argument("--encoding", default=None, help="Source encoding (default: detect)")
    p.add_argument("--only-csv", action="store_true", help="Skip files whose type is not text/csv")
    p.add_argument("--progress", action="store_true", help="Show a progress bar per file")
    p.add_argument("--log-file", default=LOG_FILE, help="Log file path, empty to disable")
    return p


def main(argv=None) -> int:
    try:
        defaults = options_from_env()
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    options = parse_options({
        "lines_per_file": args.lines_per_file,
        "pad_filename_with": args.pad_with,
        "delete_source_after_split": args.delete_source,
    })
    try:
        validate_options(options)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(args.log_file)
    namer = TempNamer(args.out_dir)

    failed = 0
    for path in args.files:
        if args.only_csv and mimetypes.guess_type(path)[0] != CSV_MIME_TYPE:
            logging.info(f"Skipped (not {CSV_MIME_TYPE}): {path}")
            continue
        try:
            results = split_csv(path, options, tempnam=namer, progress=args.progress, encoding=args.encoding)
        except SplitError as e:
            logging.error(f"[{e.kind}] {e}")
            failed += 1
            continue
        except ValueError as e:
            logging.error(f"Invalid options for {path}: {e}")
            return 2
        for r in results:
            print(r)

    logging.info(f"Done. Files: {len(args.files)}. Failed: {failed}.")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
