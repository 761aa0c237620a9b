#!/usr/bin/env python3
# scripts/tempnam.py
# 为拆分出的分片文件分配唯一且尚未使用的路径。

import os
import tempfile

TEMP_PREFIX = "split_csv_"


class TempNamer:
    """
    Callable: ``namer("data_000000.csv")`` -> absolute path that did not exist.

    Without a directory a private one is created under the system temp dir on
    first use and reused afterwards. A taken name gets ``-1``, ``-2``, ...
    inserted before its extension. The returned path is reserved by creating
    it empty, so it stays unique until the caller overwrites it.
    """

    def __init__(self, directory=None):
        self.directory = os.path.abspath(directory) if directory else None

    def _dir(self):
        if self.directory is None:
            self.directory = tempfile.mkdtemp(prefix=TEMP_PREFIX)
        else:
            os.makedirs(self.directory, exist_ok=True)
        return self.directory

    def __call__(self, desired_name: str) -> str:
        directory = self._dir()
        name = os.path.basename(desired_name)
        stem, ext = os.path.splitext(name)

        n = 0
        while True:
            candidate = name if n == 0 else f"{stem}-{n}{ext}"
            path = os.path.join(directory, candidate)
            try:
                # "x" fails if something already sits there
                with open(path, "x"):
                    pass
                return path
            except FileExistsError:
                n += 1
