# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Per-file orchestration: header resolution, the formatter chain, change
detection and the output actions (list, overwrite, diff, stream).
"""

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Iterable, Optional

from opentelemetry import trace

from licensefmt.core.config import Settings
from licensefmt.core.diff import compute_diff
from licensefmt.core.errors import DiffError, LicenseFmtError
from licensefmt.core.formatters import apply_formatters, build_formatters
from licensefmt.core.header import Header, read_header, resolve_header
from licensefmt.core.walker import iter_source_files

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

STDIN_NAME = "<standard input>"
DIFF_LABEL_PREFIX = "licensefmt"


def resolve_target(filename: str, srcdir: Optional[str], extensions: Iterable[str] = (".py",)) -> str:
    """
    Path the formatter should believe it is working on.
    A srcdir naming a file (existing, or a source file name) replaces the
    target outright; a directory keeps the file's base name.
    """
    if not srcdir:
        return filename
    if os.path.isfile(srcdir) or (not os.path.isdir(srcdir) and srcdir.endswith(tuple(extensions))):
        return srcdir
    return os.path.join(srcdir, os.path.basename(filename))


def write_file_atomic(filename: str, data: bytes) -> None:
    """Replace ``filename`` in full, keeping its permission bits."""
    path = os.path.realpath(filename)
    fd, tmp_path = tempfile.mkstemp(prefix=".licensefmt-", dir=os.path.dirname(path))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if os.path.exists(path):
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except Exception:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def dispatch_output(filename: str, src: bytes, res: bytes, settings: Settings, out: BinaryIO) -> bool:
    """
    Perform the terminal actions for one document. Returns True when the
    pipeline changed the document.

    list, overwrite and diff are gated independently, so setting several of
    them runs each one for the same file.
    """
    if src == res:
        # already compliant, only pass-through mode echoes it
        if settings.streams_output:
            out.write(res)
        return False

    if settings.list_files:
        out.write(os.fsencode(filename) + b"\n")

    if settings.overwrite:
        write_file_atomic(filename, res)
        logger.info(f"Rewrote {filename}")

    if settings.diff:
        label = f"{DIFF_LABEL_PREFIX}/{filename}"
        try:
            data = compute_diff(src, res, settings, old_label=filename, new_label=label)
        except DiffError as e:
            raise DiffError(f"computing diff: {e}", path=filename) from e
        out.write(os.fsencode(f"diff {filename} {label}") + b"\n")
        out.write(data)

    if settings.streams_output:
        out.write(res)

    return True


def process_file(
    settings: Settings,
    filename: str,
    out: BinaryIO,
    in_stream: Optional[BinaryIO] = None,
    loader: Callable[[str], Header] = read_header,
) -> bool:
    """
    Run one document through header injection and reformatting, then
    dispatch the result. Errors propagate to the caller.
    """
    target = resolve_target(filename, settings.srcdir, settings.extensions)

    header = resolve_header(target, settings, loader)
    formatters = build_formatters(header, settings)

    if in_stream is None:
        with open(filename, "rb") as f:
            src = f.read()
    else:
        src = in_stream.read()

    res = apply_formatters(formatters, target, src)
    return dispatch_output(filename, src, res, settings, out)


class FileProcessor:
    """
    Processes a run of paths one at a time.

    Every per-file failure is logged and counted; the run always continues
    with the remaining files.
    """

    def __init__(self, settings: Settings, out: BinaryIO, stdin: BinaryIO):
        self.settings = settings
        self.out = out
        self.stdin = stdin
        self.processed = 0
        self.changed = 0
        self.failed = 0
        self._headers: Dict[str, Header] = {}

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def _load_header(self, path: str) -> Header:
        # Failed reads are not cached so every file reports its own error.
        key = os.path.abspath(path)
        if key not in self._headers:
            self._headers[key] = read_header(path)
        return self._headers[key]

    def _fail(self, filename: str, error: Exception) -> None:
        self.failed += 1
        if isinstance(error, OSError) and error.filename:
            logger.error(str(error))
        else:
            logger.error(f"{filename}: {error}")

    def process_path(self, filename: str, in_stream: Optional[BinaryIO] = None) -> bool:
        with tracer.start_as_current_span("licensefmt.process_file") as span:
            span.set_attribute("file", filename)
            logger.debug(f"Processing {filename}")
            try:
                changed = process_file(
                    self.settings,
                    filename,
                    in_stream=in_stream,
                    out=self.out,
                    loader=self._load_header,
                )
            except (LicenseFmtError, OSError) as e:
                span.set_attribute("status", "failed")
                span.record_exception(e)
                self._fail(filename, e)
                return False

            span.set_attribute("changed", changed)
            self.processed += 1
            if changed:
                self.changed += 1
            return True

    def process_tree(self, root: str) -> None:
        def _walk_error(e: OSError) -> None:
            self.failed += 1

        for path in iter_source_files(
            Path(root),
            self.settings.extensions,
            self.settings.exclude_dirs,
            on_error=_walk_error,
        ):
            self.process_path(str(path))

    def run(self, paths: Iterable[str]) -> int:
        """Process every path in order; no paths means stdin to the output sink."""
        paths = list(paths)
        if not paths:
            if self.settings.overwrite:
                # a document read from stdin has no source file to replace
                self._fail(STDIN_NAME, LicenseFmtError("cannot overwrite standard input"))
                return self.exit_code
            self.process_path(STDIN_NAME, in_stream=self.stdin)
            return self.exit_code

        for path in paths:
            try:
                mode = os.stat(path).st_mode
            except OSError as e:
                self._fail(path, e)
                continue

            if stat.S_ISDIR(mode):
                self.process_tree(path)
            else:
                self.process_path(path)

        return self.exit_code
