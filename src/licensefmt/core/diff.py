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

import difflib
import io
import logging
import os
import shutil
import subprocess
import tempfile
from typing import List

from opentelemetry import trace

from licensefmt.core.config import Settings
from licensefmt.core.errors import DiffError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

TMP_PREFIX = "licensefmt"
NO_NEWLINE_MARKER = "\\ No newline at end of file\n"


def write_tmp_file(content: bytes) -> str:
    """Write ``content`` to a new temporary file and return its path."""
    f = tempfile.NamedTemporaryFile(prefix=TMP_PREFIX, delete=False)
    try:
        with f:
            f.write(content)
    except OSError:
        os.remove(f.name)
        raise
    return f.name


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def diff(old: bytes, new: bytes, command: str = "diff") -> bytes:
    """
    Unified diff of two buffers using an external diff tool.

    Both buffers are materialized as temporary files that are removed on every
    exit path. Any output counts as success: diff exits 1 when the inputs
    differ, so only a failing run that printed nothing is an error.
    """
    paths: List[str] = []
    try:
        try:
            paths.append(write_tmp_file(old))
            paths.append(write_tmp_file(new))
        except OSError as e:
            raise DiffError(f"cannot create temporary file: {e}") from e

        try:
            result = subprocess.run(
                [command, "-u", paths[0], paths[1]],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            raise DiffError(f"cannot run {command}: {e}") from e

        if result.stdout:
            return result.stdout
        if result.returncode != 0:
            raise DiffError(f"{command} exited with status {result.returncode}")
        return b""
    finally:
        for path in paths:
            _remove_quietly(path)


def _split_lines(data: bytes) -> List[str]:
    # Only b"\n" ends a line; surrogateescape keeps arbitrary bytes intact.
    return [line.decode("utf-8", "surrogateescape") for line in io.BytesIO(data)]


def builtin_diff(old: bytes, new: bytes, old_label: str = "old", new_label: str = "new") -> bytes:
    """In-process unified diff that applies as a patch, byte for byte."""
    out = []
    for line in difflib.unified_diff(_split_lines(old), _split_lines(new), old_label, new_label):
        out.append(line)
        if not line.endswith("\n"):
            out.append("\n" + NO_NEWLINE_MARKER)
    return "".join(out).encode("utf-8", "surrogateescape")


def compute_diff(
    old: bytes,
    new: bytes,
    settings: Settings,
    old_label: str = "old",
    new_label: str = "new",
) -> bytes:
    """Pick the diff engine for this run and produce a unified diff."""
    with tracer.start_as_current_span("diff.compute") as span:
        use_builtin = settings.builtin_diff or shutil.which(settings.diff_command) is None
        span.set_attribute("builtin", use_builtin)
        if use_builtin:
            if not settings.builtin_diff:
                logger.debug(f"{settings.diff_command} not found on PATH, using builtin diff")
            return builtin_diff(old, new, old_label, new_label)
        return diff(old, new, settings.diff_command)
