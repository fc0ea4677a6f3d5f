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
License header discovery and injection.

Headers are looked up by walking from the target file towards the search
root. A directory named like the sentinel subtree (``x-pack`` by default)
switches the expected header file name for the rest of the walk, which lets a
subtree carry a different license than its parent.
"""

import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from licensefmt.core.config import Settings
from licensefmt.core.errors import HeaderResolutionError

logger = logging.getLogger(__name__)


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


@dataclass(frozen=True)
class Header:
    """Ordered license banner lines."""

    lines: Tuple[str, ...]

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "Header":
        return cls(tuple(_strip_cr(line) for line in lines))

    @classmethod
    def from_text(cls, text: str) -> "Header":
        # Split on newlines only, a trailing newline leaves an empty last line
        # that ends up as a blank separator after the banner.
        return cls.from_lines(text.split("\n"))

    @property
    def blob(self) -> bytes:
        return "".join(f"{line}\n" for line in self.lines).encode("utf-8")

    def __len__(self) -> int:
        return len(self.lines)


def read_header(path: str) -> Header:
    """Read a header file in full."""
    try:
        with open(path, "rb") as f:
            contents = f.read()
        return Header.from_text(contents.decode("utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise HeaderResolutionError(f"cannot read license header: {e}", path=str(path)) from e


def locate_header(target: str, settings: Settings) -> Optional[Path]:
    """
    Find the header file that applies to ``target``.

    Only paths and the directory tree are inspected, never file contents.
    Returns None when no header file exists between the search start and the
    search root (both inclusive).
    """
    try:
        root = os.path.abspath(settings.search_root or ".")
        if settings.license_search_cwd:
            directory = os.path.abspath(".")
        else:
            directory = os.path.dirname(os.path.abspath(target))
    except OSError as e:
        raise HeaderResolutionError(f"cannot resolve search path: {e}", path=target) from e

    file_name = settings.header_file_name
    while True:
        if os.path.basename(directory) == settings.sentinel_dir_name:
            file_name = settings.alternate_header_file_name

        candidate = os.path.join(directory, file_name)
        if os.path.isfile(candidate):
            logger.debug(f"Using license header {candidate} for {target}")
            return Path(candidate)

        parent = os.path.dirname(directory)
        if directory == root or parent == directory:
            logger.debug(f"No license header found for {target} (stopped at {directory})")
            return None
        directory = parent


def resolve_header(
    target: str,
    settings: Settings,
    loader: Callable[[str], Header] = read_header,
) -> Optional[Header]:
    """An explicitly configured header always wins over the directory search."""
    if settings.license:
        return loader(settings.license)

    path = locate_header(target, settings)
    if path is None:
        return None
    return loader(str(path))


def _leading_lines(data: bytes, count: int) -> List[bytes]:
    lines: List[bytes] = []
    for raw in io.BytesIO(data):
        if len(lines) == count:
            break
        line = raw[:-1] if raw.endswith(b"\n") else raw
        if line.endswith(b"\r"):
            line = line[:-1]
        lines.append(line)
    return lines


def contains_header(data: bytes, header: Header) -> bool:
    """True when the first lines of ``data`` equal the header, line for line."""
    expected = [line.encode("utf-8") for line in header.lines]
    return _leading_lines(data, len(expected)) == expected


def inject_header(header: Header, data: bytes) -> bytes:
    """Prepend the header at offset 0 unless the document already starts with it."""
    if contains_header(data, header):
        return data
    return header.blob + data


def license_header(header: Header) -> Callable[[str, bytes], bytes]:
    """Pipeline stage adding ``header`` to documents that lack it."""

    def apply(target: str, src: bytes) -> bytes:
        return inject_header(header, src)

    return apply
