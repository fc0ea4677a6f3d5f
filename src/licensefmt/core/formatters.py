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

import io
import logging
import os
import tokenize
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import black
import isort
from isort.exceptions import FileSkipped, ISortError

from licensefmt.core.config import Settings
from licensefmt.core.errors import FormatError
from licensefmt.core.header import Header, license_header

logger = logging.getLogger(__name__)

# (target path, source) -> formatted source
Formatter = Callable[[str, bytes], bytes]

MAX_ERROR_LINES = 10


@dataclass(frozen=True)
class FormatOptions:
    line_length: int = 88
    all_errors: bool = False
    local: Optional[str] = None

    @property
    def known_first_party(self) -> List[str]:
        if not self.local:
            return []
        return [p.strip() for p in self.local.split(",") if p.strip()]


def apply_formatters(formatters: Sequence[Formatter], target: str, src: bytes) -> bytes:
    """
    Run each stage on the output of the previous one.
    The first failing stage aborts the chain; nothing is written to disk.
    """
    contents = src
    for formatter in formatters:
        contents = formatter(target, contents)
    return contents


def _error_message(message: str, all_errors: bool) -> str:
    lines = message.splitlines()
    if all_errors or len(lines) <= MAX_ERROR_LINES:
        return message
    hidden = len(lines) - MAX_ERROR_LINES
    return "\n".join(lines[:MAX_ERROR_LINES] + [f"({hidden} more lines, use -e to see all)"])


def _settings_dir(target: str) -> str:
    """Nearest existing directory of the target, used for isort project discovery."""
    directory = os.path.dirname(os.path.abspath(target))
    while not os.path.isdir(directory):
        parent = os.path.dirname(directory)
        if parent == directory:
            break
        directory = parent
    return directory


def _decode(src: bytes) -> Tuple[str, str, str]:
    """Decode like black does: honour encoding cookies, remember CRLF endings."""
    buf = io.BytesIO(src)
    encoding, lines = tokenize.detect_encoding(buf.readline)
    if not lines:
        return "", encoding, "\n"
    newline = "\r\n" if lines[0][-2:] == b"\r\n" else "\n"
    buf.seek(0)
    with io.TextIOWrapper(buf, encoding) as wrapper:
        return wrapper.read(), encoding, newline


def _sort_imports(target: str, text: str, options: FormatOptions) -> str:
    overrides = {"profile": "black", "line_length": options.line_length}
    if options.known_first_party:
        overrides["known_first_party"] = frozenset(options.known_first_party)
    config = isort.Config(settings_path=_settings_dir(target), **overrides)
    extension = "pyi" if target.endswith(".pyi") else "py"
    try:
        return isort.code(text, extension=extension, config=config)
    except FileSkipped:
        logger.debug(f"isort skipped {target}")
        return text
    except ISortError as e:
        raise FormatError(_error_message(str(e), options.all_errors), path=target) from e


def _layout(target: str, text: str, options: FormatOptions) -> str:
    mode = black.Mode(line_length=options.line_length, is_pyi=target.endswith(".pyi"))
    try:
        # fast=False runs black's equivalence and stability checks
        return black.format_file_contents(text, fast=not options.all_errors, mode=mode)
    except black.NothingChanged:
        return text
    except black.InvalidInput as e:
        raise FormatError(_error_message(f"cannot parse: {e}", options.all_errors), path=target) from e
    except Exception as e:
        raise FormatError(_error_message(f"cannot format: {e}", options.all_errors), path=target) from e


def format_source(options: FormatOptions) -> Formatter:
    """Reformat stage: isort for import order, then black for layout."""

    def apply(target: str, src: bytes) -> bytes:
        try:
            text, encoding, newline = _decode(src)
        except (UnicodeDecodeError, SyntaxError, LookupError) as e:
            raise FormatError(f"cannot decode source: {e}", path=target) from e

        text = _sort_imports(target, text, options)
        text = _layout(target, text, options)

        if newline != "\n":
            text = text.replace("\n", newline)
        return text.encode(encoding)

    return apply


def build_formatters(header: Optional[Header], settings: Settings) -> List[Formatter]:
    """The chain is fixed: header injection runs before reformatting."""
    formatters: List[Formatter] = []
    if header is not None:
        formatters.append(license_header(header))
    formatters.append(
        format_source(
            FormatOptions(
                line_length=settings.line_length,
                all_errors=settings.all_errors,
                local=settings.local,
            )
        )
    )
    return formatters
