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

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)


def is_source_file(path: Path, extensions: Iterable[str]) -> bool:
    """Regular, non-hidden file with one of the given extensions."""
    return (
        path.is_file()
        and not path.name.startswith(".")
        and path.suffix in tuple(extensions)
    )


def iter_source_files(
    root: Path,
    extensions: Iterable[str],
    exclude_dirs: Iterable[str] = (),
    on_error: Optional[Callable[[OSError], None]] = None,
) -> Iterator[Path]:
    """
    Yield candidate files below ``root`` in lexical order.
    Excluded directory names are pruned from the walk.
    """
    extensions = tuple(extensions)
    excluded = set(exclude_dirs)

    def _onerror(e: OSError) -> None:
        logger.error(f"{e.filename}: {e.strerror}")
        if on_error:
            on_error(e)

    for current, dirs, files in os.walk(root, onerror=_onerror):
        # We modify dirs in-place to prune the walk
        dirs[:] = sorted(d for d in dirs if d not in excluded)
        for name in sorted(files):
            path = Path(current) / name
            if is_source_file(path, extensions):
                yield path
