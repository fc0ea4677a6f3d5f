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
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from licensefmt.core.errors import ConfigError

load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".licensefmt.yaml"
ROOT_ENV = "LICENSEFMT_ROOT"
CONFIG_ENV = "LICENSEFMT_CONFIG"

LICENSE_FILE_NAME = ".license_header"
XPACK_LICENSE_FILE_NAME = ".xpack_license_header"
XPACK_DIR_NAME = "x-pack"

DEFAULT_EXCLUDE_DIRS = (
    ".git",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    "build",
    "dist",
)

# Keys a project file may set. Output flags stay CLI-only.
PROJECT_KEYS = (
    "header_file_name",
    "alternate_header_file_name",
    "sentinel_dir_name",
    "extensions",
    "exclude_dirs",
    "line_length",
    "local",
    "diff_command",
)


class OutputMode(str, Enum):
    STREAM = "stream"
    LIST = "list"
    OVERWRITE = "overwrite"
    DIFF = "diff"


@dataclass(frozen=True)
class Settings:
    """Immutable configuration snapshot for one invocation."""

    license: Optional[str] = None
    license_search_cwd: bool = False
    srcdir: Optional[str] = None
    list_files: bool = False
    diff: bool = False
    overwrite: bool = False
    all_errors: bool = False
    local: Optional[str] = None
    search_root: str = "."
    header_file_name: str = LICENSE_FILE_NAME
    alternate_header_file_name: str = XPACK_LICENSE_FILE_NAME
    sentinel_dir_name: str = XPACK_DIR_NAME
    extensions: Tuple[str, ...] = (".py",)
    exclude_dirs: Tuple[str, ...] = DEFAULT_EXCLUDE_DIRS
    line_length: int = 88
    diff_command: str = "diff"
    builtin_diff: bool = False

    @property
    def effective_mode(self) -> OutputMode:
        """
        The highest priority output mode requested.

        Informational only: the dispatcher gates list, overwrite and diff
        independently, so several of them may act on the same file.
        """
        if self.list_files:
            return OutputMode.LIST
        if self.overwrite:
            return OutputMode.OVERWRITE
        if self.diff:
            return OutputMode.DIFF
        return OutputMode.STREAM

    @property
    def streams_output(self) -> bool:
        return not (self.list_files or self.overwrite or self.diff)


def find_config_file(start: Path) -> Optional[Path]:
    """
    Look for a project file walking up from ``start``.
    The walk stops at the first directory holding a ``.git`` entry.
    """
    start = start.resolve()
    for parent in [start] + list(start.parents):
        candidate = parent / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        if (parent / ".git").exists():
            break
    return None


def _normalize_extensions(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    return tuple(ext if ext.startswith(".") else f".{ext}" for ext in value)


def load_project_config(path: Path) -> Dict[str, Any]:
    """Load and validate a ``.licensefmt.yaml`` file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config file: {e}", path=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in config file: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigError("config file must contain a mapping", path=str(path))

    values: Dict[str, Any] = {}
    for key, value in data.items():
        key = str(key).replace("-", "_")
        if key not in PROJECT_KEYS:
            logger.warning(f"Ignoring unknown config key '{key}' in {path}")
            continue
        values[key] = value

    if "extensions" in values:
        values["extensions"] = _normalize_extensions(values["extensions"])
    if "exclude_dirs" in values:
        values["exclude_dirs"] = tuple(values["exclude_dirs"])
    if "line_length" in values:
        try:
            values["line_length"] = int(values["line_length"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"line_length must be an integer: {e}", path=str(path)) from e
    if isinstance(values.get("local"), list):
        values["local"] = ",".join(values["local"])

    logger.debug(f"Loaded project config from {path}: {sorted(values)}")
    return values


def load_settings(config_file: Optional[str] = None, **overrides: Any) -> Settings:
    """
    Merge defaults, the project file, the environment and CLI overrides.
    Priority (lowest first):
    1. Settings defaults
    2. Project file (--config, LICENSEFMT_CONFIG, or upward discovery)
    3. LICENSEFMT_ROOT environment variable
    4. CLI overrides that are not None
    """
    values: Dict[str, Any] = {}

    explicit = config_file or os.getenv(CONFIG_ENV)
    if explicit:
        path = Path(explicit)
        if not path.is_file():
            raise ConfigError("config file not found", path=explicit)
    else:
        path = find_config_file(Path.cwd())

    if path:
        values.update(load_project_config(path))

    root = os.getenv(ROOT_ENV)
    if root:
        values["search_root"] = root

    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
