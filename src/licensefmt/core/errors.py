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

from typing import Optional


class LicenseFmtError(Exception):
    """Base class for per-file failures raised by the formatting pipeline."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class HeaderResolutionError(LicenseFmtError):
    """Raised when a license header cannot be read or located."""


class FormatError(LicenseFmtError):
    """Raised when the source reformatter rejects its input."""


class DiffError(LicenseFmtError):
    """Raised when a diff between two buffers cannot be computed."""


class ConfigError(LicenseFmtError):
    """Raised when the project configuration file is unreadable or malformed."""
