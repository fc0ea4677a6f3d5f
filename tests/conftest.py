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
Pytest configuration and fixtures for licensefmt tests.
"""
import logging

import pytest

from licensefmt.core.config import Settings
from licensefmt.core.header import Header


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the developer's environment and project files out of the tests."""
    monkeypatch.delenv("LICENSEFMT_ROOT", raising=False)
    monkeypatch.delenv("LICENSEFMT_CONFIG", raising=False)
    (tmp_path / ".git").mkdir()
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI runs install handlers bound to the runner's streams; drop them afterwards."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
    for handler in before:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("licensefmt").setLevel(logging.NOTSET)


@pytest.fixture
def header():
    """Fixture providing the two line header used across tests."""
    return Header.from_lines(["// H1", "// H2"])


@pytest.fixture
def py_header():
    """Fixture providing a header as read from a file with a trailing newline."""
    return Header.from_text("# License header line 1\n# License header line 2\n")


@pytest.fixture
def settings(tmp_path):
    """Settings bounded to the temporary directory."""
    return Settings(search_root=str(tmp_path))


@pytest.fixture
def tree(tmp_path):
    """
    Fixture building a directory tree:

        pkg/.license_header
        pkg/x-pack/.xpack_license_header
        pkg/x-pack/sub/file.py
        pkg/plain/mod.py
    """
    pkg = tmp_path / "pkg"
    sub = pkg / "x-pack" / "sub"
    sub.mkdir(parents=True)
    (pkg / "plain").mkdir()

    (pkg / ".license_header").write_text("# Default license\n")
    (pkg / "x-pack" / ".xpack_license_header").write_text("# X-Pack license\n")
    (sub / "file.py").write_text("x = 1\n")
    (pkg / "plain" / "mod.py").write_text("y = 2\n")

    return {"root": tmp_path, "pkg": pkg, "xpack": pkg / "x-pack", "sub": sub}
