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

from dataclasses import FrozenInstanceError

import pytest

from licensefmt.core.config import (
    OutputMode,
    Settings,
    find_config_file,
    load_project_config,
    load_settings,
)
from licensefmt.core.errors import ConfigError


def test_defaults():
    settings = Settings()
    assert settings.header_file_name == ".license_header"
    assert settings.alternate_header_file_name == ".xpack_license_header"
    assert settings.sentinel_dir_name == "x-pack"
    assert settings.extensions == (".py",)
    assert settings.search_root == "."
    assert settings.effective_mode is OutputMode.STREAM
    assert settings.streams_output


def test_settings_are_immutable():
    with pytest.raises(FrozenInstanceError):
        Settings().overwrite = True


@pytest.mark.parametrize(
    "flags, mode",
    [
        ({"list_files": True, "overwrite": True, "diff": True}, OutputMode.LIST),
        ({"overwrite": True, "diff": True}, OutputMode.OVERWRITE),
        ({"diff": True}, OutputMode.DIFF),
        ({}, OutputMode.STREAM),
    ],
)
def test_effective_mode_priority(flags, mode):
    settings = Settings(**flags)
    assert settings.effective_mode is mode
    assert settings.streams_output is (mode is OutputMode.STREAM)


def test_find_config_file_walks_up(tmp_path):
    config = tmp_path / ".licensefmt.yaml"
    config.write_text("line_length: 100\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_config_file(nested) == config


def test_find_config_file_stops_at_git_root(tmp_path):
    project = tmp_path / "project"
    (project / ".git").mkdir(parents=True)
    (tmp_path / ".licensefmt.yaml").write_text("line_length: 100\n")
    assert find_config_file(project) is None


def test_load_project_config(tmp_path):
    path = tmp_path / ".licensefmt.yaml"
    path.write_text(
        "header-file-name: LICENSE_HEADER\n"
        "extensions: [py, .pyi]\n"
        "exclude_dirs: [vendor]\n"
        "line_length: '100'\n"
        "local: [acme, tools]\n"
        "unknown_key: 1\n"
    )
    values = load_project_config(path)
    assert values == {
        "header_file_name": "LICENSE_HEADER",
        "extensions": (".py", ".pyi"),
        "exclude_dirs": ("vendor",),
        "line_length": 100,
        "local": "acme,tools",
    }


def test_load_project_config_empty_file(tmp_path):
    path = tmp_path / ".licensefmt.yaml"
    path.write_text("")
    assert load_project_config(path) == {}


@pytest.mark.parametrize(
    "content",
    ["- just\n- a list\n", "key: [unclosed\n", "line_length: wide\n"],
)
def test_load_project_config_invalid(tmp_path, content):
    path = tmp_path / ".licensefmt.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError) as exc:
        load_project_config(path)
    assert exc.value.path == str(path)


def test_load_settings_precedence(tmp_path, monkeypatch):
    (tmp_path / ".licensefmt.yaml").write_text("line_length: 100\nlocal: acme\n")
    monkeypatch.setenv("LICENSEFMT_ROOT", "/srv/workspace")

    settings = load_settings(local="override", overwrite=True, srcdir=None)

    assert settings.line_length == 100
    assert settings.local == "override"
    assert settings.search_root == "/srv/workspace"
    assert settings.overwrite is True
    assert settings.srcdir is None


def test_load_settings_explicit_config(tmp_path, monkeypatch):
    other = tmp_path / "custom.yaml"
    other.write_text("sentinel_dir_name: enterprise\n")
    (tmp_path / ".licensefmt.yaml").write_text("sentinel_dir_name: ignored\n")

    assert load_settings(config_file=str(other)).sentinel_dir_name == "enterprise"

    monkeypatch.setenv("LICENSEFMT_CONFIG", str(other))
    assert load_settings().sentinel_dir_name == "enterprise"


def test_load_settings_missing_explicit_config(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_settings(config_file=str(tmp_path / "missing.yaml"))


def test_load_settings_without_project_file():
    assert load_settings() == Settings()
