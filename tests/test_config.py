"""
CliConfig tests.
"""
from __future__ import annotations

import pytest

from platformcli import config as config_module
from platformcli.config import CliConfig, ConfigurationError


class TestDefaults:

    def test_local_defaults(self, config):
        assert config.get("local.web_root") == "_www"
        assert config.get("local.shared_dir") == "shared"
        assert config.get("local.build_dir") == ".platform/local/builds"
        assert config.get("local.copy_on_windows") is False

    def test_missing_key(self, config):
        assert config.get("local.nope") is None
        assert config.get("local.nope", "x") == "x"
        assert config.get("local.web_root.deeper") is None
        assert config.has("service.name")
        assert not config.has("service.url")

    def test_no_file_found(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [tmp_path / "absent.yaml"])
        cfg = CliConfig(env={})
        assert cfg.config_path is None
        assert cfg.get("application.executable") == "platformcli"


class TestFile:

    def test_deep_merge(self, make_config):
        cfg = make_config("local:\n  web_root: www\nservice:\n  name: Acme\n")
        assert cfg.get("local.web_root") == "www"
        assert cfg.get("local.shared_dir") == "shared"
        assert cfg.get("service.name") == "Acme"

    def test_empty_file(self, make_config):
        assert make_config("").get("local.web_root") == "_www"

    def test_explicit_path_missing(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            CliConfig(tmp_path / "nope.yaml", env={})

    def test_not_a_mapping(self, make_config):
        with pytest.raises(ConfigurationError, match="mapping"):
            make_config("- a\n- b\n")

    def test_search_path(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("api:\n  timeout: 5\n")
        monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [path])
        cfg = CliConfig(env={})
        assert cfg.config_path == path
        assert cfg.get("api.timeout") == 5


class TestEnvOverrides:

    def test_overrides(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("local:\n  web_root: from_file\n")
        cfg = CliConfig(path, env={
            "PLATFORMCLI_WEB_ROOT": "from_env",
            "PLATFORMCLI_TOKEN": "abc",
            "PLATFORMCLI_COPY_ON_WINDOWS": "yes",
        })
        assert cfg.get("local.web_root") == "from_env"
        assert cfg.get("api.token") == "abc"
        assert cfg.get("local.copy_on_windows") is True

    def test_false_boolean(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("local:\n  copy_on_windows: true\n")
        cfg = CliConfig(path, env={"PLATFORMCLI_COPY_ON_WINDOWS": "0"})
        assert cfg.get("local.copy_on_windows") is False

    def test_to_dict_is_a_copy(self, config):
        data = config.to_dict()
        data["local"]["web_root"] = "changed"
        assert config.get("local.web_root") == "_www"
