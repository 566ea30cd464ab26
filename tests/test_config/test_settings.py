"""Tests for settings and merge tool configuration."""

from pathlib import Path

import pytest

from prbot.config.settings import DEFAULT_MERGE_TOOLS, Settings, load_merge_tool_config


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("PRBOT_MAX_RESOLUTION_ROUNDS", raising=False)
        settings = Settings(_env_file=None)

        assert settings.max_resolution_rounds == 15
        assert settings.merge_poll_interval == 1.0
        assert settings.api_version == "7.1"
        assert settings.otel_enabled is False

    def test_environment_prefix(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PRBOT_MAX_RESOLUTION_ROUNDS", "7")
        monkeypatch.setenv("PRBOT_ACCOUNT_URL", "https://dev.azure.com/fabrikam")

        settings = Settings(_env_file=None)

        assert settings.max_resolution_rounds == 7
        assert settings.account_url == "https://dev.azure.com/fabrikam"

    def test_token_is_secret(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PRBOT_PERSONAL_ACCESS_TOKEN", "s3cr3t-token")

        settings = Settings(_env_file=None)

        assert settings.token == "s3cr3t-token"
        assert "s3cr3t-token" not in repr(settings)


class TestMergeToolConfig:
    """Tests for load_merge_tool_config."""

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        config = load_merge_tool_config(str(tmp_path / "missing.yaml"))

        assert config == DEFAULT_MERGE_TOOLS
        assert config is not DEFAULT_MERGE_TOOLS

    def test_overrides_and_substitution(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MANIFEST_TOOL", "/opt/tools/manifest-merge")
        path = tmp_path / "merge-tools.yaml"
        path.write_text(
            "merge_tools:\n"
            "  dependency_manifest:\n"
            "    command: \"${MANIFEST_TOOL} {ours} {base} {theirs}\"\n"
            "    protected_exit_code: 4\n"
            "  version_descriptor:\n"
            "    command: \"${VERSION_TOOL:-version-merge} {ours} {base} {theirs}\"\n"
        )

        config = load_merge_tool_config(str(path))

        assert config["build_config"]["command"] == "git merge-file {ours} {base} {theirs}"
        assert config["dependency_manifest"] == {
            "command": "/opt/tools/manifest-merge {ours} {base} {theirs}",
            "protected_exit_code": 4,
        }
        assert config["version_descriptor"]["command"] == "version-merge {ours} {base} {theirs}"

    def test_defaults_not_mutated(self, tmp_path: Path):
        path = tmp_path / "merge-tools.yaml"
        path.write_text("merge_tools:\n  build_config:\n    command: \"custom {ours}\"\n")

        load_merge_tool_config(str(path))

        assert DEFAULT_MERGE_TOOLS["build_config"]["command"] == "git merge-file {ours} {base} {theirs}"

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "merge-tools.yaml"
        path.write_text("")

        assert load_merge_tool_config(str(path)) == DEFAULT_MERGE_TOOLS
