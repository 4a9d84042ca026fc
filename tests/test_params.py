"""
Tests for install directory / port resolution and the confirmation step.
"""

from pathlib import Path

import pytest

from clawup.errors import Cancelled, InvalidPort
from clawup.params import confirm_parameters, default_install_dir, parse_port, resolve_parameters


def blank_prompt(message, default):
    return ""


def no_prompt(message, default):
    raise AssertionError(f"unexpected prompt: {message}")


class TestResolveParameters:
    """Test defaults and overrides."""

    def test_blank_answers_keep_defaults(self, tmp_path):
        """Test blank answers keep defaults."""
        config = resolve_parameters(blank_prompt, home=tmp_path)
        assert config.install_dir == tmp_path / ".openclaw"
        assert config.port == 18789
        assert config.image == "ghcr.io/openclaw/openclaw:latest"

    def test_prompt_answers_override(self, tmp_path):
        """Test prompt answers override."""
        answers = {"Install directory": str(tmp_path / "oc"), "Web console port": "8080"}
        config = resolve_parameters(lambda m, d: answers[m], home=tmp_path)
        assert config.install_dir == tmp_path / "oc"
        assert config.port == 8080

    def test_command_line_values_skip_prompts(self, tmp_path):
        """Test command line values skip prompts."""
        config = resolve_parameters(no_prompt, install_dir=str(tmp_path / "x"), port="9000")
        assert config.install_dir == tmp_path / "x"
        assert config.port == 9000

    def test_tilde_is_expanded(self, monkeypatch, tmp_path):
        """Test tilde is expanded."""
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("USERPROFILE", str(tmp_path))
        config = resolve_parameters(no_prompt, install_dir="~/oc", port="1")
        assert config.install_dir == tmp_path / "oc"

    def test_clawup_home_sets_default(self, monkeypatch, tmp_path):
        """Test clawup home sets default."""
        monkeypatch.setenv("CLAWUP_HOME", str(tmp_path))
        assert default_install_dir() == tmp_path / ".openclaw"

    def test_invalid_port_fails_fast(self, tmp_path):
        """Test invalid port fails fast."""
        with pytest.raises(InvalidPort):
            resolve_parameters(no_prompt, install_dir=str(tmp_path), port="http")

    def test_derived_paths(self, tmp_path):
        """Test derived paths."""
        config = resolve_parameters(no_prompt, install_dir=str(tmp_path), port="3000")
        assert config.config_dir == tmp_path / "config"
        assert config.workspace_dir == tmp_path / "workspace"
        assert config.manifest_path == tmp_path / "docker-compose.yml"
        assert config.access_url == "http://localhost:3000"


class TestParsePort:
    """Test port validation."""

    @pytest.mark.parametrize("value,expected", [("1", 1), ("65535", 65535), (" 8080 ", 8080), (18789, 18789)])
    def test_valid(self, value, expected):
        """Test accepted port values."""
        assert parse_port(value) == expected

    @pytest.mark.parametrize("value", ["0", "65536", "-1", "80.5", "abc", "", "８０"])
    def test_invalid(self, value):
        """Test rejected port values."""
        with pytest.raises(InvalidPort):
            parse_port(value)


class TestConfirm:
    """Test the go/no-go checkpoint."""

    def test_declined(self, tmp_path):
        """Test a declined confirmation cancels the run."""
        config = resolve_parameters(blank_prompt, home=tmp_path)
        with pytest.raises(Cancelled) as exc:
            confirm_parameters(config, lambda summary: False)
        assert exc.value.exit_code == 130

    def test_summary_is_shown(self, tmp_path):
        """Test summary is shown."""
        config = resolve_parameters(blank_prompt, home=tmp_path)
        seen = []
        confirm_parameters(config, lambda summary: seen.append(summary) or True)
        assert "18789" in seen[0]
        assert str(config.install_dir) in seen[0]

    def test_assume_yes_skips_prompt(self, tmp_path):
        """Test assume yes skips prompt."""
        config = resolve_parameters(blank_prompt, home=tmp_path)
        confirm_parameters(config, lambda summary: pytest.fail("confirm called"), assume_yes=True)
