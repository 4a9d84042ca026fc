"""
Tests for the click command line.
"""

import functools
import json
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from clawup.cli.main import main
from clawup.provisioner import Provisioner, ProvisionState, run_provisioning
from clawup.runtime.detect import RuntimeHandle
from conftest import FakeRunner, RUNNING_PS

HANDLE = RuntimeHandle("docker", ("docker", "compose"), False, "v2.29.1", "linux")


def fake_provisioning(runner):
    return functools.partial(
        run_provisioning,
        runner=runner,
        sleep=lambda s: None,
        preflight=lambda **kw: HANDLE,
    )


def recording_provisioning(runner, seen):
    def run(options, prompt, confirm):
        provisioner = Provisioner(
            options=options,
            prompt=prompt,
            confirm=confirm,
            runner=runner,
            sleep=lambda s: None,
            preflight=lambda **kw: HANDLE,
        )
        seen.append(provisioner)
        return provisioner.run()
    return run


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path):
    monkeypatch.setenv("CLAWUP_HOME", str(tmp_path))


class TestInstallCommand:
    """Test `clawup install`."""

    def test_non_interactive_install(self, tmp_path):
        """Test non interactive install."""
        runner = FakeRunner([("ps --all", 0, RUNNING_PS)])
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(runner)):
            result = CliRunner().invoke(main, ["install", "--yes", "--skip-http-check"])
        assert result.exit_code == 0, result.output
        assert "http://localhost:18789" in result.output
        assert (tmp_path / ".openclaw" / "docker-compose.yml").exists()
        assert "docker compose down" in result.output

    def test_interactive_prompts(self, tmp_path):
        """Test interactive prompts."""
        runner = FakeRunner([("ps --all", 0, RUNNING_PS)])
        target = tmp_path / "custom"
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(runner)):
            result = CliRunner().invoke(main, ["install", "--skip-http-check"], input=f"{target}\n9000\n\n")
        assert result.exit_code == 0, result.output
        assert "http://localhost:9000" in result.output
        assert (target / "docker-compose.yml").exists()

    def test_declined_confirmation(self, tmp_path):
        """Test declined confirmation."""
        runner = FakeRunner()
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(runner)):
            result = CliRunner().invoke(main, ["install"], input="\n\nn\n")
        assert result.exit_code == 130
        assert not (tmp_path / ".openclaw").exists()
        assert runner.calls == []

    def test_invalid_port(self, tmp_path):
        """Test invalid port."""
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(FakeRunner())):
            result = CliRunner().invoke(main, ["install", "--yes", "--port", "99999"])
        assert result.exit_code == 1
        assert "Port out of range" in result.output
        assert not (tmp_path / ".openclaw").exists()

    def test_pull_failure_exit_code(self, tmp_path):
        """Test pull failure exit code."""
        runner = FakeRunner([("pull", 1, "")])
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(runner)):
            result = CliRunner().invoke(main, ["install", "--yes"])
        assert result.exit_code == 1
        assert "Failed to pull" in result.output
        assert (tmp_path / ".openclaw" / "docker-compose.yml").exists()

    def test_verification_warning_exit_zero(self):
        """Test verification warning exit zero."""
        runner = FakeRunner([("ps --all", 0, "")])
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(runner)):
            result = CliRunner().invoke(main, ["install", "--yes", "--skip-http-check"])
        assert result.exit_code == 0
        assert "logs" in result.output

    def test_json_redacts_token(self):
        """Test json redacts token."""
        runner = FakeRunner([("ps --all", 0, RUNNING_PS)])
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(runner)):
            result = CliRunner().invoke(main, ["--json", "install", "--yes", "--skip-http-check"])
        data = json.loads(result.output)
        assert data["state"] == "verified"
        assert data["token"] == "[REDACTED]"
        assert data["port"] == 18789

    def test_json_show_token(self):
        """Test json show token."""
        runner = FakeRunner([("ps --all", 0, RUNNING_PS)])
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(runner)):
            result = CliRunner().invoke(main, ["--json", "install", "--yes", "--skip-http-check", "--show-token"])
        data = json.loads(result.output)
        assert len(data["token"]) == 64

    def test_missing_docker(self):
        """Test missing Docker exits 1 with the install link."""
        with patch("clawup.runtime.detect.shutil.which", return_value=None):
            result = CliRunner().invoke(main, ["install", "--yes"])
        assert result.exit_code == 1
        assert "https://docs.docker.com/get-docker/" in result.output


class TestServiceCommands:
    """Test status / logs / down."""

    def test_status_running(self, tmp_path):
        """Test status running."""
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")
        runner = FakeRunner([("ps --all", 0, RUNNING_PS)])
        with patch("clawup.cli.main.check_environment", return_value=HANDLE), \
             patch("clawup.runtime.compose.run_cmd", runner):
            result = CliRunner().invoke(main, ["status", "--dir", str(tmp_path)])
        assert result.exit_code == 0
        assert "running" in result.output

    def test_status_without_install(self, tmp_path):
        """Test status without install."""
        with patch("clawup.cli.main.check_environment", return_value=HANDLE):
            result = CliRunner().invoke(main, ["status", "--dir", str(tmp_path / "nothing")])
        assert result.exit_code == 1
        assert "No installation found" in result.output

    def test_down(self, tmp_path):
        """Test down stops the service in the install directory."""
        runner = FakeRunner()
        with patch("clawup.cli.main.check_environment", return_value=HANDLE), \
             patch("clawup.runtime.compose.run_cmd", runner):
            result = CliRunner().invoke(main, ["down", "--dir", str(tmp_path)])
        assert result.exit_code == 0
        assert runner.calls == [["docker", "compose", "down"]]

    def test_logs_follow(self, tmp_path):
        """Test logs follow."""
        runner = FakeRunner()
        with patch("clawup.cli.main.check_environment", return_value=HANDLE), \
             patch("clawup.runtime.compose.run_cmd", runner):
            result = CliRunner().invoke(main, ["logs", "--dir", str(tmp_path), "-f"])
        assert result.exit_code == 0
        assert runner.calls == [["docker", "compose", "logs", "-f"]]


class TestInterruptedInstall:
    """Test Ctrl+C at the interactive prompts."""

    def test_interrupt_at_confirmation(self, tmp_path):
        """Test Ctrl+C at the confirmation exits 130 and aborts the run."""
        runner = FakeRunner()
        seen = []
        with patch("clawup.cli.main.run_provisioning", recording_provisioning(runner, seen)), \
             patch("click.confirm", side_effect=click.Abort()):
            result = CliRunner().invoke(main, ["install", "--dir", str(tmp_path / "oc"), "--port", "1234"])
        assert result.exit_code == 130
        assert "Aborted!" not in result.output
        assert seen[0].state is ProvisionState.ABORTED
        assert not (tmp_path / "oc").exists()
        assert runner.calls == []

    def test_interrupt_at_prompt(self, tmp_path):
        """Test Ctrl+C at the port prompt exits 130 and aborts the run."""
        seen = []
        with patch("clawup.cli.main.run_provisioning", recording_provisioning(FakeRunner(), seen)), \
             patch("click.prompt", side_effect=click.Abort()):
            result = CliRunner().invoke(main, ["install", "--dir", str(tmp_path / "oc")])
        assert result.exit_code == 130
        assert seen[0].state is ProvisionState.ABORTED
        assert not (tmp_path / "oc").exists()


class TestInteractiveJson:
    """Test --json output when prompts are shown."""

    def test_stdout_is_one_json_object(self, tmp_path):
        """Test prompts and the summary stay off stdout in JSON mode."""
        runner = FakeRunner([("ps --all", 0, RUNNING_PS)])
        with patch("clawup.cli.main.run_provisioning", fake_provisioning(runner)):
            result = CliRunner().invoke(main, ["--json", "install", "--skip-http-check"], input="\n\n\n")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["state"] == "verified"
        assert data["install_dir"] == str(tmp_path / ".openclaw")
        assert "Install directory" in result.stderr
        assert "Proceed with the installation?" in result.stderr
