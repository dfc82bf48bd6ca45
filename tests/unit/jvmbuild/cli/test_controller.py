"""Tests for jvmbuild controller."""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from jvmbuild.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@patch("jvmbuild.cli.core.subprocess.run")
@patch("jvmbuild.cli.core.shutil.which", return_value="/usr/bin/kopf")
def test_runs_kopf_for_namespace(mock_which, mock_run, runner):
    mock_run.return_value = MagicMock(returncode=0)
    result = runner.invoke(main, ["controller", "--namespace", "builds"])

    assert result.exit_code == 0, result.output
    cmd = mock_run.call_args.args[0]
    assert cmd[:5] == ["kopf", "run", "-m", "jvmbuild.operator", "--standalone"]
    assert cmd[5:] == ["--namespace", "builds"]


@patch("jvmbuild.cli.core.subprocess.run")
@patch("jvmbuild.cli.core.shutil.which", return_value="/usr/bin/kopf")
def test_all_namespaces_and_kubeconfig(mock_which, mock_run, runner):
    mock_run.return_value = MagicMock(returncode=0)
    result = runner.invoke(main, ["controller", "--kubeconfig", "/tmp/kc", "--verbose"])

    assert result.exit_code == 0, result.output
    cmd = mock_run.call_args.args[0]
    assert "--all-namespaces" in cmd
    assert "--verbose" in cmd
    env = mock_run.call_args.kwargs["env"]
    assert env["KUBECONFIG"] == "/tmp/kc"
    assert env["JVMBUILD_KUBECONFIG"] == "/tmp/kc"


@patch("jvmbuild.cli.core.shutil.which", return_value=None)
def test_missing_kopf(mock_which, runner):
    result = runner.invoke(main, ["controller"])
    assert result.exit_code == 1
    assert "kopf not found" in result.output


@patch("jvmbuild.cli.core.subprocess.run")
@patch("jvmbuild.cli.core.shutil.which", return_value="/usr/bin/kopf")
def test_nonzero_exit(mock_which, mock_run, runner):
    mock_run.return_value = MagicMock(returncode=3)
    result = runner.invoke(main, ["controller", "--namespace", "builds"])
    assert result.exit_code == 1
    assert "Exit code: 3" in result.output
