from __future__ import annotations

import io
import os
import sys

import pytest

from github_deploy.subprocess_utils import CommandError, SubprocessRunner, run_command


def test_capture_mode_returns_stdout() -> None:
    result = run_command([sys.executable, "-c", "print('hello')"])

    assert result.returncode == 0
    assert result.stdout.strip() == "hello"


def test_failure_raises_command_error_with_output() -> None:
    cmd = [sys.executable, "-c", "import sys; sys.stderr.write('nothing to commit'); sys.exit(1)"]

    with pytest.raises(CommandError) as excinfo:
        run_command(cmd)

    assert excinfo.value.returncode == 1
    assert "nothing to commit" in excinfo.value.output
    assert "exit=1" in str(excinfo.value)


def test_missing_executable_raises_command_error() -> None:
    with pytest.raises(CommandError) as excinfo:
        run_command(["definitely-not-a-real-command-xyz", "--version"])

    assert excinfo.value.returncode is None


def test_stream_mode_echoes_and_merges_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_out = io.StringIO()
    monkeypatch.setattr(sys, "stdout", fake_out)

    cmd = [sys.executable, "-c", "import sys; print('out'); sys.stdout.flush(); sys.stderr.write('err\\n')"]
    result = run_command(cmd, stream_output=True)

    assert "out" in fake_out.getvalue()
    assert "err" in result.stdout


def test_stream_mode_failure_keeps_output(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdout", io.StringIO())

    cmd = [sys.executable, "-c", "import sys; print('Could not resolve host'); sys.exit(128)"]
    with pytest.raises(CommandError) as excinfo:
        run_command(cmd, stream_output=True)

    assert excinfo.value.returncode == 128
    assert "Could not resolve host" in excinfo.value.output


def test_runner_passes_cwd(tmp_path) -> None:
    result = SubprocessRunner().run([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=str(tmp_path))

    assert os.path.realpath(result.stdout.strip()) == os.path.realpath(tmp_path)


def test_env_is_passed_to_child() -> None:
    env = dict(os.environ, GITHUB_DEPLOY_TEST="from-env")

    result = run_command([sys.executable, "-c", "import os; print(os.environ['GITHUB_DEPLOY_TEST'])"], env=env)

    assert result.stdout.strip() == "from-env"
