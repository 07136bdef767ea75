"""
subprocess_utils
----------------

git / gh 같은 외부 명령 실행을 한 곳으로 모은 모듈.

오케스트레이션 로직은 subprocess 를 직접 부르지 않고 CommandRunner 를 주입받는다.
테스트에서는 호출만 기록하는 가짜 runner 로 바꿔 끼운다.
"""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass
from textwrap import shorten
from typing import Mapping, Protocol, Sequence

from .logging_utils import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str


class CommandError(RuntimeError):
    """외부 명령이 없거나 0 이 아닌 코드로 끝났을 때."""

    def __init__(self, message: str, *, cmd: Sequence[str], returncode: int | None = None, output: str = "") -> None:
        super().__init__(message)
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output


class CommandRunner(Protocol):
    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: str | None = None,
        stream_output: bool = False,
        secret: bool = False,
    ) -> RunResult:
        ...


def _failure_detail(stdout: str, stderr: str) -> str:
    if stderr:
        return "\nstderr:\n" + shorten(stderr, width=2000)
    if stdout:
        return "\nstdout:\n" + shorten(stdout, width=2000)
    return ""


def run_command(
    cmd: Sequence[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
    stream_output: bool = False,
    secret: bool = False,
) -> RunResult:
    """
    subprocess 실행 공통 유틸.

    - stream_output=False: stdout/stderr 캡처, 실패 시 요약을 CommandError 에 포함
    - stream_output=True : 출력을 실시간으로 터미널에 흘린다 (git push 진행 상황 등)

    timeout 기본값은 None 이다. 멈춘 명령은 그대로 기다린다.
    secret=True 이면 stdout 을 로그에 남기지 않는다 (토큰 등).
    """
    logger.info("명령 실행: %s", " ".join(cmd))

    if stream_output:
        # git 은 진행 로그를 stderr 로 내보내므로 STDOUT 으로 합친다.
        try:
            proc = subprocess.Popen(  # noqa: S603
                list(cmd),
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except FileNotFoundError as e:
            raise CommandError(
                f"필요한 명령을 찾을 수 없습니다: {cmd[0]} (설치되어 있는지 확인하세요)",
                cmd=cmd,
            ) from e

        out_lines: list[str] = []
        try:
            assert proc.stdout is not None
            for line in proc.stdout:
                out_lines.append(line)
                sys.stdout.write(line)
                sys.stdout.flush()
            returncode = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired as e:
            proc.kill()
            raise CommandError(
                f"명령 실행이 {timeout}초 안에 끝나지 않았습니다: {' '.join(cmd)}",
                cmd=cmd,
            ) from e
        finally:
            if proc.stdout is not None:
                proc.stdout.close()

        combined = "".join(out_lines)
        if returncode != 0:
            raise CommandError(
                f"명령 실행 실패: {' '.join(cmd)} (exit={returncode})"
                + _failure_detail(combined.strip(), ""),
                cmd=cmd,
                returncode=returncode,
                output=combined,
            )
        return RunResult(returncode=returncode, stdout=combined, stderr="")

    try:
        result = subprocess.run(  # noqa: S603
            list(cmd),
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
    except FileNotFoundError as e:
        raise CommandError(
            f"필요한 명령을 찾을 수 없습니다: {cmd[0]} (설치되어 있는지 확인하세요)",
            cmd=cmd,
        ) from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(
            f"명령 실행이 {timeout}초 안에 끝나지 않았습니다: {' '.join(cmd)}",
            cmd=cmd,
        ) from e
    except subprocess.CalledProcessError as e:
        stdout = (e.stdout or "").strip()
        stderr = (e.stderr or "").strip()
        raise CommandError(
            f"명령 실행 실패: {' '.join(cmd)} (exit={e.returncode})" + _failure_detail(stdout, stderr),
            cmd=cmd,
            returncode=e.returncode,
            output="\n".join(p for p in (stdout, stderr) if p),
        ) from e

    if result.stdout and not secret:
        logger.debug("명령 stdout: %s", shorten(result.stdout.strip(), width=2000))
    if result.stderr:
        logger.debug("명령 stderr: %s", shorten(result.stderr.strip(), width=2000))
    return RunResult(returncode=result.returncode, stdout=result.stdout or "", stderr=result.stderr or "")


class SubprocessRunner:
    """실제 프로세스를 띄우는 기본 CommandRunner."""

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: str | None = None,
        stream_output: bool = False,
        secret: bool = False,
    ) -> RunResult:
        return run_command(cmd, cwd=cwd, stream_output=stream_output, secret=secret)
