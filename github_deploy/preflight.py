"""
preflight
---------

배포 전에 git / gh CLI 설치 여부, gh 로그인 상태, SSH 키 존재 여부를 확인한다.

하나라도 실패하면 PreflightError 를 던진다. 복구하지 않고 바로 중단하는 것이 원칙이다.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from .logging_utils import get_logger
from .subprocess_utils import CommandError, CommandRunner


logger = get_logger(__name__)


REQUIRED_TOOLS = ["git", "gh"]


class PreflightError(RuntimeError):
    """배포를 계속할 수 없는 환경 문제. hints 에 해결 방법을 담는다."""

    def __init__(self, message: str, hints: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.hints = list(hints)

    def describe(self) -> str:
        lines = [str(self)]
        lines.extend(f"  -> {h}" for h in self.hints)
        return "\n".join(lines)


def default_ssh_key_path() -> Path:
    return Path.home() / ".ssh" / "id_ed25519"


def check_command_installed(runner: CommandRunner, cmd: str) -> None:
    try:
        runner.run([cmd, "--version"])
    except CommandError as e:
        raise PreflightError(
            f"필요한 명령이 없습니다: {cmd}",
            hints=[f"{cmd} 를 설치한 뒤 다시 실행하세요."],
        ) from e


def ensure_gh_authenticated(runner: CommandRunner) -> None:
    try:
        runner.run(["gh", "auth", "status"])
    except CommandError as e:
        raise PreflightError(
            "GitHub CLI 에 로그인되어 있지 않습니다.",
            hints=[
                "실행: gh auth login",
                '프로토콜을 물으면 "SSH" 를 선택하세요.',
            ],
        ) from e


def ensure_ssh_key_exists(ssh_key_path: Optional[Path] = None) -> None:
    key_path = ssh_key_path or default_ssh_key_path()
    if not key_path.exists():
        raise PreflightError(
            f"SSH 키를 찾을 수 없습니다: {key_path}",
            hints=[
                'ssh-keygen -t ed25519 -C "your-email@example.com" 으로 키를 생성하세요.',
                "생성한 공개키를 https://github.com/settings/keys 에 등록하세요.",
            ],
        )


def verify_environment(runner: CommandRunner, ssh_key_path: Optional[Path] = None) -> None:
    """
    git, gh 설치 -> gh 로그인 -> SSH 키 순서로 확인한다.
    첫 번째 실패에서 PreflightError 로 중단한다.
    """
    for tool in REQUIRED_TOOLS:
        check_command_installed(runner, tool)
    ensure_gh_authenticated(runner)
    ensure_ssh_key_exists(ssh_key_path)
    logger.info("사전 점검 통과: git / gh 로그인 / SSH 키 확인 완료")


def check_environment(runner: CommandRunner, ssh_key_path: Optional[Path] = None) -> tuple[List[str], bool]:
    """
    verify_environment 와 같은 항목을 점검하되, 중단하지 않고 결과를 모두 모은다.

    Returns:
        lines: 항목별 상태 문자열
        has_issues: 하나 이상 실패했는지 여부
    """
    lines: List[str] = []
    has_issues = False

    checks = [(f"{tool} 설치", lambda t=tool: check_command_installed(runner, t)) for tool in REQUIRED_TOOLS]
    checks.append(("gh 로그인", lambda: ensure_gh_authenticated(runner)))
    checks.append(("SSH 키", lambda: ensure_ssh_key_exists(ssh_key_path)))

    for label, check in checks:
        try:
            check()
        except PreflightError as e:
            has_issues = True
            lines.append(f"{label}: 실패 - {e.describe()}")
            continue
        lines.append(f"{label}: OK")

    return lines, has_issues
