"""
git_push
--------

로컬 디렉토리를 git 리포로 만들고 원격 브랜치에 force-push 한다.

매 배포는 원격 브랜치를 통째로 덮어쓴다. diff / 충돌 감지 / merge 는 하지 않는다.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .logging_utils import get_logger
from .subprocess_utils import CommandError, CommandRunner


logger = get_logger(__name__)


INITIAL_COMMIT_MESSAGE = "Initial commit"
UPDATE_COMMIT_MESSAGE = "Update"


@dataclass(frozen=True)
class PushSpec:
    source_dir: str
    remote_url: str
    branch: str
    label: str


def _git(runner: CommandRunner, source_dir: str, *args: str) -> None:
    runner.run(["git", *args], cwd=source_dir, stream_output=True)


def _commit_update(runner: CommandRunner, source_dir: str) -> None:
    try:
        _git(runner, source_dir, "add", ".")
        _git(runner, source_dir, "commit", "-m", UPDATE_COMMIT_MESSAGE)
    except CommandError as e:
        # 변경이 없으면 commit 이 실패한다. 정상 흐름이므로 계속 진행.
        if "nothing to commit" in e.output:
            logger.debug("변경 사항이 없어 커밋을 건너뜁니다: %s", source_dir)
        else:
            logger.warning("커밋에 실패했지만 push 는 계속 진행합니다: %s", e)


def push_directory(runner: CommandRunner, spec: PushSpec) -> bool:
    """
    spec.source_dir 를 spec.remote_url 의 spec.branch 로 force-push 한다.

    실패해도 예외를 올리지 않고 로그만 남긴 뒤 False 를 리턴한다.
    split 모드에서 첫 push 가 실패해도 두 번째 push 는 시도되어야 하기 때문이다.
    """
    source_dir = spec.source_dir
    logger.info("%s 를 %s 로 배포합니다...", source_dir, spec.label)

    try:
        if not (Path(source_dir) / ".git").exists():
            _git(runner, source_dir, "init")
            _git(runner, source_dir, "add", ".")
            _git(runner, source_dir, "commit", "-m", INITIAL_COMMIT_MESSAGE)

        try:
            runner.run(["git", "remote", "remove", "origin"], cwd=source_dir)
        except CommandError:
            logger.debug("기존 origin 리모트가 없습니다: %s", source_dir)

        _git(runner, source_dir, "remote", "add", "origin", spec.remote_url)
        _git(runner, source_dir, "checkout", "-B", spec.branch)

        _commit_update(runner, source_dir)

        _git(runner, source_dir, "push", "-f", "origin", spec.branch)
    except Exception:  # noqa: BLE001
        logger.exception("%s push 실패", spec.label)
        return False

    logger.info("%s push 완료", spec.label)
    return True
