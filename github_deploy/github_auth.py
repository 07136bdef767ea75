"""
github_auth
-----------

이미 로그인된 gh CLI 세션에서 GitHub 토큰을 받아온다.
자체적으로 자격 증명을 저장하지 않는다.
"""

from __future__ import annotations

from .logging_utils import get_logger
from .preflight import PreflightError
from .subprocess_utils import CommandError, CommandRunner


logger = get_logger(__name__)


def get_token(runner: CommandRunner) -> str:
    # preflight 이후 세션이 만료되는 경우도 여기서 걸린다.
    try:
        result = runner.run(["gh", "auth", "token"], secret=True)
    except CommandError as e:
        raise PreflightError(
            "GitHub CLI 토큰을 찾을 수 없습니다.",
            hints=["실행: gh auth login"],
        ) from e

    token = result.stdout.strip()
    if not token:
        raise PreflightError(
            "GitHub CLI 토큰이 비어 있습니다.",
            hints=["실행: gh auth login"],
        )
    logger.debug("gh CLI 에서 GitHub 토큰을 가져왔습니다.")
    return token
