"""
repos
-----

배포 대상 GitHub 리포가 있는지 확인하고, 없으면 만든다.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from .github_client import GitHubApi, GitHubError
from .logging_utils import get_logger


logger = get_logger(__name__)


# 생성 직후 push 하면 아직 리포가 안 보이는 경우가 있어 잠시 기다린다.
CREATE_WAIT_SECONDS = 2.0


@dataclass(frozen=True)
class RepoSpec:
    name: str
    is_private: bool
    owner: Optional[str] = None


def ensure_repo(
    api: GitHubApi,
    spec: RepoSpec,
    *,
    wait_seconds: float = CREATE_WAIT_SECONDS,
    sleep: Optional[Callable[[float], None]] = None,
) -> str:
    """
    리포가 없으면 생성한다. 이미 있으면 아무것도 하지 않는다.

    owner 가 주어지면 조직 리포로, 없으면 인증된 사용자 계정에 만든다.
    404 외의 조회 실패는 그대로 올려보낸다.

    Returns:
        실제로 사용한 owner (owner 미지정 시 인증된 사용자 login)
    """
    final_owner = spec.owner or api.get_authenticated_user()

    try:
        api.get_repo(final_owner, spec.name)
    except GitHubError as e:
        if e.status_code != 404:
            raise
    else:
        logger.info('리포 "%s/%s" 가 이미 존재합니다.', final_owner, spec.name)
        return final_owner

    if spec.owner:
        api.create_in_org(spec.owner, spec.name, spec.is_private)
    else:
        api.create_for_authenticated_user(spec.name, spec.is_private)

    logger.info(
        "리포를 생성했습니다: %s/%s (%s)",
        final_owner,
        spec.name,
        "private" if spec.is_private else "public",
    )
    (sleep or time.sleep)(wait_seconds)
    return final_owner
