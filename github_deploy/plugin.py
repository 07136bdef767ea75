"""
plugin
------

빌드 도구에 붙이는 플러그인 객체. 빌드가 끝나면 close_bundle() 이 호출된다.

치명적인 오류(환경 점검 실패, 토큰 없음, GitHub 조회 실패)는 여기서만 프로세스를 종료시킨다.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from .config import BUILD_DIR_NAME, CONFIG_FILE_NAME, load_env_files
from .github_client import GitHubClient, GitHubError
from .logging_utils import get_logger
from .orchestrator import ApiFactory, DeployResult, run_deploy
from .preflight import PreflightError
from .subprocess_utils import CommandRunner


logger = get_logger(__name__)


class GitHubDeployPlugin:
    name = "github-deploy"

    def __init__(
        self,
        project_dir: Optional[str] = None,
        *,
        build_dir_name: str = BUILD_DIR_NAME,
        config_name: str = CONFIG_FILE_NAME,
        runner: Optional[CommandRunner] = None,
        api_factory: ApiFactory = GitHubClient,
    ) -> None:
        self.project_dir = project_dir
        self.build_dir_name = build_dir_name
        self.config_name = config_name
        self.runner = runner
        self.api_factory = api_factory

    def close_bundle(self) -> DeployResult:
        project_dir = self.project_dir or os.getcwd()
        load_env_files(project_dir)

        try:
            return run_deploy(
                project_dir,
                runner=self.runner,
                api_factory=self.api_factory,
                build_dir_name=self.build_dir_name,
                config_name=self.config_name,
            )
        except PreflightError as e:
            logger.error("%s", e.describe())
            sys.exit(1)
        except GitHubError as e:
            logger.error("GitHub API 호출 실패: %s", e)
            sys.exit(1)