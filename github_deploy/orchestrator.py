from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from . import git_push, preflight, repos
from .config import (
    BUILD_DIR_NAME,
    CONFIG_FILE_NAME,
    DeploymentMode,
    StarterConfig,
    is_deploy_enabled,
    load_starter_config,
)
from .github_auth import get_token
from .github_client import GitHubApi, GitHubClient
from .logging_utils import get_logger
from .subprocess_utils import CommandRunner, SubprocessRunner


logger = get_logger(__name__)


ApiFactory = Callable[[str], GitHubApi]
TokenGetter = Callable[[CommandRunner], str]

STATUS_SKIPPED = "skipped"
STATUS_DONE = "done"


@dataclass(frozen=True)
class PushOutcome:
    label: str
    source_dir: str
    remote_url: str
    ok: bool


@dataclass
class DeployResult:
    status: str
    reason: str = ""
    mode: str = ""
    outcomes: List[PushOutcome] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return any(not o.ok for o in self.outcomes)


def remote_url(owner: str, repo: str) -> str:
    return f"git@github.com:{owner}/{repo}.git"


def _skipped(reason: str, mode: str = "") -> DeployResult:
    return DeployResult(status=STATUS_SKIPPED, reason=reason, mode=mode)


def _push(runner: CommandRunner, source_dir: str, url: str, branch: str, label: str) -> PushOutcome:
    spec = git_push.PushSpec(source_dir=source_dir, remote_url=url, branch=branch, label=label)
    ok = git_push.push_directory(runner, spec)
    return PushOutcome(label=label, source_dir=source_dir, remote_url=url, ok=ok)


def deploy_with_config(
    cfg: StarterConfig,
    *,
    project_dir: str,
    build_dir: str,
    runner: CommandRunner,
    api_factory: ApiFactory = GitHubClient,
    token_getter: TokenGetter = get_token,
) -> DeployResult:
    """
    deploy.mode 에 따라 리포 생성 / push 를 순서대로 호출한다.

    - none        : 아무것도 하지 않는다
    - public-only : public 리포에 프로젝트 전체를 push
    - split       : public 리포에 빌드 결과물만, private 리포에 프로젝트 전체를 push

    토큰 조회와 API 클라이언트 생성은 모드/리포 이름 검증을 통과한 뒤에만 한다.
    """
    deploy = cfg.deploy
    mode = deploy.mode

    if mode is None:
        logger.warning("[deploy] 알 수 없는 모드입니다: %s", deploy.mode_raw)
        return _skipped(f"unknown mode: {deploy.mode_raw}", deploy.mode_raw)

    if mode is DeploymentMode.NONE:
        logger.info("[deploy] Mode: none -> 건너뜁니다.")
        return _skipped("mode none", mode.value)

    if mode is DeploymentMode.PUBLIC_ONLY and not deploy.public_repo:
        logger.warning("[deploy] 설정에 public_repo 가 없습니다.")
        return _skipped("missing public_repo", mode.value)

    if mode is DeploymentMode.SPLIT and not (deploy.public_repo and deploy.private_repo):
        logger.warning("[deploy] 설정에 public_repo 또는 private_repo 가 없습니다.")
        return _skipped("missing public_repo or private_repo", mode.value)

    api = api_factory(token_getter(runner))
    owner = cfg.cdn.owner
    result = DeployResult(status=STATUS_DONE, mode=mode.value)

    public_owner = repos.ensure_repo(api, repos.RepoSpec(deploy.public_repo, is_private=False, owner=owner))

    if mode is DeploymentMode.PUBLIC_ONLY:
        url = remote_url(cfg.cdn.user or public_owner, deploy.public_repo)
        result.outcomes.append(
            _push(runner, project_dir, url, deploy.branch, "public repo (full project)")
        )
        return result

    private_owner = repos.ensure_repo(api, repos.RepoSpec(deploy.private_repo, is_private=True, owner=owner))

    public_url = remote_url(cfg.cdn.user or public_owner, deploy.public_repo)
    private_url = remote_url(cfg.cdn.user or private_owner, deploy.private_repo)

    # 두 push 는 서로 독립. 앞의 실패가 뒤를 막지 않는다.
    result.outcomes.append(_push(runner, build_dir, public_url, deploy.branch, "public repo (dist only)"))
    result.outcomes.append(_push(runner, project_dir, private_url, deploy.branch, "private repo (source)"))
    return result


def run_deploy(
    project_dir: str,
    *,
    runner: Optional[CommandRunner] = None,
    api_factory: ApiFactory = GitHubClient,
    token_getter: TokenGetter = get_token,
    env: Optional[Mapping[str, str]] = None,
    build_dir_name: str = BUILD_DIR_NAME,
    config_name: str = CONFIG_FILE_NAME,
    ssh_key_path: Optional[Path] = None,
) -> DeployResult:
    """
    빌드 직후 한 번 호출되는 배포 진입점.

    DEPLOY=true 가 아니거나, 빌드 디렉토리 / 설정 파일이 없으면 조용히 건너뛴다.
    환경 점검 실패는 preflight.PreflightError 로 올라간다.
    """
    if not is_deploy_enabled(env):
        logger.debug("DEPLOY=true 가 아니므로 배포를 건너뜁니다.")
        return _skipped("DEPLOY flag not set")

    logger.info("배포 모드 활성화 (DEPLOY=true)")

    runner = runner or SubprocessRunner()
    build_dir = os.path.join(project_dir, build_dir_name)
    config_path = os.path.join(project_dir, config_name)

    if not os.path.isdir(build_dir):
        logger.error("%s/ 디렉토리가 없습니다. 먼저 빌드하세요.", build_dir_name)
        return _skipped(f"missing {build_dir_name}/")

    if not os.path.exists(config_path):
        logger.warning("[deploy] %s 파일이 없습니다. 배포를 건너뜁니다.", config_name)
        return _skipped(f"missing {config_name}")

    preflight.verify_environment(runner, ssh_key_path)

    cfg = load_starter_config(config_path)
    if cfg is None:
        return _skipped(f"missing {config_name}")

    return deploy_with_config(
        cfg,
        project_dir=project_dir,
        build_dir=build_dir,
        runner=runner,
        api_factory=api_factory,
        token_getter=token_getter,
    )


def plan(cfg: StarterConfig, *, project_dir: str, build_dir: str) -> str:
    """
    어떤 디렉토리가 어느 리포로 갈지 요약 텍스트를 리턴한다.
    명령 실행이나 GitHub 호출은 하지 않는다.
    """
    deploy = cfg.deploy
    owner_label = cfg.cdn.user or "(authenticated user)"

    lines: List[str] = []
    lines.append("# Deploy plan")
    lines.append(f"- mode: {deploy.mode_raw}")
    lines.append(f"- branch: {deploy.branch}")
    lines.append(f"- owner: {owner_label}{' (org)' if cfg.cdn.owner else ''}")
    lines.append("")
    lines.append("## Pushes")

    mode = deploy.mode
    if mode is None:
        lines.append(f"- (none) 알 수 없는 모드: {deploy.mode_raw}")
    elif mode is DeploymentMode.NONE:
        lines.append("- (none)")
    elif mode is DeploymentMode.PUBLIC_ONLY:
        if deploy.public_repo:
            lines.append(f"- {project_dir} -> {remote_url(owner_label, deploy.public_repo)} (public)")
        else:
            lines.append("- (none) public_repo 가 설정되지 않았습니다.")
    else:
        if deploy.public_repo and deploy.private_repo:
            lines.append(f"- {build_dir} -> {remote_url(owner_label, deploy.public_repo)} (public)")
            lines.append(f"- {project_dir} -> {remote_url(owner_label, deploy.private_repo)} (private)")
        else:
            lines.append("- (none) public_repo 또는 private_repo 가 설정되지 않았습니다.")

    return "\n".join(lines)


def format_summary(result: DeployResult) -> str:
    lines: List[str] = []
    lines.append("# Deploy summary")
    lines.append(f"- status: {result.status}")
    if result.mode:
        lines.append(f"- mode: {result.mode}")
    if result.reason:
        lines.append(f"- reason: {result.reason}")

    lines.append("")
    lines.append("## Pushed")
    pushed = [o for o in result.outcomes if o.ok]
    if pushed:
        for o in pushed:
            lines.append(f"- {o.label}: {o.source_dir} -> {o.remote_url}")
    else:
        lines.append("- (none)")

    lines.append("")
    lines.append("## Failed")
    failed = [o for o in result.outcomes if not o.ok]
    if failed:
        for o in failed:
            lines.append(f"- {o.label}: {o.source_dir} -> {o.remote_url}")
    else:
        lines.append("- (none)")

    return "\n".join(lines)
