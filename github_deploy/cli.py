import os
import sys
from pathlib import Path
from typing import Optional

import click

from .config import BUILD_DIR_NAME, CONFIG_FILE_NAME, load_env_files, load_starter_config
from .github_client import GitHubClient, GitHubError
from .logging_utils import setup_logging, get_logger
from .orchestrator import format_summary, plan as plan_deploy, run_deploy
from .preflight import PreflightError, check_environment
from .subprocess_utils import SubprocessRunner


logger = get_logger(__name__)


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="프로젝트 루트 디렉토리 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다. (-vv 부터 HTTP 로그 포함)",
)
@click.option("-q", "--quiet", is_flag=True, help="경고 이상만 출력합니다.")
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int, quiet: bool) -> None:
    """빌드 결과물 / 소스를 GitHub 리포로 force-push 하는 배포 CLI"""
    setup_logging(verbose, quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = os.path.abspath(chdir)
    load_env_files(ctx.obj["chdir"])


@main.command(name="deploy")
@click.option("--build-dir", "build_dir", default=BUILD_DIR_NAME, show_default=True, help="빌드 결과물 디렉토리")
@click.option("--config", "config_name", default=CONFIG_FILE_NAME, show_default=True, help="배포 설정 파일")
@click.pass_context
def deploy(ctx: click.Context, build_dir: str, config_name: str) -> None:
    """DEPLOY=true 일 때 설정된 모드대로 리포 생성 및 push 를 수행"""
    base_dir: str = ctx.obj["chdir"]

    try:
        result = run_deploy(
            base_dir,
            runner=SubprocessRunner(),
            api_factory=GitHubClient,
            build_dir_name=build_dir,
            config_name=config_name,
        )
    except PreflightError as e:
        click.echo(f"[ERROR] {e.describe()}", err=True)
        sys.exit(1)
    except GitHubError as e:
        logger.exception("GitHub API 호출 중 오류 발생")
        click.echo(f"[ERROR] 배포 실패: {e}", err=True)
        sys.exit(1)

    # push 실패는 요약에만 표시하고 종료 코드는 바꾸지 않는다.
    click.echo(format_summary(result))


@main.command()
@click.option("--build-dir", "build_dir", default=BUILD_DIR_NAME, show_default=True, help="빌드 결과물 디렉토리")
@click.option("--config", "config_name", default=CONFIG_FILE_NAME, show_default=True, help="배포 설정 파일")
@click.pass_context
def plan(ctx: click.Context, build_dir: str, config_name: str) -> None:
    """설정 파일 기준으로 어떤 디렉토리가 어느 리포로 가는지 출력 (실행하지 않음)"""
    base_dir: str = ctx.obj["chdir"]

    try:
        cfg = load_starter_config(os.path.join(base_dir, config_name))
    except Exception as e:  # noqa: BLE001
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(1)

    if cfg is None:
        click.echo(f"{config_name} 파일이 없습니다. 배포 대상이 없습니다.")
        return

    click.echo(plan_deploy(cfg, project_dir=base_dir, build_dir=os.path.join(base_dir, build_dir)))


@main.command()
@click.option(
    "--ssh-key",
    "ssh_key",
    type=click.Path(dir_okay=False),
    default=None,
    help="확인할 SSH 개인키 경로 (기본: ~/.ssh/id_ed25519)",
)
def check(ssh_key: Optional[str]) -> None:
    """git / gh 설치, gh 로그인, SSH 키를 점검 (변경 없음)"""
    lines, has_issues = check_environment(
        SubprocessRunner(),
        Path(ssh_key) if ssh_key else None,
    )

    click.echo("# Environment check")
    for line in lines:
        click.echo(f"- {line}")

    # CI 등에서 감지할 수 있도록 이슈가 있으면 exit 1
    if has_issues:
        sys.exit(1)
