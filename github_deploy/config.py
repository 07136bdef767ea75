from __future__ import annotations

import importlib.util
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Optional

from dotenv import dotenv_values

from .logging_utils import get_logger


logger = get_logger(__name__)


ENV_FILES_DEFAULT_ORDER = [".env", ".env.deploy"]

CONFIG_FILE_NAME = "starter_config.py"
BUILD_DIR_NAME = "dist"


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 앞선 파일의 같은 키를 덮어쓴다.
    실행 시점에 이미 설정된 환경변수(DEPLOY=true 등)는 파일이 덮어쓰지 않는다.
    """
    protected = set(os.environ)
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if not os.path.exists(path):
            continue
        for key, value in dotenv_values(path).items():
            # 값 없는 키는 dotenv 에서 None
            if value is None or key in protected:
                continue
            os.environ[key] = value


def is_deploy_enabled(env: Optional[Mapping[str, str]] = None) -> bool:
    # "1", "yes" 등은 받지 않는다. 정확히 "true" 일 때만 배포한다.
    source = os.environ if env is None else env
    return source.get("DEPLOY") == "true"


class DeploymentMode(str, Enum):
    NONE = "none"
    PUBLIC_ONLY = "public-only"
    SPLIT = "split"

    @classmethod
    def parse(cls, raw: str) -> Optional["DeploymentMode"]:
        """알 수 없는 값이면 None. 호출 측에서 경고 후 건너뛴다."""
        try:
            return cls(raw)
        except ValueError:
            return None


@dataclass
class DeploymentConfig:
    mode_raw: str = DeploymentMode.NONE.value
    branch: str = "main"
    public_repo: Optional[str] = None
    private_repo: Optional[str] = None

    @property
    def mode(self) -> Optional[DeploymentMode]:
        return DeploymentMode.parse(self.mode_raw)


@dataclass
class CdnConfig:
    base_url: Optional[str] = None
    user: Optional[str] = None
    repo: Optional[str] = None
    branch: Optional[str] = None
    org: bool = False

    @property
    def owner(self) -> Optional[str]:
        # org=True 일 때만 명시적인 owner. 아니면 인증된 사용자 계정으로 해석한다.
        return self.user if self.org is True else None


@dataclass
class StarterConfig:
    deploy: DeploymentConfig = field(default_factory=DeploymentConfig)
    cdn: CdnConfig = field(default_factory=CdnConfig)


def _pick(section: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    # starter_config 는 snake_case 와 JS 쪽 camelCase 키를 모두 허용한다.
    for name in names:
        if name in section and section[name] is not None:
            return section[name]
    return default


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    return vars(value)


def parse_starter_config(raw: Mapping[str, Any]) -> StarterConfig:
    deploy = _as_mapping(raw.get("deploy"))
    cdn = _as_mapping(raw.get("cdn"))

    return StarterConfig(
        deploy=DeploymentConfig(
            mode_raw=str(_pick(deploy, "mode", default=DeploymentMode.NONE.value)),
            branch=str(_pick(deploy, "branch", default="main")),
            public_repo=_pick(deploy, "public_repo", "publicRepo"),
            private_repo=_pick(deploy, "private_repo", "privateRepo"),
        ),
        cdn=CdnConfig(
            base_url=_pick(cdn, "base_url", "baseUrl"),
            user=_pick(cdn, "user"),
            repo=_pick(cdn, "repo"),
            branch=_pick(cdn, "branch"),
            org=_pick(cdn, "org", default=False) is True,
        ),
    )


def _import_config_module(path: Path) -> Mapping[str, Any]:
    spec = importlib.util.spec_from_file_location("starter_config", path)
    if spec is None or spec.loader is None:
        raise ValueError(f"설정 파일을 모듈로 불러올 수 없습니다: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # `config = {...}` 한 덩어리 또는 모듈 레벨 deploy / cdn 둘 다 지원
    exported = getattr(module, "config", None)
    if exported is not None:
        return _as_mapping(exported)
    return {
        "deploy": getattr(module, "deploy", None),
        "cdn": getattr(module, "cdn", None),
    }


def load_starter_config(path: str | os.PathLike[str]) -> Optional[StarterConfig]:
    """
    프로젝트 루트의 starter_config.py 를 읽어 deploy / cdn 설정을 돌려준다.

    파일이 없으면 배포 비활성으로 보고 경고만 남긴 뒤 None 을 리턴한다.
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.warning("[deploy] %s 파일이 없습니다. 배포를 건너뜁니다.", config_path.name)
        return None

    cfg = parse_starter_config(_import_config_module(config_path))
    logger.debug("Config loaded: %s", cfg)
    return cfg
