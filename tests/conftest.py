"""
pytest 설정:

다른 버전의 github_deploy 패키지가 site-packages 에 설치되어 있어도
항상 현재 레포의 소스를 테스트하도록 repo root 를 sys.path 최상단에 고정한다.

git / gh / GitHub API 는 호출을 기록만 하는 가짜 객체로 대체한다.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Iterable, List, Optional, Sequence

import pytest


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


class FakeRunner:
    """
    CommandRunner 대용. 호출된 명령과 cwd 를 순서대로 기록한다.

    fail 에는 (명령 prefix, cwd 또는 None, 출력) 튜플을 넣는다.
    prefix 가 일치하고 cwd 가 None 이거나 같으면 CommandError 를 던진다.
    """

    def __init__(
        self,
        *,
        fail: Iterable[tuple[Sequence[str], Optional[str], str]] = (),
        outputs: Optional[dict[tuple[str, ...], str]] = None,
    ) -> None:
        self.calls: List[tuple[list[str], Optional[str]]] = []
        self.fail = [(tuple(prefix), cwd, output) for prefix, cwd, output in fail]
        self.outputs = outputs or {}

    def run(self, cmd, *, cwd=None, stream_output=False, secret=False):  # noqa: ANN001, ARG002
        from github_deploy.subprocess_utils import CommandError, RunResult

        cmd = list(cmd)
        self.calls.append((cmd, cwd))

        for prefix, fail_cwd, output in self.fail:
            if tuple(cmd[: len(prefix)]) == prefix and (fail_cwd is None or fail_cwd == cwd):
                raise CommandError(f"fake failure: {' '.join(cmd)}", cmd=cmd, returncode=1, output=output)

        for prefix, out in self.outputs.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                return RunResult(returncode=0, stdout=out, stderr="")
        return RunResult(returncode=0, stdout="", stderr="")

    @property
    def commands(self) -> List[list[str]]:
        return [c for c, _ in self.calls]

    def git_calls(self, cwd: Optional[str] = None) -> List[list[str]]:
        return [c[1:] for c, d in self.calls if c[0] == "git" and (cwd is None or d == cwd)]


class FakeGitHub:
    """GitHubApi 대용. existing 에 (owner, name) 으로 이미 있는 리포를 지정한다."""

    def __init__(self, login: str = "acme", existing: Iterable[tuple[str, str]] = (), error_status: Optional[int] = None) -> None:
        self.login = login
        self.existing = set(existing)
        self.error_status = error_status
        self.calls: List[tuple[Any, ...]] = []

    def get_authenticated_user(self) -> str:
        self.calls.append(("get_authenticated_user",))
        return self.login

    def get_repo(self, owner: str, name: str) -> dict[str, Any]:
        from github_deploy.github_client import GitHubError

        self.calls.append(("get_repo", owner, name))
        if self.error_status is not None:
            raise GitHubError(self.error_status, f"GitHub API error {self.error_status}")
        if (owner, name) not in self.existing:
            raise GitHubError(404, "GitHub API error 404: Not Found")
        return {"full_name": f"{owner}/{name}"}

    def create_for_authenticated_user(self, name: str, private: bool) -> dict[str, Any]:
        self.calls.append(("create_for_authenticated_user", name, private))
        self.existing.add((self.login, name))
        return {"full_name": f"{self.login}/{name}"}

    def create_in_org(self, org: str, name: str, private: bool) -> dict[str, Any]:
        self.calls.append(("create_in_org", org, name, private))
        self.existing.add((org, name))
        return {"full_name": f"{org}/{name}"}

    @property
    def creates(self) -> List[tuple[Any, ...]]:
        return [c for c in self.calls if c[0].startswith("create")]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner(outputs={("gh", "auth", "token"): "gho_test_token\n"})


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """리포 생성 후 대기(2초)를 기록만 하고 실제로 자지 않는다."""
    from github_deploy import repos

    slept: List[float] = []
    monkeypatch.setattr(repos.time, "sleep", lambda s: slept.append(s))
    return slept


@pytest.fixture
def make_runner():  # noqa: ANN201
    def _make(**kwargs: Any) -> FakeRunner:
        kwargs.setdefault("outputs", {("gh", "auth", "token"): "gho_test_token\n"})
        return FakeRunner(**kwargs)

    return _make


@pytest.fixture
def make_github():  # noqa: ANN201
    return FakeGitHub
