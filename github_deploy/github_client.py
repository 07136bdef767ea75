"""
github_client
-------------

GitHub REST API 호출을 이 모듈 한 곳에 모은다.

배포 로직은 GitHubApi 가 노출하는 네 가지 동작만 사용한다.
- 인증된 사용자 조회
- owner/name 으로 리포 조회
- 인증된 사용자 계정에 리포 생성
- 조직(org)에 리포 생성
"""

from __future__ import annotations

from typing import Any, Protocol

import requests


API_BASE = "https://api.github.com"


class GitHubError(RuntimeError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubApi(Protocol):
    def get_authenticated_user(self) -> str:
        ...

    def get_repo(self, owner: str, name: str) -> dict[str, Any]:
        ...

    def create_for_authenticated_user(self, name: str, private: bool) -> dict[str, Any]:
        ...

    def create_in_org(self, org: str, name: str, private: bool) -> dict[str, Any]:
        ...


class GitHubClient:
    def __init__(self, token: str, api_base: str = API_BASE, *, session: requests.Session | None = None) -> None:
        if not token.strip():
            raise GitHubError(401, "GitHub token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "github-deploy",
        }

    def _request(self, method: str, path: str, *, json_body: dict[str, Any] | None = None) -> Any:
        url = f"{self._api_base}{path}"
        try:
            r = self._session.request(method, url, headers=self._headers(), json=json_body, timeout=30)
        except requests.RequestException as e:
            # 연결 실패 / 타임아웃은 HTTP 상태가 없으므로 0
            raise GitHubError(0, f"GitHub API request failed {method} {path}: {e}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            raise GitHubError(r.status_code, f"GitHub API error {r.status_code} {method} {path}: {message}")
        if r.status_code == 204:
            return None
        return r.json()

    def get_authenticated_user(self) -> str:
        data = self._request("GET", "/user")
        return str(data["login"])

    def get_repo(self, owner: str, name: str) -> dict[str, Any]:
        """존재하지 않으면 status_code=404 인 GitHubError."""
        return self._request("GET", f"/repos/{owner}/{name}")

    def create_for_authenticated_user(self, name: str, private: bool) -> dict[str, Any]:
        return self._request("POST", "/user/repos", json_body={"name": name, "private": private})

    def create_in_org(self, org: str, name: str, private: bool) -> dict[str, Any]:
        return self._request("POST", f"/orgs/{org}/repos", json_body={"name": name, "private": private})
