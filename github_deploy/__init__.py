"""
github_deploy
-------------

정적 사이트 빌드가 끝난 뒤 빌드 결과물(dist)과 소스 트리를
GitHub 리포지토리로 SSH force-push 하는 배포 플러그인 패키지.
리포지토리가 없으면 GitHub API 로 먼저 생성한다.
"""

__all__ = [
    "config",
    "orchestrator",
    "plugin",
]
