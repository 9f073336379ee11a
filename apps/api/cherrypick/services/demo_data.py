"""Built-in repositories used when no backend or local checkout is available."""
from datetime import datetime, timedelta, timezone

from cherrypick.models import Commit, CommitStatus, Repository, RepositoryPair

SOURCE_NAME = "SourceApp"
TARGET_NAME = "TargetApp"


def _ago(now: datetime, **delta) -> str:
    return (now - timedelta(**delta)).isoformat()


def demo_repositories() -> RepositoryPair:
    now = datetime.now(timezone.utc)
    source_commits = [
        Commit(
            id="c1",
            hash="a3d9f2b1e8402938475c02938475c02938475c01",
            author="Jane Doe",
            date=_ago(now, hours=2),
            message="feat: add advanced search filtering to the dashboard",
            files_changed=["src/components/Search.tsx", "src/hooks/useSearch.ts"],
            status=CommitStatus.READY,
            origin_repository=SOURCE_NAME,
        ),
        Commit(
            id="c2",
            hash="b5c8e1a0d7391827364b91827364b91827364b02",
            author="John Smith",
            date=_ago(now, hours=5),
            message="fix: resolve race condition in authentication flow",
            files_changed=["src/services/auth.ts"],
            status=CommitStatus.READY,
            origin_repository=SOURCE_NAME,
        ),
        Commit(
            id="c3",
            hash="f9e0d1c2b3a45678901234567890123456789003",
            author="Jane Doe",
            date=_ago(now, days=1),
            message="docs: update deployment instructions for AWS",
            files_changed=["README.md", "DEPLOY.md"],
            status=CommitStatus.READY,
            origin_repository=SOURCE_NAME,
        ),
        Commit(
            id="c4",
            hash="d8c7b6a501234567890123456789012345678904",
            author="Alice Wong",
            date=_ago(now, days=2),
            message="refactor: cleanup redundant styles in common components",
            files_changed=["src/styles/base.css", "src/components/Button.tsx"],
            status=CommitStatus.READY,
            origin_repository=SOURCE_NAME,
        ),
        Commit(
            id="c5",
            hash="e7f6a5b4c3d2e1f0987654321098765432109805",
            author="Bob Vance",
            date=_ago(now, days=3),
            message="chore: bump dependencies for security patches",
            files_changed=["package.json", "package-lock.json"],
            status=CommitStatus.READY,
            origin_repository=SOURCE_NAME,
        ),
        Commit(
            id="c6",
            hash="0123456789abcdef0123456789abcdef01234567",
            author="John Smith",
            date=_ago(now, days=4),
            message="feat: implement real-time notifications via websockets",
            files_changed=["src/services/socket.ts", "src/App.tsx"],
            status=CommitStatus.READY,
            origin_repository=SOURCE_NAME,
        ),
    ]
    target_commits = [
        Commit(
            id="t1",
            hash="9f1e2d3c4b5a69788796a5b4c3d2e1f009182736",
            author="John Smith",
            date=_ago(now, hours=1),
            message="fix: resolve race condition in authentication flow (cherry picked from commit b5c8e1a)",
            files_changed=["src/services/auth.ts"],
            status=CommitStatus.PICKED,
            origin_repository=TARGET_NAME,
        ),
    ]
    return RepositoryPair(
        source=Repository(
            id="repo-src",
            name="core-platform-services",
            url="git@github.com:org/core-services.git",
            branch="main",
            commits=source_commits,
        ),
        target=Repository(
            id="repo-tgt",
            name="customer-facing-app",
            url="git@github.com:org/client-app.git",
            branch="release/v2.1",
            commits=target_commits,
        ),
    )
