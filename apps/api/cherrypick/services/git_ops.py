import subprocess

# Separators git never emits inside a log field
_RECORD = "\x1e"
_FIELD = "\x01"
_END = "\x02"


def _run(cmd: list[str], cwd: str) -> str:
    res = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True)
    return res.stdout.strip()


def list_commits(repo_path: str, limit: int = 50) -> list[dict]:
    """Most recent commits first, with full message and touched paths.

    The full body is kept so ``(cherry picked from commit ...)`` trailers
    written by ``git cherry-pick -x`` stay visible.
    """
    fmt = f"{_RECORD}%H{_FIELD}%an{_FIELD}%aI{_FIELD}%B{_END}"
    out = _run(
        ["git", "log", f"-n{limit}", f"--pretty=format:{fmt}", "--name-only"],
        cwd=repo_path,
    )
    commits: list[dict] = []
    if not out:
        return commits
    for record in out.split(_RECORD):
        if not record.strip():
            continue
        meta, _, names = record.partition(_END)
        sha, author, date, body = meta.split(_FIELD, 3)
        commits.append({
            "commit_sha": sha.strip(),
            "author": author,
            "date": date,
            "message": body.strip(),
            "files_changed": [p for p in names.splitlines() if p.strip()],
        })
    return commits


def get_remote_url(repo_path: str, remote_name: str = "origin") -> str:
    """Get remote URL"""
    try:
        return _run(["git", "remote", "get-url", remote_name], cwd=repo_path)
    except subprocess.CalledProcessError:
        return ""


def get_current_branch(repo_path: str) -> str:
    """Get current branch name"""
    try:
        return _run(["git", "branch", "--show-current"], cwd=repo_path) or "HEAD"
    except subprocess.CalledProcessError:
        return "main"  # fallback to main
