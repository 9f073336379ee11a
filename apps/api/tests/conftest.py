import json
from types import SimpleNamespace
from typing import List, Optional

import httpx
import pytest

from cherrypick.models import Commit, CommitStatus, Repository
from cherrypick.services.demo_data import demo_repositories


def make_commit(
    id: str,
    message: str = "chore: tidy",
    hash: Optional[str] = None,
    author: str = "Jane Doe",
    files: Optional[List[str]] = None,
    status: Optional[CommitStatus] = None,
) -> Commit:
    return Commit(
        id=id,
        hash=hash or (id.encode().hex() + "0" * 40)[:40],
        author=author,
        date="2024-05-01T12:00:00+00:00",
        message=message,
        files_changed=files or [],
        origin_repository="SourceApp",
        status=status,
    )


def make_repo(id: str, commits: List[Commit], name: Optional[str] = None) -> Repository:
    return Repository(id=id, name=name or id, url=f"git@example.com:{id}.git", branch="main", commits=commits)


def fake_query(*messages):
    """Stand-in for claude_code_sdk.query yielding canned messages"""
    calls = []

    async def _query(prompt, options=None):
        calls.append(prompt)
        for message in messages:
            yield message

    _query.calls = calls
    return _query


def result_message(text, is_error=False):
    return SimpleNamespace(result=text, is_error=is_error)


def json_transport(routes):
    """httpx transport answering ``{(method, path): (status, body)}``; others fail to connect"""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.content))
        key = (request.method, request.url.path)
        if key not in routes:
            raise httpx.ConnectError("connection refused", request=request)
        status, body = routes[key]
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    transport = httpx.MockTransport(handler)
    transport.seen = seen
    return transport


def down_transport():
    return json_transport({})


def request_json(content: bytes):
    return json.loads(content.decode())


@pytest.fixture
def demo():
    return demo_repositories()
