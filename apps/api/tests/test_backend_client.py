import httpx
import pytest

from cherrypick.models import CommitStatus
from cherrypick.services.backend_client import BackendClient, BackendError

from conftest import down_transport, json_transport, request_json

BASE = "http://backend.test/api"


def client_for(transport):
    return BackendClient(base_url=BASE, timeout=0.5, transport=transport)


@pytest.mark.asyncio
async def test_get_repositories(demo):
    transport = json_transport({("GET", "/api/repos"): (200, demo.model_dump(mode="json", by_alias=True))})
    pair = await client_for(transport).get_repositories()
    assert pair.source.id == "repo-src"
    assert pair.target.commits[0].files_changed == ["src/services/auth.ts"]


@pytest.mark.asyncio
async def test_unusable_repositories_raise(demo):
    transport = json_transport({("GET", "/api/repos"): (200, {"source": "nope"})})
    with pytest.raises(BackendError):
        await client_for(transport).get_repositories()


@pytest.mark.asyncio
async def test_analyze_posts_both_repositories_and_adopts_response(demo):
    returned = [c.as_picked().model_dump(mode="json", by_alias=True) for c in demo.source.commits]
    transport = json_transport({("POST", "/api/analyze"): (200, returned)})

    commits = await client_for(transport).analyze(demo.source, demo.target)

    assert all(c.status is CommitStatus.PICKED for c in commits)
    body = request_json(transport.seen[0][2])
    assert body["source"]["id"] == "repo-src"
    assert "filesChanged" in body["target"]["commits"][0]


@pytest.mark.asyncio
async def test_malformed_analysis_means_no_duplicates(demo):
    transport = json_transport({("POST", "/api/analyze"): (200, {"unexpected": True})})
    commits = await client_for(transport).analyze(demo.source, demo.target)
    assert commits == list(demo.source.commits)


@pytest.mark.asyncio
async def test_non_2xx_raises_with_status(demo):
    transport = json_transport({("POST", "/api/analyze"): (500, {"detail": "boom"})})
    with pytest.raises(BackendError) as exc:
        await client_for(transport).analyze(demo.source, demo.target)
    assert exc.value.status_code == 500


@pytest.mark.asyncio
async def test_unreachable_backend_raises(demo):
    with pytest.raises(BackendError):
        await client_for(down_transport()).analyze(demo.source, demo.target)


@pytest.mark.asyncio
async def test_timeout_raises():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(BackendError) as exc:
        await client_for(httpx.MockTransport(handler)).cherry_pick(["c1"], "repo-tgt")
    assert "timed out" in exc.value.message


@pytest.mark.asyncio
async def test_cherry_pick_request_and_response():
    transport = json_transport({("POST", "/api/cherry-pick"): (200, {"success": True, "logs": ["ok c1", "ok c3"]})})

    result = await client_for(transport).cherry_pick(["c1", "c3"], "repo-tgt")

    assert result.success is True
    assert result.logs == ["ok c1", "ok c3"]
    assert request_json(transport.seen[0][2]) == {"commitIds": ["c1", "c3"], "targetRepositoryId": "repo-tgt"}


@pytest.mark.asyncio
async def test_cherry_pick_malformed_body_produces_no_logs():
    transport = json_transport({("POST", "/api/cherry-pick"): (200, "not json")})
    result = await client_for(transport).cherry_pick(["c1"], "repo-tgt")
    assert result.success is False
    assert result.logs == []


@pytest.mark.asyncio
async def test_health():
    assert await client_for(json_transport({("GET", "/api/health"): (200, {"ok": True})})).check_health() is True
    assert await client_for(json_transport({("GET", "/api/health"): (503, {})})).check_health() is False
    assert await client_for(down_transport()).check_health() is False
