"""
Tests for the Semantic Scholar batch client.
"""

import asyncio
import json

import httpx
import pytest
import respx

from citation_graph.config import RATE_LIMIT_EXHAUSTED_HEADER
from citation_graph.core.client import SemanticScholarClient
from citation_graph.core.exceptions import (
    RateLimitError,
    ResponseParseError,
    TransportError,
    UpstreamError,
)
from citation_graph.core.models import PaperIdentifier, PaperStub

BASE_URL = "https://s2.test/graph/v1"
BATCH_PATH = "/graph/v1/paper/batch"


def _paper(paper_id: str, refs: list) -> dict:
    return {
        "paperId": paper_id,
        "title": f"Paper {paper_id}",
        "url": f"https://www.semanticscholar.org/paper/{paper_id}",
        "references": refs,
    }


def _echo_batch(request: httpx.Request) -> httpx.Response:
    """Answer every id with a paper of the same id."""
    ids = json.loads(request.content)["ids"]
    return httpx.Response(200, json=[_paper(pid, []) for pid in ids])


@pytest.fixture
def client() -> SemanticScholarClient:
    return SemanticScholarClient(base_url=BASE_URL, retry_delay=0, max_attempts=3)


class TestFetchBatch:
    """Tests for SemanticScholarClient.fetch_batch."""

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_empty_input_makes_no_request(self, client: SemanticScholarClient):
        route = respx.post(host="s2.test", path=BATCH_PATH)

        assert await client.fetch_batch([]) == []
        assert not route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_parses_records(self, client: SemanticScholarClient):
        respx.post(host="s2.test", path=BATCH_PATH).mock(
            return_value=httpx.Response(
                200,
                json=[
                    _paper("p1", [
                        {"paperId": "r1", "title": "Ref 1", "url": "https://example.org/r1"},
                        {"paperId": None, "title": "Unresolved", "url": None},
                        {"paperId": "r2", "title": None},
                    ]),
                    None,
                ],
            )
        )

        records = await client.fetch_batch(
            [PaperIdentifier.native("p1"), PaperIdentifier.doi("10.1/missing")]
        )
        await client.close()

        assert len(records) == 2
        assert records[1] is None
        record = records[0]
        assert record.id == "p1"
        assert record.title == "Paper p1"
        assert record.references == (
            PaperStub(id="r1", title="Ref 1", url="https://example.org/r1"),
            PaperStub(id=None, title="Unresolved", url=None),
            PaperStub(id="r2", title="Unknown Title", url=None),
        )
        assert record.reference_ids() == ["r1", "r2"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_request_shape(self):
        client = SemanticScholarClient(base_url=BASE_URL, api_key="secret")
        route = respx.post(host="s2.test", path=BATCH_PATH).mock(side_effect=_echo_batch)

        await client.fetch_batch(
            [PaperIdentifier.doi("10.1016/j.jterra.2024.100989"), PaperIdentifier.native("abc")]
        )
        await client.close()

        request = route.calls.last.request
        assert json.loads(request.content) == {
            "ids": ["DOI:10.1016/j.jterra.2024.100989", "abc"]
        }
        assert request.headers["x-api-key"] == "secret"
        assert request.url.params["fields"] == (
            "title,url,references.paperId,references.title,references.url"
        )

    @pytest.mark.asyncio
    @respx.mock
    async def test_chunks_and_keeps_order(self):
        client = SemanticScholarClient(base_url=BASE_URL, max_batch_size=2)
        route = respx.post(host="s2.test", path=BATCH_PATH).mock(side_effect=_echo_batch)
        ids = [PaperIdentifier.native(f"p{i}") for i in range(5)]

        records = await client.fetch_batch(ids)
        await client.close()

        assert route.call_count == 3
        sizes = sorted(len(json.loads(call.request.content)["ids"]) for call in route.calls)
        assert sizes == [1, 2, 2]
        assert [record.id for record in records] == ["p0", "p1", "p2", "p3", "p4"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_too_many_requests(self, client: SemanticScholarClient):
        route = respx.post(host="s2.test", path=BATCH_PATH).mock(
            side_effect=[
                httpx.Response(429),
                httpx.Response(429),
                httpx.Response(200, json=[_paper("p1", [])]),
            ]
        )

        records = await client.fetch_batch([PaperIdentifier.native("p1")])
        await client.close()

        assert route.call_count == 3
        assert records[0].id == "p1"

    @pytest.mark.asyncio
    @respx.mock
    async def test_rate_limit_exhausted(self, client: SemanticScholarClient):
        route = respx.post(host="s2.test", path=BATCH_PATH).mock(
            return_value=httpx.Response(429)
        )

        with pytest.raises(RateLimitError) as exc_info:
            await client.fetch_batch([PaperIdentifier.native("p1")])
        await client.close()

        assert route.call_count == 3
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    @respx.mock
    async def test_proxy_gateway_timeout_is_rate_limit(self, client: SemanticScholarClient):
        route = respx.post(host="s2.test", path=BATCH_PATH).mock(
            return_value=httpx.Response(
                504,
                json={"error": "rate limited"},
                headers={RATE_LIMIT_EXHAUSTED_HEADER: "true"},
            )
        )

        with pytest.raises(RateLimitError) as exc_info:
            await client.fetch_batch([PaperIdentifier.native("p1")])
        await client.close()

        assert route.call_count == 1
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    @respx.mock
    async def test_unmarked_gateway_timeout_is_upstream_error(
        self, client: SemanticScholarClient
    ):
        """A 504 the proxy merely passed through means the upstream is broken."""
        route = respx.post(host="s2.test", path=BATCH_PATH).mock(
            return_value=httpx.Response(504, json={"message": "Endpoint request timed out"})
        )

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_batch([PaperIdentifier.native("p1")])
        await client.close()

        assert route.call_count == 1
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_sub_batch_cancels_the_others(self):
        """No request goes out once fetch_batch has raised."""
        client = SemanticScholarClient(
            base_url=BASE_URL, max_batch_size=1, max_attempts=5, retry_delay=0.05
        )

        def answer(request: httpx.Request) -> httpx.Response:
            if json.loads(request.content)["ids"] == ["p0"]:
                return httpx.Response(500, text="boom")
            return httpx.Response(429)

        route = respx.post(host="s2.test", path=BATCH_PATH).mock(side_effect=answer)

        with pytest.raises(UpstreamError):
            await client.fetch_batch([PaperIdentifier.native("p0"), PaperIdentifier.native("p1")])
        calls_at_abort = route.call_count

        # Long enough for several retries of p1 had it kept running
        await asyncio.sleep(0.4)
        await client.close()

        assert route.call_count == calls_at_abort

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 403, 500, 502])
    @respx.mock
    async def test_other_errors_are_not_retried(
        self, status_code: int, client: SemanticScholarClient
    ):
        route = respx.post(host="s2.test", path=BATCH_PATH).mock(
            return_value=httpx.Response(status_code, text="nope")
        )

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_batch([PaperIdentifier.native("p1")])
        await client.close()

        assert route.call_count == 1
        assert exc_info.value.status_code == status_code
        assert exc_info.value.body == "nope"

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json(self, client: SemanticScholarClient):
        respx.post(host="s2.test", path=BATCH_PATH).mock(
            return_value=httpx.Response(200, text="<html>oops</html>")
        )

        with pytest.raises(ResponseParseError) as exc_info:
            await client.fetch_batch([PaperIdentifier.native("p1")])
        await client.close()

        assert exc_info.value.text == "<html>oops</html>"

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_list_body(self, client: SemanticScholarClient):
        respx.post(host="s2.test", path=BATCH_PATH).mock(
            return_value=httpx.Response(200, json={"error": "bad"})
        )

        with pytest.raises(ResponseParseError):
            await client.fetch_batch([PaperIdentifier.native("p1")])
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error(self, client: SemanticScholarClient):
        respx.post(host="s2.test", path=BATCH_PATH).mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        with pytest.raises(TransportError):
            await client.fetch_batch([PaperIdentifier.native("p1")])
        await client.close()


class TestClientInit:
    """Tests for SemanticScholarClient initialization."""

    def test_defaults(self):
        client = SemanticScholarClient()
        assert client.base_url == "https://api.semanticscholar.org/graph/v1"
        assert client.max_batch_size == 500
        assert client.api_key is None

    def test_strips_trailing_slash(self):
        assert SemanticScholarClient(base_url=BASE_URL + "/").base_url == BASE_URL

    def test_rejects_bad_limits(self):
        with pytest.raises(ValueError):
            SemanticScholarClient(max_batch_size=0)
        with pytest.raises(ValueError):
            SemanticScholarClient(max_attempts=0)
