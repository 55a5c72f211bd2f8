"""Tests for the Ollama embedding provider."""

import asyncio
import json

import httpx
import pytest

from chatter_rag.config.settings import EmbeddingConfig
from chatter_rag.embeddings import OllamaEmbedder, create_embedder
from chatter_rag.exceptions import EmbeddingBackendError

BASE_URL = "http://ollama.test:11434"


class OllamaStub:
    """Minimal Ollama API served through httpx.MockTransport."""

    def __init__(self, models=("nomic-embed-text:latest",), embed_status=200, fail_input=None, embed_body=None):
        self.models = list(models)
        self.embed_body = embed_body if embed_body is not None else {"embeddings": [[1.0, 2, 3.5]]}
        self.embed_status = embed_status
        self.fail_input = fail_input
        self.tags_calls = 0
        self.embed_payloads = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            self.tags_calls += 1
            return httpx.Response(200, json={"models": [{"name": name} for name in self.models]})

        if request.url.path == "/api/embed":
            payload = json.loads(request.content)
            self.embed_payloads.append(payload)
            if self.embed_status != 200 or payload["input"] == self.fail_input:
                return httpx.Response(500, json={"error": "model crashed"})
            return httpx.Response(200, json=self.embed_body)

        return httpx.Response(404)


def make_embedder(handler, model_name="nomic-embed-text", **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OllamaEmbedder(f"{BASE_URL}/", model_name, client=client, **kwargs), client


class TestAvailability:

    @pytest.mark.asyncio
    async def test_available_when_model_listed(self):
        embedder, _ = make_embedder(OllamaStub())

        assert await embedder.check_availability() is True

    @pytest.mark.asyncio
    async def test_model_match_is_case_insensitive(self):
        embedder, _ = make_embedder(OllamaStub(), model_name="Nomic-Embed-Text")

        assert await embedder.check_availability() is True

    @pytest.mark.asyncio
    async def test_unavailable_when_model_missing(self):
        embedder, _ = make_embedder(OllamaStub(models=["llama3:8b"]))

        assert await embedder.check_availability() is False

    @pytest.mark.asyncio
    async def test_unavailable_when_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        embedder, _ = make_embedder(refuse)

        assert await embedder.check_availability() is False

    @pytest.mark.asyncio
    async def test_concurrent_checks_probe_once(self):
        stub = OllamaStub()
        embedder, _ = make_embedder(stub)

        results = await asyncio.gather(*(embedder.check_availability() for _ in range(5)))

        assert results == [True] * 5
        assert stub.tags_calls == 1


    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        [{"name": "nomic-embed-text"}],
        {"models": "nomic-embed-text"},
        {"models": [["nomic-embed-text"]]},
    ])
    async def test_unavailable_when_listing_is_malformed(self, body):
        embedder, _ = make_embedder(lambda request: httpx.Response(200, json=body))

        assert await embedder.check_availability() is False


class TestEmbed:

    @pytest.mark.asyncio
    async def test_embed_posts_model_and_input(self):
        stub = OllamaStub()
        embedder, _ = make_embedder(stub)

        vector = await embedder.embed("hello world")

        assert vector == [1.0, 2.0, 3.5]
        assert stub.embed_payloads == [{"model": "nomic-embed-text", "input": "hello world"}]

    @pytest.mark.asyncio
    async def test_embed_raises_on_http_error(self):
        embedder, _ = make_embedder(OllamaStub(embed_status=500))

        with pytest.raises(EmbeddingBackendError) as exc_info:
            await embedder.embed("hello")

        assert BASE_URL in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_embed_raises_on_empty_response(self):
        embedder, _ = make_embedder(lambda request: httpx.Response(200, json={"embeddings": []}))

        with pytest.raises(EmbeddingBackendError):
            await embedder.embed("hello")

    @pytest.mark.asyncio
    async def test_embed_raises_on_timeout(self):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        embedder, _ = make_embedder(slow)

        with pytest.raises(EmbeddingBackendError):
            await embedder.embed("hello")

    @pytest.mark.asyncio
    async def test_embed_batch_maps_failures_to_none(self):
        embedder, _ = make_embedder(OllamaStub(fail_input="bad"))

        vectors = await embedder.embed_batch(["good", "bad", "also good"])

        assert vectors[0] == [1.0, 2.0, 3.5]
        assert vectors[1] is None
        assert vectors[2] == [1.0, 2.0, 3.5]


    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"embeddings": [[1.0, None]]},
        {"embeddings": [["one", "two"]]},
        {"embeddings": 3},
        [[1.0, 2.0]],
        "not an object",
    ])
    async def test_embed_raises_on_malformed_payload(self, body):
        embedder, _ = make_embedder(OllamaStub(embed_body=body))

        with pytest.raises(EmbeddingBackendError) as exc_info:
            await embedder.embed("hello")

        assert "unexpected shape" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_embed_batch_bounds_concurrent_requests(self):
        in_flight = 0
        max_in_flight = 0

        async def slow_embed(request):
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return httpx.Response(200, json={"embeddings": [[1.0]]})

        embedder, _ = make_embedder(slow_embed, batch_concurrency=2)

        vectors = await embedder.embed_batch([f"text {i}" for i in range(8)])

        assert vectors == [[1.0]] * 8
        assert max_in_flight == 2

    @pytest.mark.asyncio
    async def test_embed_batch_settles_every_request_before_returning(self):
        in_flight = 0
        finished = []

        async def handler(request):
            nonlocal in_flight
            text = json.loads(request.content)["input"]
            in_flight += 1
            try:
                if text == "bad":
                    return httpx.Response(500, json={"error": "model crashed"})
                await asyncio.sleep(0.02)
                finished.append(text)
                return httpx.Response(200, json={"embeddings": [[1.0]]})
            finally:
                in_flight -= 1

        embedder, _ = make_embedder(handler)

        vectors = await embedder.embed_batch(["bad", "slow one", "slow two"])

        assert vectors == [None, [1.0], [1.0]]
        assert in_flight == 0
        assert sorted(finished) == ["slow one", "slow two"]


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self):
        embedder, client = make_embedder(OllamaStub())

        await embedder.close()

        assert client.is_closed is False
        await client.aclose()

    def test_model_name(self):
        embedder, _ = make_embedder(OllamaStub())

        assert embedder.model_name == "nomic-embed-text"
        assert embedder.base_url == BASE_URL


class TestFactory:

    def test_creates_ollama_embedder(self, tmp_path):
        config = EmbeddingConfig(ollama_base_url="http://gpu-box:11434", model_name="bge-m3", data_dir=tmp_path)

        embedder = create_embedder(config)

        assert isinstance(embedder, OllamaEmbedder)
        assert embedder.base_url == "http://gpu-box:11434"
        assert embedder.model_name == "bge-m3"

    def test_unknown_provider(self, tmp_path):
        config = EmbeddingConfig(embedding_provider="bedrock", data_dir=tmp_path)

        with pytest.raises(ValueError, match="Unknown embedding provider"):
            create_embedder(config)
