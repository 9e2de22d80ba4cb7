from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest
from openai import AsyncOpenAI

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fakes import FakeVectorIndex
from orchard_desk.application import RetrievalService
from orchard_desk.core.config import Settings
from orchard_desk.infrastructure import ChromaVectorIndex, FailureKind, OpenAICompletionBackend, VectorIndexError
from orchard_desk.infrastructure.completion import classify_failure


class StubCollection:
    def __init__(self) -> None:
        self.added: list[dict] = []
        self.deleted: list[dict] = []

    def add(self, **kwargs) -> None:
        self.added.append(kwargs)

    def query(self, query_texts, n_results):
        return {"documents": [["first", None, "second"][:n_results]]}

    def delete(self, where) -> None:
        self.deleted.append(where)


class StubChroma:
    def __init__(self) -> None:
        self.collection = StubCollection()
        self.dropped: list[str] = []

    def get_or_create_collection(self, name):
        return self.collection

    def list_collections(self):
        return ["orchard_docs"]

    def delete_collection(self, name) -> None:
        if name == "missing":
            raise ValueError("Collection missing does not exist.")
        self.dropped.append(name)


def test_chroma_adapter_calls():
    stub = StubChroma()
    index = ChromaVectorIndex(client=stub)

    index.add("orchard_docs", ["f_chunk_0"], ["text"], [{"fileId": "f"}])
    index.delete_where("orchard_docs", {"fileId": "f"})

    assert stub.collection.added == [{"ids": ["f_chunk_0"], "documents": ["text"], "metadatas": [{"fileId": "f"}]}]
    assert stub.collection.deleted == [{"fileId": "f"}]
    assert index.query("orchard_docs", "q", 3) == ["first", "second"]
    assert index.list_collections() == ["orchard_docs"]


def test_chroma_errors_are_wrapped():
    index = ChromaVectorIndex(client=StubChroma())

    with pytest.raises(VectorIndexError) as excinfo:
        index.drop_collection("missing")

    assert "missing" in str(excinfo.value)


def _openai_backend(handler) -> OpenAICompletionBackend:
    client = AsyncOpenAI(
        api_key="test-key",
        base_url="https://typhoon.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return OpenAICompletionBackend("test-key", "https://typhoon.test/v1", client=client)


def test_openai_backend_returns_message_content():
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "cmpl-1",
                "object": "chat.completion",
                "created": 0,
                "model": "typhoon-v2.1-12b-instruct",
                "choices": [
                    {
                        "index": 0,
                        "finish_reason": "stop",
                        "message": {"role": "assistant", "content": "สวัสดีครับ"},
                    }
                ],
            },
        )

    backend = _openai_backend(handler)
    text = asyncio.run(
        backend.create(model="typhoon-v2.1-12b-instruct", messages=[{"role": "user", "content": "hi"}], top_p=0.9)
    )

    assert text == "สวัสดีครับ"
    assert captured["path"] == "/v1/chat/completions"
    assert captured["body"]["top_p"] == 0.9


@pytest.mark.parametrize(("status", "failure"), [(400, FailureKind.BAD_REQUEST), (404, FailureKind.NOT_FOUND), (401, FailureKind.AUTHORIZATION)])
def test_openai_errors_are_classified(status, failure):
    backend = _openai_backend(lambda request: httpx.Response(status, json={"error": {"message": "nope"}}))

    with pytest.raises(Exception) as excinfo:
        asyncio.run(backend.create(model="m", messages=[{"role": "user", "content": "hi"}]))

    assert classify_failure(excinfo.value) is failure


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ORCHARD_DATA_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("TYPHOON_MODEL", "typhoon-custom")
    monkeypatch.setenv("RETRIEVAL_TOP_K", "5")
    monkeypatch.setenv("API_CORS_ORIGINS", "https://a.example, https://b.example")

    settings = Settings.from_env()

    assert settings.data_dir == tmp_path / "state"
    assert settings.uploads_path == tmp_path / "state" / "uploads"
    assert settings.typhoon_model == "typhoon-custom"
    assert settings.retrieval_top_k == 5
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_retrieval_upsert_replaces_chunks_in_its_collection():
    index = FakeVectorIndex()
    retrieval = RetrievalService(index, "docs")

    asyncio.run(retrieval.upsert("f", ["old one", "old two"], {"source": "a.txt"}))
    count = asyncio.run(retrieval.upsert("f", ["new"], {"source": "a.txt"}))

    assert count == 1
    assert index.chunks("docs") == {
        "f_chunk_0": ("new", {"source": "a.txt", "fileId": "f", "chunkIndex": 0}),
    }

    asyncio.run(retrieval.delete_by_file_id("f"))

    assert index.chunks("docs") == {}
