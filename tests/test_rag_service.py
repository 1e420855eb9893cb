import uuid
from types import SimpleNamespace

import pytest

from aria.core.exceptions import NotFoundError, PartialIngestionError, UpstreamError, ValidationError
from aria.schemas.rag import ChunkMatch
from aria.services.document_store import DocumentStore
from aria.services.rag_service import (
    build_context,
    embed_document,
    filter_matches,
    ingest_document,
    query_documents,
)


class FakeStore(DocumentStore):
    """In-memory store. ``search`` returns whatever ``canned`` holds, unranked."""

    def __init__(self, canned=None, fail_on_chunk=None):
        self.documents = {}
        self.chunks = []
        self.canned = canned or []
        self.fail_on_chunk = fail_on_chunk
        self.search_calls = []

    def insert_document(self, title, content, document_type, metadata=None, insurance_provider=None):
        document_id = str(uuid.uuid4())
        self.documents[document_id] = SimpleNamespace(
            id=document_id,
            title=title,
            content=content,
            document_type=document_type,
            insurance_provider=insurance_provider,
            metadata=metadata,
        )
        return document_id

    def insert_chunk(self, document_id, index, text, embedding, metadata=None):
        if index == self.fail_on_chunk:
            raise RuntimeError("disk full")
        self.chunks.append({"document_id": document_id, "index": index, "text": text, "metadata": metadata})

    def search(self, query_embedding, threshold, limit, category=None, insurance_provider=None):
        self.search_calls.append({"threshold": threshold, "limit": limit, "category": category})
        return list(self.canned)

    def stats(self):
        return {"connected": True, "documentsCount": len(self.documents), "embeddingsCount": len(self.chunks)}

    def get_document(self, document_id):
        return self.documents.get(document_id)

    def list_documents(self):
        return [
            {"id": d.id, "title": d.title, "chunk_count": len(self.get_chunks(d.id))}
            for d in self.documents.values()
        ]

    def get_chunks(self, document_id):
        return sorted((c for c in self.chunks if c["document_id"] == document_id), key=lambda c: c["index"])

    def delete_chunks(self, document_id):
        before = len(self.chunks)
        self.chunks = [c for c in self.chunks if c["document_id"] != document_id]
        return before - len(self.chunks)

    def delete_document(self, document_id):
        if self.documents.pop(document_id, None) is None:
            return False
        self.delete_chunks(document_id)
        return True


def _match(similarity, document_type="guideline", provider=None, title="Doc", index=0):
    return ChunkMatch(
        id=str(uuid.uuid4()),
        text=f"text {similarity}",
        similarity=similarity,
        document_id="doc-1",
        document_title=title,
        document_type=document_type,
        insurance_provider=provider,
        chunk_index=index,
        metadata={"category": document_type},
    )


THREE_SENTENCES = "Sentence one. Sentence two. Sentence three."


def test_ingest_embeds_each_chunk_in_order(embedder_factory):
    store = FakeStore()
    embedder = embedder_factory()

    result = ingest_document(
        store, embedder, "Guide", THREE_SENTENCES, "guideline", max_length=20
    )

    assert result.chunks_created == 3
    assert embedder.calls == ["Sentence one.", "Sentence two.", "Sentence three."]
    assert [c["index"] for c in store.chunks] == [0, 1, 2]
    assert all(c["document_id"] == result.document_id for c in store.chunks)
    assert store.chunks[0]["metadata"] == {"title": "Guide", "category": "guideline"}


def test_ingest_short_document_is_single_chunk(embedder_factory):
    store = FakeStore()
    result = ingest_document(store, embedder_factory(), "Guide", "Only one sentence here.", "guideline")
    assert result.chunks_created == 1


def test_embedding_failure_midway_leaves_earlier_chunks(embedder_factory):
    store = FakeStore()
    embedder = embedder_factory(fail_on=2)

    with pytest.raises(PartialIngestionError) as exc:
        ingest_document(store, embedder, "Guide", THREE_SENTENCES, "guideline", max_length=20)

    assert exc.value.chunks_created == 2
    assert exc.value.document_id in store.documents
    assert exc.value.details == {"documentId": exc.value.document_id, "chunksCreated": 2}
    assert [c["index"] for c in store.chunks] == [0, 1]
    assert isinstance(exc.value.__cause__, UpstreamError)


def test_store_failure_midway_is_partial_ingestion(embedder_factory):
    store = FakeStore(fail_on_chunk=1)
    with pytest.raises(PartialIngestionError) as exc:
        ingest_document(store, embedder_factory(), "Guide", THREE_SENTENCES, "guideline", max_length=20)
    assert exc.value.chunks_created == 1


@pytest.mark.parametrize("title,content,category,missing", [
    ("", "Body.", "guideline", "title"),
    ("Guide", "   ", "guideline", "content"),
    ("Guide", "Body.", None, "category"),
])
def test_ingest_missing_fields_is_validation_error(embedder_factory, title, content, category, missing):
    store = FakeStore()
    with pytest.raises(ValidationError) as exc:
        ingest_document(store, embedder_factory(), title, content, category)
    assert missing in exc.value.message
    assert store.documents == {}


def test_embed_document_uses_sliding_window(embedder_factory):
    store = FakeStore()
    document_id = store.insert_document("Manual", "x" * 950, "manual")

    result = embed_document(store, embedder_factory(), document_id, chunk_size=500, overlap=50)

    assert result.chunks_created == 2
    assert [len(c["text"]) for c in store.chunks] == [500, 500]


def test_embed_document_retry_after_partial_failure_starts_over(embedder_factory):
    store = FakeStore()
    document_id = store.insert_document("Manual", "y" * 1200, "manual")

    with pytest.raises(PartialIngestionError) as exc:
        embed_document(store, embedder_factory(fail_on=1), document_id, chunk_size=500, overlap=50)
    assert exc.value.chunks_created == 1

    result = embed_document(store, embedder_factory(), document_id, chunk_size=500, overlap=50)

    assert result.chunks_created == 3
    assert [c["index"] for c in store.get_chunks(document_id)] == [0, 1, 2]


def test_embed_document_twice_replaces_chunks(embedder_factory):
    store = FakeStore()
    document_id = store.insert_document("Manual", "z" * 950, "manual")

    embed_document(store, embedder_factory(), document_id, chunk_size=500, overlap=50)
    embed_document(store, embedder_factory(), document_id, chunk_size=500, overlap=50)

    assert len(store.get_chunks(document_id)) == 2


def test_document_store_contract_is_abstract():
    class IncompleteStore(DocumentStore):
        def insert_document(self, title, content, document_type, metadata=None, insurance_provider=None):
            return "id"

        def insert_chunk(self, document_id, index, text, embedding, metadata=None):
            pass

        def search(self, query_embedding, threshold, limit, category=None, insurance_provider=None):
            return []

        def stats(self):
            return {}

    with pytest.raises(TypeError):
        IncompleteStore()


def test_embed_document_unknown_id_is_not_found(embedder_factory):
    with pytest.raises(NotFoundError):
        embed_document(FakeStore(), embedder_factory(), "missing")


def test_query_drops_matches_below_threshold():
    store = FakeStore(canned=[_match(0.5), _match(0.82)])
    embedder_calls = []

    class Embedder:
        def embed(self, text):
            embedder_calls.append(text)
            return [1.0, 0.0, 0.0]

    result = query_documents(store, Embedder(), "PHI definition", match_count=3, threshold=0.7)

    assert [m.similarity for m in result.results] == [0.82]
    assert result.total_results == 1
    assert result.query == "PHI definition"
    assert embedder_calls == ["PHI definition"]
    assert result.processing_time >= 0


def test_query_ranks_and_limits(embedder_factory):
    store = FakeStore(canned=[_match(0.75), _match(0.95), _match(0.85), _match(0.9)])
    result = query_documents(store, embedder_factory(), "goals", match_count=2, threshold=0.7)
    assert [m.similarity for m in result.results] == [0.95, 0.9]
    assert store.search_calls[0]["limit"] == 2


def test_query_post_filters_by_category_and_provider(embedder_factory):
    store = FakeStore(canned=[
        _match(0.9, document_type="policy", provider="aetna"),
        _match(0.95, document_type="guideline"),
        _match(0.8, document_type="policy", provider="uhc"),
    ])
    result = query_documents(
        store, embedder_factory(), "hours", category="policy", insurance_provider="aetna", threshold=0.1
    )
    assert [(m.document_type, m.insurance_provider) for m in result.results] == [("policy", "aetna")]


def test_query_embedding_failure_propagates(embedder_factory):
    with pytest.raises(UpstreamError):
        query_documents(FakeStore(), embedder_factory(fail_on=0), "goals")


@pytest.mark.parametrize("kwargs", [
    {"query": ""},
    {"query": "goals", "match_count": 0},
    {"query": "goals", "match_count": 51},
    {"query": "goals", "threshold": 1.5},
    {"query": "goals", "threshold": -0.1},
])
def test_query_rejects_invalid_input(embedder_factory, kwargs):
    embedder = embedder_factory()
    with pytest.raises(ValidationError):
        query_documents(FakeStore(), embedder, **kwargs)
    assert embedder.calls == []


def test_filter_matches_without_filters_keeps_everything():
    matches = [_match(0.9), _match(0.8, document_type="policy")]
    assert filter_matches(matches) == matches


def test_build_context_orders_best_first():
    context = build_context([_match(0.75, title="Low"), _match(0.95, title="High")])
    assert context.index("[High]") < context.index("[Low]")
