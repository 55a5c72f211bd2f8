"""Tests for the JSON file index store."""

import pytest

from chatter_rag.db.vector import FileIndexStore, sanitize_repository_name
from chatter_rag.exceptions import IndexStorageError
from chatter_rag.models.index import EmbeddingEntry, EmbeddingIndex


@pytest.fixture
def store(tmp_path):
    return FileIndexStore(tmp_path / "indices")


@pytest.fixture
def make_index(make_chunk):
    def _make_index(repository: str = "owner/repo", count: int = 2) -> EmbeddingIndex:
        entries = [
            EmbeddingEntry(
                chunk=make_chunk(content=f"chunk {i}", repository=repository, chunk_id=f"a.py:chunk_{i}"),
                embedding=[float(i), 1.0],
                norm=(i * i + 1.0) ** 0.5,
            )
            for i in range(count)
        ]
        return EmbeddingIndex(repository=repository, created_at=1700000000000, model_name="m", entries=entries)

    return _make_index


def test_sanitize_repository_name():
    assert sanitize_repository_name("owner/repo.git") == "owner_repo_git"
    assert sanitize_repository_name("my-repo_2") == "my-repo_2"
    assert sanitize_repository_name("a b:c") == "a_b_c"


def test_save_then_load(store, make_index):
    index = make_index()

    store.save(index)
    loaded = store.load("owner/repo")

    assert loaded == index


def test_save_uses_sanitized_file_name(store, make_index, tmp_path):
    store.save(make_index())

    assert (tmp_path / "indices" / "owner_repo.json").is_file()


def test_save_leaves_no_temp_files(store, make_index, tmp_path):
    store.save(make_index())
    store.save(make_index(count=3))

    assert sorted(p.name for p in (tmp_path / "indices").iterdir()) == ["owner_repo.json"]
    assert len(store.load("owner/repo").entries) == 3


def test_load_missing_repository(store):
    assert store.load("nothing-here") is None


def test_exists_and_delete(store, make_index):
    store.save(make_index())

    assert store.exists("owner/repo")
    assert store.delete("owner/repo") is True
    assert not store.exists("owner/repo")
    assert store.delete("owner/repo") is False


def test_list_repositories(store, make_index):
    assert store.list_repositories() == []

    store.save(make_index("zeta"))
    store.save(make_index("alpha/one"))

    assert store.list_repositories() == ["alpha_one", "zeta"]


def test_colliding_names_do_not_leak(store, make_index):
    """'a/b' and 'a_b' share a storage key; loading one never returns the other's entries."""
    store.save(make_index("a/b"))

    assert store.load("a_b") is None


def test_corrupt_index_raises(store, tmp_path):
    (tmp_path / "indices").mkdir()
    (tmp_path / "indices" / "broken.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(IndexStorageError):
        store.load("broken")


def test_unwritable_storage_raises(tmp_path, make_index):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    store = FileIndexStore(blocker / "indices")

    with pytest.raises(IndexStorageError) as exc_info:
        store.save(make_index())

    assert exc_info.value.repository == "owner/repo"


def test_colliding_names_exists_and_delete_agree_with_load(store, make_index):
    store.save(make_index("a_b"))

    assert store.load("a/b") is None
    assert store.exists("a/b") is False
    assert store.delete("a/b") is False

    assert store.exists("a_b") is True
    assert len(store.load("a_b").entries) == 2


def test_exists_is_false_for_unreadable_index(store, tmp_path):
    (tmp_path / "indices").mkdir()
    (tmp_path / "indices" / "broken.json").write_text("{not json", encoding="utf-8")

    assert store.exists("broken") is False
    assert store.delete("broken") is True
