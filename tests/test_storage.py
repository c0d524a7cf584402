import json

from archivekit.progress.storage import JSONFileKeyValueStore, MemoryKeyValueStore


def test_memory_store_basic_operations():
    store = MemoryKeyValueStore()
    assert store.load("k") is None
    store.store("k", b"value")
    assert store.load("k") == b"value"
    store.remove("k")
    store.remove("k")
    assert store.load("k") is None


def test_bool_and_str_helpers():
    store = MemoryKeyValueStore()
    assert store.load_bool("flag") is False
    store.store_bool("flag", True)
    assert store.load_bool("flag") is True

    store.store_str("name", "en")
    assert store.load_str("name") == "en"
    store.store_str("name", None)
    assert store.load_str("name") is None


def test_unreadable_flag_counts_as_false():
    store = MemoryKeyValueStore()
    store.store("flag", b"\x00garbage")
    assert store.load_bool("flag") is False


def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "kv.json"
    store = JSONFileKeyValueStore(str(path))
    store.store("a", b"\x00\x01binary")
    store.store("b", b"text")

    reopened = JSONFileKeyValueStore(str(path))
    assert reopened.load("a") == b"\x00\x01binary"
    assert reopened.load("b") == b"text"

    reopened.remove("a")
    assert JSONFileKeyValueStore(str(path)).load("a") is None
    assert set(json.loads(path.read_text(encoding="utf-8"))) == {"b"}


def test_json_file_store_missing_or_corrupt_file(tmp_path):
    path = tmp_path / "kv.json"
    store = JSONFileKeyValueStore(str(path))
    assert store.load("anything") is None

    path.write_text("{broken", encoding="utf-8")
    assert store.load("anything") is None
    store.store("k", b"v")
    assert store.load("k") == b"v"


def test_json_file_store_leaves_no_temp_files(tmp_path):
    store = JSONFileKeyValueStore(str(tmp_path / "kv.json"))
    store.store("k", b"v")
    assert [p.name for p in tmp_path.iterdir()] == ["kv.json"]
