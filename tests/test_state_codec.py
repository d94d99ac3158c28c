import base64

import orjson

from state import (
    STORAGE_KEY,
    FileStorage,
    MemoryStorage,
    clear_adoption_state,
    decode_adoption_state,
    encode_adoption_state,
    get_adoption_state_from_url,
    has_legacy_feature_flag,
    load_adoption_state,
    save_adoption_state,
    update_url_with_adoption_state,
)


class FailingStorage:
    def get_item(self, key):
        raise PermissionError("denied")

    def set_item(self, key, value):
        raise OSError("quota exceeded")

    def remove_item(self, key):
        raise PermissionError("denied")


def test_encode_is_sorted_base64() -> None:
    encoded = encode_adoption_state({"b", "a"})
    assert base64.b64decode(encoded).decode() == "a,b"
    assert encoded == encode_adoption_state(["a", "b"])
    assert encode_adoption_state(set()) == ""
    assert encode_adoption_state(None) == ""


def test_decode_inverts_encode() -> None:
    ids = {"continuous-integration", "trunk-based-development"}
    assert decode_adoption_state(encode_adoption_state(ids)) == ids


def test_decode_trims_and_tolerates_garbage() -> None:
    raw = base64.b64encode(b" a , ,b,").decode()
    assert decode_adoption_state(raw) == {"a", "b"}
    assert decode_adoption_state("") == frozenset()
    assert decode_adoption_state(None) == frozenset()
    assert decode_adoption_state("not-valid-base64!") == frozenset()


def test_get_from_url() -> None:
    encoded = encode_adoption_state({"a", "b"})
    assert get_adoption_state_from_url(f"/practices?adopted={encoded}") == {"a", "b"}
    assert get_adoption_state_from_url("/practices") is None
    assert get_adoption_state_from_url("/practices?adopted=") is None
    assert get_adoption_state_from_url("/practices?adopted=%%%bad") == frozenset()


def test_get_from_url_handles_percent_encoding() -> None:
    value = base64.b64encode(b"a>>,b??").decode()
    assert "+" in value or "/" in value or "=" in value
    url = "https://example.com/?adopted=" + value.replace("+", "%2B").replace("/", "%2F").replace("=", "%3D")
    assert get_adoption_state_from_url(url) == {"a>>", "b??"}


def test_update_url_preserves_other_params() -> None:
    url = "https://example.com/practices?feature=practice-adoption&other=1#top"
    updated = update_url_with_adoption_state(url, {"a"})
    assert updated.startswith("https://example.com/practices?feature=practice-adoption&other=1&adopted=")
    assert updated.endswith("#top")
    assert get_adoption_state_from_url(updated) == {"a"}
    assert has_legacy_feature_flag(updated)


def test_update_url_removes_param_when_empty_and_never_adds_feature() -> None:
    url = update_url_with_adoption_state("/p?x=1", {"a", "b"})
    assert "feature" not in url
    assert update_url_with_adoption_state(url, set()) == "/p?x=1"
    assert update_url_with_adoption_state("/p", set()) == "/p"
    assert not has_legacy_feature_flag("/p?x=1")


def test_save_and_load_round_trip() -> None:
    storage = MemoryStorage()
    save_adoption_state(storage, {"b", "a"})
    assert storage.get_item(STORAGE_KEY) == '["a","b"]'
    assert load_adoption_state(storage) == {"a", "b"}


def test_save_none_writes_empty_array() -> None:
    storage = MemoryStorage()
    save_adoption_state(storage, None)
    assert storage.get_item(STORAGE_KEY) == "[]"
    assert load_adoption_state(storage) == frozenset()


def test_load_degrades_to_none() -> None:
    assert load_adoption_state(MemoryStorage()) is None
    assert load_adoption_state(MemoryStorage({STORAGE_KEY: "{oops"})) is None
    assert load_adoption_state(MemoryStorage({STORAGE_KEY: '{"a": 1}'})) is None
    assert load_adoption_state(FailingStorage()) is None


def test_load_filters_and_stringifies_entries() -> None:
    assert load_adoption_state(MemoryStorage({STORAGE_KEY: '["a", "", null, 1]'})) == {"a", "1"}


def test_storage_errors_never_escape() -> None:
    save_adoption_state(FailingStorage(), {"a"})
    clear_adoption_state(FailingStorage())


def test_clear() -> None:
    storage = MemoryStorage({STORAGE_KEY: '["a"]', "other": "x"})
    clear_adoption_state(storage)
    assert storage.get_item(STORAGE_KEY) is None
    assert storage.get_item("other") == "x"
    clear_adoption_state(storage)


def test_file_storage(tmp_path) -> None:
    path = tmp_path / "state" / "storage.json"
    storage = FileStorage(path)
    assert load_adoption_state(storage) is None
    save_adoption_state(storage, {"x"})
    assert orjson.loads(path.read_bytes()) == {STORAGE_KEY: '["x"]'}
    assert load_adoption_state(FileStorage(path)) == {"x"}
    clear_adoption_state(storage)
    assert load_adoption_state(storage) is None


def test_file_storage_recovers_from_corrupt_file(tmp_path) -> None:
    path = tmp_path / "storage.json"
    path.write_bytes(b"{not json")
    storage = FileStorage(path)
    assert load_adoption_state(storage) is None
    save_adoption_state(storage, {"a"})
    assert load_adoption_state(storage) == {"a"}
    assert orjson.loads(path.read_bytes()) == {STORAGE_KEY: '["a"]'}
