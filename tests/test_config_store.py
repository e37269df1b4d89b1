import json
import threading

import pytest

from config_store import ConfigStore, ConfigValidationError
from models import DEFAULT_CONFIG

DEFAULTS = {
    "ssid": "DEFAULT_SSID",
    "password": "DEFAULT_PASS",
    "phoneNumber": "+261000000000",
    "startHour": 18,
    "endHour": 6,
}


def _on_disk(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_load_without_file_writes_defaults(tmp_path):
    path = tmp_path / "config.json"
    store = ConfigStore(path)

    record = store.load()

    assert record.to_wire() == DEFAULTS
    assert _on_disk(path) == DEFAULTS
    # pretty-printed
    assert path.read_text(encoding="utf-8").startswith("{\n  ")


def test_load_reads_existing_file(tmp_path):
    path = tmp_path / "config.json"
    saved = dict(DEFAULTS, ssid="HomeNet", startHour=22)
    path.write_text(json.dumps(saved), encoding="utf-8")

    record = ConfigStore(path).load()

    assert record.ssid == "HomeNet"
    assert record.start_hour == 22


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        json.dumps(dict(DEFAULTS, startHour=42)),
        json.dumps({"ssid": "only-one-field"}),
    ],
)
def test_load_falls_back_to_defaults_on_bad_file(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")

    record = ConfigStore(path).load()

    assert record.to_wire() == DEFAULTS
    assert _on_disk(path) == DEFAULTS


def test_load_never_raises_when_defaults_cannot_be_saved(tmp_path):
    store = ConfigStore(tmp_path / "missing" / "config.json")

    assert store.load().to_wire() == DEFAULTS


def test_partial_update_keeps_other_fields(tmp_path):
    path = tmp_path / "config.json"
    store = ConfigStore(path)
    store.load()

    record = store.update({"startHour": 20})

    assert record.start_hour == 20
    assert store.read().to_wire() == dict(DEFAULTS, startHour=20)
    assert _on_disk(path) == dict(DEFAULTS, startHour=20)


def test_update_ignores_unknown_keys(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    store.load()

    store.update({"ssid": "Cafe", "firmware": "1.2"})

    assert store.read().to_wire() == dict(DEFAULTS, ssid="Cafe")


@pytest.mark.parametrize(
    "partial, field",
    [
        ({"phoneNumber": "123"}, "phoneNumber"),
        ({"phoneNumber": "+12345678"}, "phoneNumber"),
        ({"phoneNumber": "+1234567890123456"}, "phoneNumber"),
        ({"phoneNumber": "+٢٦١٠٠٠٠٠٠٠٠٠"}, "phoneNumber"),
        ({"startHour": 24}, "startHour"),
        ({"startHour": -1}, "startHour"),
        ({"startHour": "20"}, "startHour"),
        ({"startHour": 20.5}, "startHour"),
        ({"endHour": True}, "endHour"),
        ({"ssid": 12}, "ssid"),
        ({"password": None}, "password"),
    ],
)
def test_invalid_update_is_rejected_and_nothing_changes(tmp_path, partial, field):
    path = tmp_path / "config.json"
    store = ConfigStore(path)
    store.load()

    with pytest.raises(ConfigValidationError) as excinfo:
        store.update(dict(partial))

    assert excinfo.value.field == field
    assert store.read().to_wire() == DEFAULTS
    assert _on_disk(path) == DEFAULTS


def test_valid_fields_are_not_applied_when_another_is_invalid(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    store.load()

    with pytest.raises(ConfigValidationError) as excinfo:
        store.update({"ssid": "NewNet", "endHour": 99})

    assert excinfo.value.field == "endHour"
    assert excinfo.value.message == "Invalid end hour (0-23)"
    assert store.read().ssid == "DEFAULT_SSID"


def test_first_failing_field_is_reported(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    store.load()

    with pytest.raises(ConfigValidationError) as excinfo:
        store.update({"endHour": 99, "phoneNumber": "abc"})

    assert excinfo.value.field == "phoneNumber"


def test_non_object_body_is_rejected(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    store.load()

    with pytest.raises(ConfigValidationError) as excinfo:
        store.update(["startHour", 20])

    assert excinfo.value.field == "body"


def test_persist_failure_raises_but_memory_keeps_new_value(tmp_path):
    store = ConfigStore(tmp_path / "missing" / "config.json")
    store.load()

    with pytest.raises(OSError):
        store.update({"ssid": "Unsaved"})

    assert store.read().ssid == "Unsaved"


def test_read_returns_an_independent_copy(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    store.load()

    first = store.read()
    store.update({"endHour": 7})

    assert first.end_hour == DEFAULT_CONFIG.end_hour
    assert store.read().end_hour == 7


def test_reads_never_see_a_half_applied_update(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    store.load()
    store.update({"startHour": 0, "endHour": 0})

    torn = []
    stop = threading.Event()

    def writer(offset):
        for i in range(50):
            hour = (i + offset) % 24
            store.update({"startHour": hour, "endHour": hour})

    def reader():
        while not stop.is_set():
            record = store.read()
            if record.start_hour != record.end_hour:
                torn.append(record)

    readers = [threading.Thread(target=reader) for _ in range(3)]
    writers = [threading.Thread(target=writer, args=(n,)) for n in range(3)]
    for t in readers + writers:
        t.start()
    for t in writers:
        t.join()
    stop.set()
    for t in readers:
        t.join()

    assert torn == []
    record = store.read()
    assert record.start_hour == record.end_hour
    # the file holds the last update that was applied
    assert _on_disk(tmp_path / "config.json") == record.to_wire()


def test_failed_save_leaves_previous_file_intact(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    store = ConfigStore(path)
    store.load()
    store.update({"ssid": "Saved"})

    def crash(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr("config_store.os.replace", crash)

    with pytest.raises(OSError):
        store.update({"ssid": "Lost"})

    assert _on_disk(path) == dict(DEFAULTS, ssid="Saved")
    assert [p.name for p in tmp_path.iterdir()] == ["config.json"]
