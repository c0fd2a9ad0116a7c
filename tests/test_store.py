"""Tests for JSONStore: round-trip, malformed documents, atomic writes."""

import json
import time
from datetime import date, datetime

import pytest

from petregistry.models import Animal
from petregistry.storage.store import JSONStore, StoreReadError, StoreWriteError


@pytest.fixture
def store(tmp_path):
    return JSONStore(tmp_path / "animal_data.json")


def _sample_animals():
    rex = Animal("Rex", "dog", date(2020, 1, 1), commands=["sit", "stay"])
    milo = Animal("Milo", "cat", date(2019, 5, 5))
    hammy = Animal("Hammy", "hamster", date(2021, 2, 3), commands=["spin", "spin"])
    return [rex, milo, hammy]


def test_missing_file_loads_empty(store):
    assert not store.exists()
    assert store.load() == []


@pytest.mark.parametrize("n", [0, 1, 3])
def test_round_trip_preserves_fields_and_order(store, n):
    animals = _sample_animals()[:n]
    store.save(animals)
    assert store.load() == animals


def test_saved_document_shape(store):
    store.save(_sample_animals()[:1])
    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert data == [
        {"name": "Rex", "type": "dog", "birthDate": "2020-01-01", "commands": ["sit", "stay"]}
    ]


def test_save_overwrites_previous_content(store):
    store.save(_sample_animals())
    store.save([])
    assert store.load() == []


def test_non_ascii_names_survive(store):
    animals = [Animal("Шарик", "dog", date(2018, 7, 7), commands=["сидеть"])]
    store.save(animals)
    assert "Шарик" in store.path.read_text(encoding="utf-8")
    assert store.load() == animals


def test_save_leaves_no_temp_files(store):
    store.save(_sample_animals())
    assert [p.name for p in store.path.parent.iterdir()] == ["animal_data.json"]


def test_save_creates_parent_directory(tmp_path):
    store = JSONStore(tmp_path / "nested" / "dir" / "animals.json")
    store.save(_sample_animals())
    assert store.load() == _sample_animals()


def _write_legacy_record(store, millis):
    store.path.write_text(
        json.dumps([{"name": "Rex", "type": "Dog", "birthDate": millis, "commands": []}]),
        encoding="utf-8",
    )


@pytest.fixture
def moscow_tz(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    # POSIX spelling of UTC+3, needs no tz database
    monkeypatch.setenv("TZ", "MSK-3")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_load_epoch_millis_dates(store):
    _write_legacy_record(store, int(datetime(2020, 1, 1).timestamp() * 1000))
    assert store.load() == [Animal("Rex", "Dog", date(2020, 1, 1))]


def test_load_epoch_millis_east_of_utc(store, moscow_tz):
    # 2020-01-01 00:00 in Moscow is 2019-12-31 21:00 UTC
    _write_legacy_record(store, 1577826000000)
    assert store.load()[0].birth_date == date(2020, 1, 1)


# --------------------------------------------------------------------------- #
# Read failures
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "content",
    [
        "",
        "{not json",
        '{"name": "Rex"}',
        "[1, 2]",
        '[{"type": "dog", "birthDate": "2020-01-01"}]',
        '[{"name": "Rex", "type": "dog", "birthDate": "January"}]',
        '[{"name": "Rex", "birthDate": "2020-01-01"}]',
        '[{"name": "Rex", "type": "dog", "birthDate": 100000000000000000000}]',
        '[{"name": null, "type": "dog", "birthDate": "2020-01-01"}]',
        '[{"name": "Rex", "type": "dog", "birthDate": "2020-01-01", "commands": [{"a": 1}]}]',
    ],
)
def test_malformed_document_raises_read_error(store, content):
    store.path.write_text(content, encoding="utf-8")
    with pytest.raises(StoreReadError):
        store.load()


def test_undecodable_bytes_raise_read_error(store):
    store.path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(StoreReadError):
        store.load()


# --------------------------------------------------------------------------- #
# Write failures
# --------------------------------------------------------------------------- #


def test_write_into_unwritable_location_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("i am a file", encoding="utf-8")
    store = JSONStore(blocker / "animal_data.json")
    with pytest.raises(StoreWriteError):
        store.save(_sample_animals())


def test_failed_replace_keeps_previous_document(store, monkeypatch):
    store.save(_sample_animals()[:1])

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("petregistry.storage.store.os.replace", boom)
    with pytest.raises(StoreWriteError):
        store.save(_sample_animals())

    assert store.load() == _sample_animals()[:1]
    assert [p.name for p in store.path.parent.iterdir()] == ["animal_data.json"]
