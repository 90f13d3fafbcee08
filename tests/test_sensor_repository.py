import threading

import pytest

from conftest import make_descriptor
from infrastructure.database.repositories.sensors import SensorRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from sensor_client.domain.exceptions import RepositoryError
from sensor_client.domain.sensors import SensorRegistry
from sensor_client.domain.sensors.descriptor import SensorDescriptor


def test_repository_satisfies_registry_protocol(sensor_repo):
    assert isinstance(sensor_repo, SensorRegistry)


def test_save_assigns_id_and_timestamp(sensor_repo):
    saved = sensor_repo.save(SensorDescriptor.for_path("/opt/sensors/temperature-1.0.jar", 9000))

    assert saved.sensor_id is not None
    assert saved.created_at is not None
    assert sensor_repo.get(saved.sensor_id) == saved


def test_find_all_returns_insertion_order(sensor_repo):
    for port, name in ((9000, "a"), (9010, "b"), (9020, "c")):
        sensor_repo.save(SensorDescriptor.for_path(f"/opt/{name}-1.jar", port))

    assert [d.sensor_name for d in sensor_repo.find_all()] == ["a", "b", "c"]


def test_find_highest_port(sensor_repo):
    assert sensor_repo.find_highest_port() is None

    sensor_repo.save(SensorDescriptor.for_path("/opt/a-1.jar", 9050))
    sensor_repo.save(SensorDescriptor.for_path("/opt/b-1.jar", 9010))

    assert sensor_repo.find_highest_port().sensor_port == 9050


def test_duplicate_port_is_rejected(sensor_repo):
    sensor_repo.save(SensorDescriptor.for_path("/opt/a-1.jar", 9000))

    with pytest.raises(RepositoryError):
        sensor_repo.save(SensorDescriptor.for_path("/opt/b-1.jar", 9000))

    assert len(sensor_repo.find_all()) == 1


def test_find_by_name_and_missing_id(sensor_repo):
    sensor_repo.save(SensorDescriptor.for_path("/opt/a-1.jar", 9000))
    sensor_repo.save(SensorDescriptor.for_path("/opt/a-2.jar", 9010))

    assert [d.sensor_port for d in sensor_repo.find_by_name("a")] == [9000, 9010]
    assert sensor_repo.get(999) is None


def test_registry_survives_reopen(tmp_path):
    path = str(tmp_path / "db" / "sensors.db")
    handler = SQLiteDatabaseHandler(path)
    handler.create_tables()
    SensorRepository(handler).save(SensorDescriptor.for_path("/opt/a-1.jar", 9000))
    handler.close_db()

    reopened = SQLiteDatabaseHandler(path)
    reopened.create_tables()
    assert [d.sensor_name for d in SensorRepository(reopened).find_all()] == ["a"]
    reopened.close_db()


def test_in_memory_registry_is_shared_across_threads(sensor_repo):
    saved = sensor_repo.save(make_descriptor("temperature", 9000, sensor_id=None))
    seen = []
    errors = []

    def reader():
        try:
            seen.extend(sensor_repo.find_all())
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    thread = threading.Thread(target=reader)
    thread.start()
    thread.join(5)

    assert errors == []
    assert seen == [saved]


def test_close_releases_the_in_memory_database():
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    SensorRepository(handler).save(make_descriptor("temperature", 9000, sensor_id=None))

    handler.close()
    handler.create_tables()

    assert SensorRepository(handler).find_all() == []
    handler.close()
