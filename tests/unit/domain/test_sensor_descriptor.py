import pytest

from sensor_client.domain.exceptions import InvalidPathError, ValidationError
from sensor_client.domain.sensors.descriptor import SensorDescriptor, derive_sensor_name


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/opt/sensors/temperature-1.2.3.jar", "temperature"),
        ("humidity-0.1-SNAPSHOT.jar", "humidity"),
        ("/srv/artie/keyboard.jar", "keyboard.jar"),
        ("relative/dir/mouse-2.jar", "mouse"),
        ("  /opt/sensors/light-1.jar  ", "light"),
    ],
)
def test_derive_sensor_name(path, expected):
    assert derive_sensor_name(path) == expected


@pytest.mark.parametrize("path", ["", "   ", "/opt/sensors/", "/opt/sensors/-1.0.jar", None])
def test_derive_sensor_name_rejects_unusable_paths(path):
    with pytest.raises(InvalidPathError):
        derive_sensor_name(path)


def test_invalid_path_is_a_validation_error():
    assert issubclass(InvalidPathError, ValidationError)
    assert InvalidPathError.http_status == 400


def test_for_path_places_management_port_next_to_sensor_port():
    descriptor = SensorDescriptor.for_path("/opt/sensors/temperature-1.2.3.jar", 9040)

    assert descriptor.sensor_name == "temperature"
    assert descriptor.sensor_port == 9040
    assert descriptor.management_port == 9041
    assert descriptor.sensor_id is None


def test_from_row_round_trips_to_dict():
    row = {
        "sensor_id": 3,
        "executable_path": "/opt/sensors/co2-1.jar",
        "sensor_port": 9020,
        "management_port": 9021,
        "sensor_name": "co2",
        "created_at": "2026-01-01T00:00:00+00:00",
    }

    assert SensorDescriptor.from_row(row).to_dict() == row
