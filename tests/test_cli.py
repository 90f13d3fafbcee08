import logging

import pytest

from sensor_client import cli


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("ARTIE_CLIENT_DATABASE_PATH", str(tmp_path / "db" / "sensors.db"))
    monkeypatch.setenv("ARTIE_CLIENT_LOG_PATH", str(tmp_path / "logs" / "client.log"))
    monkeypatch.setenv("ARTIE_CLIENT_SHUTDOWN_TIMEOUT_SECONDS", "2")
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_add_prints_allocated_ports(capsys):
    assert cli.main(["add", "/opt/sensors/temperature-1.2.3.jar"]) == 0

    out = capsys.readouterr().out
    assert "Added sensor temperature (port 9000, management port 9001)" in out


def test_add_invalid_path_exits_with_usage_error(capsys):
    assert cli.main(["add", "/opt/sensors/"]) == 2

    assert "Error:" in capsys.readouterr().out


def test_list_shows_registered_sensors_in_order(capsys):
    cli.main(["add", "/opt/sensors/temperature-1.0.jar"])
    cli.main(["add", "/opt/sensors/humidity-1.0.jar"])
    capsys.readouterr()

    assert cli.main(["list"]) == 0

    lines = [line for line in capsys.readouterr().out.splitlines() if "\t" in line]
    assert [line.split("\t")[1] for line in lines] == ["temperature", "humidity"]
    assert lines[1].split("\t")[2] == "9010/9011"


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        cli.main(["explode"])


@pytest.mark.parametrize(
    "name, value",
    [("ARTIE_CLIENT_PORT_STEP", "ten"), ("ARTIE_CLIENT_MIN_SENSOR_PORT", "0")],
)
def test_invalid_configuration_exits_with_error(monkeypatch, capsys, name, value):
    monkeypatch.setenv(name, value)

    assert cli.main(["list"]) == 1

    assert "Configuration error:" in capsys.readouterr().out


def test_unopenable_database_exits_with_error(tmp_path, monkeypatch):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    monkeypatch.setenv("ARTIE_CLIENT_DATABASE_PATH", str(blocker / "sensors.db"))

    assert cli.main(["list"]) == 1
