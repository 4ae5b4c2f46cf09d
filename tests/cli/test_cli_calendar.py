import json
from unittest.mock import MagicMock, patch

import pytest

from almanac.cli.calendar import main as calendar_main
from almanac.cli.calendar import parse_eras, parse_months
from almanac.core.calendar import CalendarDefinition, Era


@pytest.fixture
def mock_db():
    with patch("almanac.cli.calendar.DatabaseService") as MockDB:
        mock_instance = MockDB.return_value
        mock_instance.connect.return_value = None
        yield mock_instance


@pytest.fixture
def mock_validate():
    with patch("almanac.cli.calendar.validate_database_path", return_value=True) as mock:
        yield mock


@pytest.fixture(autouse=True)
def mock_init():
    with patch(
        "almanac.cli.calendar.init_cli", side_effect=lambda verbose, db: db or "env.db"
    ) as mock:
        yield mock


def run(argv):
    with patch("sys.argv", ["calendar.py"] + argv):
        with pytest.raises(SystemExit) as e:
            calendar_main()
    return e.value.code


def test_calendar_create(mock_db, mock_validate, capsys):
    with patch("almanac.cli.calendar.CreateCalendarCommand") as MockCmd:
        mock_cmd = MockCmd.return_value
        mock_cmd.execute.return_value.success = True

        assert run(["create", "-d", "test.db", "-n", "Fantasy"]) == 0

        out, _ = capsys.readouterr()
        assert "Created calendar" in out
        MockCmd.assert_called_once()
        calendar = MockCmd.call_args[0][0]
        assert calendar.name == "Fantasy"
        assert calendar.days_in_year == 365


def test_calendar_create_custom(mock_db, mock_validate, capsys):
    with patch("almanac.cli.calendar.CreateCalendarCommand") as MockCmd:
        MockCmd.return_value.execute.return_value.success = True

        code = run(
            [
                "create",
                "-d",
                "test.db",
                "-n",
                "Harptos",
                "--months",
                "Hammer:30,Alturiak:30,Ches:30",
                "--week",
                "One,Two,Three",
                "--day-cycle",
                "40:50:16",
                "--eras",
                "Before::0,Dale Reckoning:1:",
                "--activate",
            ]
        )

        assert code == 0
        calendar = MockCmd.call_args[0][0]
        assert calendar.days_in_year == 90
        assert calendar.days_in_week == 3
        assert calendar.seconds_per_day == 40 * 50 * 16
        assert calendar.eras[1] == Era("Dale Reckoning", 1, None)
        assert MockCmd.call_args.kwargs["activate"] is True
        mock_db.set_active_calendar_config.assert_not_called()


def test_calendar_create_invalid(mock_db, mock_validate, capsys):
    with patch("almanac.cli.calendar.CreateCalendarCommand") as MockCmd:
        code = run(["create", "-d", "test.db", "-n", "Bad", "--months", "Void:0"])

        assert code == 1
        out, _ = capsys.readouterr()
        assert "Validation error" in out
        MockCmd.assert_not_called()


def test_calendar_create_bad_month_format(mock_db, mock_validate, capsys):
    assert run(["create", "-d", "test.db", "-n", "Bad", "--months", "NoDays"]) == 1

    out, _ = capsys.readouterr()
    assert "Invalid month format" in out


def test_calendar_create_allows_new_database(mock_db, mock_validate):
    with patch("almanac.cli.calendar.CreateCalendarCommand") as MockCmd:
        MockCmd.return_value.execute.return_value.success = True
        run(["create", "-d", "new.db", "-n", "Fantasy"])

    mock_validate.assert_called_once_with("new.db", allow_create=True)


def test_calendar_update_keeps_id_and_unchanged_fields(mock_db, mock_validate, capsys):
    stored = CalendarDefinition.create_default()
    mock_db.get_calendar_config.return_value = stored

    with patch("almanac.cli.calendar.ReplaceCalendarCommand") as MockCmd:
        result = MockCmd.return_value.execute.return_value
        result.success = True
        result.data = {"id": stored.id, "world": "Faerun"}

        code = run(["update", "-d", "test.db", "--id", stored.id, "--week", "A,B"])

        assert code == 0
        calendar = MockCmd.call_args[0][0]
        assert calendar.id == stored.id
        assert calendar.name == stored.name
        assert calendar.days_in_week == 2
        assert calendar.months == stored.months
        out, _ = capsys.readouterr()
        assert "World 'Faerun' now uses the new definition" in out


def test_calendar_update_missing(mock_db, mock_validate, capsys):
    mock_db.get_calendar_config.return_value = None

    with patch("almanac.cli.calendar.ReplaceCalendarCommand") as MockCmd:
        assert run(["update", "-d", "test.db", "--id", "nope"]) == 1

        MockCmd.assert_not_called()
    out, _ = capsys.readouterr()
    assert "Calendar not found" in out


def test_calendar_update_rejected(mock_db, mock_validate, capsys):
    mock_db.get_calendar_config.return_value = CalendarDefinition.create_default()

    with patch("almanac.cli.calendar.ReplaceCalendarCommand") as MockCmd:
        result = MockCmd.return_value.execute.return_value
        result.success = False
        result.message = "World 'Faerun' does not fit the new calendar"
        result.errors = {"0": "Current time is before the latest record"}

        assert run(["update", "-d", "test.db", "--id", "c1", "-n", "New"]) == 1

    out, _ = capsys.readouterr()
    assert "does not fit" in out
    assert "- Current time is before the latest record" in out


def test_calendar_list(mock_db, mock_validate, capsys):
    mock_conf = MagicMock()
    mock_conf.id = "c1"
    mock_conf.name = "Fantasy"
    mock_conf.months_in_year = 12
    mock_conf.days_in_year = 365
    mock_conf.eras = []
    mock_db.get_all_calendar_configs.return_value = [mock_conf]
    mock_db.is_calendar_active.return_value = True

    assert run(["list", "-d", "test.db"]) == 0

    out, _ = capsys.readouterr()
    assert "Fantasy" in out
    assert "ACTIVE" in out


def test_calendar_list_uses_configured_database(mock_db, mock_validate, mock_init):
    mock_db.get_all_calendar_configs.return_value = []

    assert run(["list"]) == 0

    mock_validate.assert_called_once_with("env.db", allow_create=False)


def test_calendar_show_json(mock_db, mock_validate, capsys):
    calendar = CalendarDefinition.create_default()
    mock_db.get_calendar_config.return_value = calendar

    assert run(["show", "-d", "test.db", "--id", calendar.id, "--json"]) == 0

    out, _ = capsys.readouterr()
    assert json.loads(out)["name"] == "Default Calendar"


def test_calendar_show(mock_db, mock_validate, capsys):
    calendar = CalendarDefinition.create_default()
    mock_db.get_calendar_config.return_value = calendar
    mock_db.is_calendar_active.return_value = False

    assert run(["show", "-d", "test.db", "--id", calendar.id]) == 0

    out, _ = capsys.readouterr()
    assert "1. January (31 days)" in out
    assert "Monday, Tuesday" in out
    assert "Common Era: 1 to ..." in out


def test_calendar_show_missing(mock_db, mock_validate, capsys):
    mock_db.get_calendar_config.return_value = None

    assert run(["show", "-d", "test.db", "--id", "nope"]) == 1

    out, _ = capsys.readouterr()
    assert "Calendar not found" in out


def test_calendar_set_active(mock_db, mock_validate, capsys):
    with patch("almanac.cli.calendar.SetActiveCalendarCommand") as MockCmd:
        mock_cmd = MockCmd.return_value
        mock_cmd.execute.return_value.success = True

        assert run(["set-active", "-d", "test.db", "--id", "c1"]) == 0

        out, _ = capsys.readouterr()
        assert "is now active" in out
        MockCmd.assert_called_once()


def test_calendar_delete_force(mock_db, mock_validate, capsys):
    with patch("almanac.cli.calendar.DeleteCalendarCommand") as MockCmd:
        mock_cmd = MockCmd.return_value
        mock_cmd.execute.return_value.success = True

        assert run(["delete", "-d", "test.db", "--id", "c1", "--force"]) == 0

        out, _ = capsys.readouterr()
        assert "Deleted calendar" in out


def test_calendar_delete_cancelled(mock_db, mock_validate):
    mock_db.get_calendar_config.return_value = CalendarDefinition.create_default()

    with patch("almanac.cli.calendar.DeleteCalendarCommand") as MockCmd:
        with patch("builtins.input", return_value="n"):
            assert run(["delete", "-d", "test.db", "--id", "c1"]) == 0

        MockCmd.assert_not_called()


def test_missing_database(mock_db):
    with patch("almanac.cli.calendar.validate_database_path", return_value=False):
        assert run(["list", "-d", "missing.db"]) == 1


def test_parse_helpers():
    assert [m.days for m in parse_months("A:1, B:2")] == [1, 2]
    assert parse_eras("Old::5,New:6:") == [Era("Old", None, 5), Era("New", 6, None)]
    with pytest.raises(ValueError):
        parse_eras("Broken:1")
