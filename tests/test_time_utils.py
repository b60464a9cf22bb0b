from datetime import datetime

from issuedesk.utils import time as time_utils
from issuedesk.utils.exports import save_export


def test_parse_iso_accepts_dates_and_datetimes():
    assert time_utils.parse_iso("2024-03-10") == datetime(2024, 3, 10)
    assert time_utils.parse_iso("2024-03-10T09:30") == datetime(2024, 3, 10, 9, 30)
    assert time_utils.parse_iso("") is None
    assert time_utils.parse_iso("yesterday") is None


def test_utc_suffix_is_converted_to_naive_local():
    parsed = time_utils.parse_iso("2024-03-10T09:30:00Z")
    assert parsed.tzinfo is None


def test_end_bound_of_a_date_covers_the_day():
    end = time_utils.parse_bound("2024-03-10", end=True)
    assert end.date() == datetime(2024, 3, 10).date()
    assert (end.hour, end.minute, end.second) == (23, 59, 59)
    assert time_utils.parse_bound("2024-03-10T12:00", end=True) == datetime(2024, 3, 10, 12, 0)


def test_format_datetime_falls_back_to_raw():
    assert time_utils.format_datetime("2024-03-10T09:30:15") == "2024-03-10 09:30"
    assert time_utils.format_datetime("n/a") == "n/a"
    assert time_utils.format_datetime(None) == ""


def test_save_export_writes_dated_file(tmp_path):
    path = save_export("ID,Title\n1,x\n", directory=str(tmp_path / "out"), today=datetime(2024, 7, 4).date())
    assert path.endswith("IssueTracker_Export_2024-07-04.csv")
    with open(path, encoding="utf-8-sig") as f:
        assert f.read() == "ID,Title\n1,x\n"
