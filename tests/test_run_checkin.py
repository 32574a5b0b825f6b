import logging
from datetime import datetime, timedelta

import pytest

from checkin.config import Settings
from checkin.processor import OutcomeStatus
from checkin.run_checkin import SEPARATOR, parse_arguments, run_checkin, run_cycle
from checkin.scheduler import Scheduler
from conftest import PRIVATE_KEY, FakeClient, FakeClock, json_response


def test_cycle_processes_accounts_in_file_order(write_file, caplog, capsys):
    path = write_file("alice:tok-a\nmalformed-line\ncarol:tok-c\n")
    client = FakeClient(
        json_response({"data": {"currentStreak": 2}}),
        json_response({"error": {"code": "checkInAlready"}}),
        json_response({}),
    )

    with caplog.at_level(logging.INFO):
        outcomes = run_cycle(client, Settings(token_file=path))

    assert [c["token"] for c in client.calls] == ["tok-a", "malformed-line", "tok-c"]
    assert [o.status for o in outcomes] == [
        OutcomeStatus.SUCCESS,
        OutcomeStatus.ALREADY_CHECKED_IN,
        OutcomeStatus.FAILURE,
    ]
    assert "Next account: Account 2" in caplog.text
    assert "Next account: carol (userId: unknown)" in caplog.text
    assert "All accounts processed." in caplog.text
    assert "1 checked in, 1 already, 1 failed" in caplog.text
    assert capsys.readouterr().out.count(SEPARATOR) == 3


def test_wallet_cycle_skips_malformed_line(write_file):
    path = write_file(f"one:{PRIVATE_KEY}\nbroken\nthree:{PRIVATE_KEY}\n")
    client = FakeClient()

    outcomes = run_cycle(client, Settings(mode="wallet", wallet_file=path))

    assert len(outcomes) == 2
    assert len(client.calls) == 2
    assert all(c["token"] is None for c in client.calls)


def test_unreadable_file_aborts_the_cycle(tmp_path, caplog):
    client = FakeClient()

    outcomes = run_cycle(client, Settings(), credential_file=str(tmp_path / "nope.txt"))

    assert outcomes is None
    assert client.calls == []
    assert "Error reading" in caplog.text


def test_empty_file_processes_nothing(write_file):
    client = FakeClient()
    assert run_cycle(client, Settings(), credential_file=write_file("\n\n")) == []
    assert client.calls == []


def test_parse_arguments():
    args = parse_arguments(["--mode", "wallet", "--file", "w.txt", "--once", "--no-countdown"])
    assert (args.mode, args.file, args.once, args.no_countdown) == ("wallet", "w.txt", True, True)


def test_once_with_missing_file_exits_1(tmp_path, monkeypatch):
    monkeypatch.setenv("CHECKIN_MODE", "token")
    with pytest.raises(SystemExit) as exc:
        run_checkin(["--once", "--file", str(tmp_path / "missing.txt")])
    assert exc.value.code == 1


def test_invalid_mode_in_environment_exits_1(monkeypatch):
    monkeypatch.setenv("CHECKIN_MODE", "email")
    with pytest.raises(SystemExit) as exc:
        run_checkin(["--once"])
    assert exc.value.code == 1


def test_file_with_invalid_utf8_aborts_the_cycle(tmp_path, caplog):
    path = tmp_path / "token.txt"
    path.write_bytes(b"alice:\xff\xfe")
    client = FakeClient()

    outcomes = run_cycle(client, Settings(token_file=str(path)))

    assert outcomes is None
    assert client.calls == []
    assert "Error reading" in caplog.text


def test_scheduler_reloads_the_file_after_one_daily_wait(write_file):
    path = write_file("alice:tok-a\nbob:tok-b\n")
    client = FakeClient()
    clock = FakeClock(datetime(2024, 1, 1, 8, 0, 0))
    cycle_starts = []

    def cycle():
        cycle_starts.append((clock(), len(client.calls)))
        return run_cycle(client, Settings(token_file=path))

    def sleep(seconds):
        # Edit the credential file while the scheduler is waiting
        if not clock.sleeps:
            write_file("xavier:tok-x\nyara:tok-y\nzoe:tok-z\n")
        clock.sleep(seconds)

    scheduler = Scheduler(cycle, clock=clock, sleep=sleep)
    scheduler.run_forever(max_cycles=2)

    assert [c["token"] for c in client.calls] == ["tok-a", "tok-b", "tok-x", "tok-y", "tok-z"]
    assert cycle_starts == [
        (datetime(2024, 1, 1, 8, 0, 0), 0),
        (datetime(2024, 1, 2, 8, 0, 0), 2),
    ]
    assert sum(clock.sleeps) == timedelta(hours=24).total_seconds()
