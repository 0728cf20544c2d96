import itertools
import sys
from unittest import mock

import pytest

from relplz.cargo import (
    PublishTimeoutError,
    is_published,
    run_cargo,
    wait_until_published,
)


class FakeIndex:
    def __init__(self, cached=None, remote=None):
        self.cached = dict(cached or {})
        self.remote = dict(remote or {})
        self.updates = 0

    def crate_versions(self, name):
        return self.cached.get(name)

    def update(self):
        self.updates += 1
        self.cached.update(self.remote)


PACKAGE = {"name": "mycrate", "version": "0.1.0"}


def test_run_cargo_returns_trimmed_output(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("CARGO", sys.executable)
    script = "import sys; print('  hello  '); print('warn line', file=sys.stderr)"
    stdout, stderr = run_cargo(tmp_path, ["-c", script])
    assert stdout == "hello"
    assert stderr == "warn line"
    assert "warn line" in capsys.readouterr().err


def test_run_cargo_runs_in_root(tmp_path, monkeypatch):
    monkeypatch.setenv("CARGO", sys.executable)
    stdout, _ = run_cargo(tmp_path, ["-c", "import os; print(os.getcwd())"])
    assert stdout == str(tmp_path.resolve()) or stdout == str(tmp_path)


def test_missing_cargo_is_an_error(tmp_path, monkeypatch):
    monkeypatch.setenv("CARGO", str(tmp_path / "no-such-program"))
    with pytest.raises(RuntimeError, match="cannot run cargo"):
        run_cargo(tmp_path, ["--version"])


def test_cached_package_is_published_without_update():
    index = FakeIndex(cached={"mycrate": ["0.0.9", "0.1.0"]})
    assert is_published(index, PACKAGE) is True
    assert index.updates == 0


def test_package_found_after_update():
    index = FakeIndex(remote={"mycrate": ["0.1.0"]})
    assert is_published(index, PACKAGE) is True
    assert index.updates == 1


def test_other_version_is_not_published():
    index = FakeIndex(cached={"mycrate": ["0.0.9"]})
    assert is_published(index, PACKAGE) is False
    assert index.updates == 1


def test_wait_returns_when_published():
    index = FakeIndex(cached={"mycrate": ["0.1.0"]})
    with mock.patch("time.sleep") as sleep:
        result = wait_until_published(index, PACKAGE)
    assert result is None
    assert index.updates == 0
    assert sleep.call_count == 0


def test_wait_polls_until_published():
    index = FakeIndex()
    calls = []

    def publish_on_sleep(seconds):
        calls.append(seconds)
        index.remote = {"mycrate": ["0.1.0"]}

    with mock.patch("time.sleep", side_effect=publish_on_sleep):
        wait_until_published(index, PACKAGE)
    assert calls == [2]
    assert index.updates == 2


def test_wait_times_out():
    index = FakeIndex()
    clock = itertools.count(0, 200)
    with mock.patch("time.sleep") as sleep, mock.patch(
        "time.monotonic", side_effect=lambda: next(clock)
    ):
        with pytest.raises(PublishTimeoutError, match="mycrate"):
            wait_until_published(index, PACKAGE)
    assert sleep.call_count >= 1