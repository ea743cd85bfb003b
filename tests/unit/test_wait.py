"""Unit tests for readiness polling."""

from datetime import timedelta

import pytest

from txtwire.exceptions import BackendAPIError, WaitTimeoutError
from txtwire.wait import wait_for


@pytest.fixture
def clock(monkeypatch):
    """Replace monotonic time and sleep with a manual clock."""
    state = {"now": 0.0, "sleeps": []}

    def sleep(seconds):
        state["sleeps"].append(seconds)
        state["now"] += seconds

    monkeypatch.setattr("txtwire.wait.time.monotonic", lambda: state["now"])
    monkeypatch.setattr("txtwire.wait.time.sleep", sleep)
    return state


class TestWaitFor:
    """Tests for wait_for."""

    def test_returns_when_predicate_holds(self, clock):
        results = iter([False, False, True])

        wait_for("job", timedelta(seconds=10), timedelta(seconds=2), lambda: next(results))

        assert clock["sleeps"] == [2, 2]

    def test_immediate_success_does_not_sleep(self, clock):
        wait_for("job", timedelta(seconds=10), timedelta(seconds=2), lambda: True)

        assert clock["sleeps"] == []

    def test_times_out(self, clock):
        with pytest.raises(WaitTimeoutError, match="job: time limit exceeded") as exc_info:
            wait_for("job", timedelta(seconds=5), timedelta(seconds=2), lambda: False, "variomedia")

        assert exc_info.value.provider == "variomedia"
        assert exc_info.value.__cause__ is None

    def test_errors_are_retried(self, clock):
        attempts = []

        def predicate():
            attempts.append(1)
            if len(attempts) < 3:
                raise BackendAPIError("Server Error: busy", "cloudns", 500)
            return True

        wait_for("sync", timedelta(seconds=10), timedelta(seconds=1), predicate)

        assert len(attempts) == 3

    def test_timeout_chains_last_error(self, clock):
        error = BackendAPIError("Server Error: busy", "cloudns", 500)

        def predicate():
            raise error

        with pytest.raises(WaitTimeoutError, match="last error") as exc_info:
            wait_for("sync", timedelta(seconds=3), timedelta(seconds=1), predicate, "cloudns")

        assert exc_info.value.__cause__ is error

    def test_zero_timeout_tries_once(self, clock):
        calls = []

        with pytest.raises(WaitTimeoutError):
            wait_for("job", timedelta(0), timedelta(seconds=1), lambda: calls.append(1) or False)

        assert calls == [1]

    def test_other_exceptions_propagate(self, clock):
        def predicate():
            raise KeyError("data")

        with pytest.raises(KeyError):
            wait_for("job", timedelta(seconds=10), timedelta(seconds=1), predicate)
