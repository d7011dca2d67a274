"""Tests for ipverse_mcp.asn_ip.refresher: the periodic sync driver."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ipverse_mcp.asn_ip.refresher import MirrorRefresher
from ipverse_mcp.asn_ip.state import SharedMirror
from ipverse_mcp.errors import TransportError


@pytest.fixture
def mock_mirror(tmp_path):
    mirror = MagicMock(spec=SharedMirror)
    mirror.repo_path = tmp_path
    mirror.update.return_value = []
    return mirror


class TestRunOnce:
    def test_returns_changes_and_calls_callback(self, mock_mirror, tmp_path):
        changed = [tmp_path / "as/1/aggregated.json"]
        mock_mirror.update.return_value = changed
        callback = MagicMock()

        refresher = MirrorRefresher(mock_mirror, interval=60, callback=callback)

        assert refresher.run_once() == changed
        callback.assert_called_once_with(changed)

    def test_no_callback_for_empty_change_set(self, mock_mirror):
        callback = MagicMock()
        MirrorRefresher(mock_mirror, interval=60, callback=callback).run_once()
        callback.assert_not_called()

    def test_update_error_is_logged_and_kept(self, mock_mirror, caplog):
        error = TransportError("fetch", "network down")
        mock_mirror.update.side_effect = error
        refresher = MirrorRefresher(mock_mirror, interval=60)

        with caplog.at_level(logging.WARNING, logger="ipverse_mcp.asn_ip.refresher"):
            assert refresher.run_once() == []

        assert refresher.last_error is error
        assert "TransportError" in caplog.text
        assert "network down" in caplog.text

    def test_success_clears_last_error(self, mock_mirror):
        mock_mirror.update.side_effect = [TransportError("fetch", "x"), []]
        refresher = MirrorRefresher(mock_mirror, interval=60)
        refresher.run_once()
        refresher.run_once()
        assert refresher.last_error is None

    def test_unexpected_error_is_logged_and_kept(self, mock_mirror, caplog):
        error = RuntimeError("unexpected")
        mock_mirror.update.side_effect = error
        refresher = MirrorRefresher(mock_mirror, interval=60)

        with caplog.at_level(logging.ERROR, logger="ipverse_mcp.asn_ip.refresher"):
            assert refresher.run_once() == []

        assert refresher.last_error is error
        assert "Unexpected error" in caplog.text
        assert caplog.records[-1].exc_info is not None

    def test_callback_failure_does_not_propagate(self, mock_mirror, tmp_path):
        mock_mirror.update.return_value = [tmp_path / "x"]
        refresher = MirrorRefresher(
            mock_mirror, interval=60, callback=MagicMock(side_effect=RuntimeError("boom"))
        )
        assert refresher.run_once() == [tmp_path / "x"]


class TestLifecycle:
    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, mock_mirror, interval):
        with pytest.raises(ValueError):
            MirrorRefresher(mock_mirror, interval=interval)

    def test_loop_calls_update_repeatedly(self, mock_mirror):
        calls = threading.Semaphore(0)

        def _update() -> list[Path]:
            calls.release()
            return []

        mock_mirror.update.side_effect = _update
        refresher = MirrorRefresher(mock_mirror, interval=0.01)
        refresher.start()
        try:
            assert calls.acquire(timeout=2.0)
            assert calls.acquire(timeout=2.0)
            assert refresher.running
        finally:
            refresher.stop(timeout=2.0)
        assert not refresher.running

    def test_loop_survives_unexpected_error(self, mock_mirror):
        calls = threading.Semaphore(0)
        attempts = []

        def _update() -> list[Path]:
            attempts.append(1)
            calls.release()
            if len(attempts) == 1:
                raise RuntimeError("first tick fails")
            return []

        mock_mirror.update.side_effect = _update
        refresher = MirrorRefresher(mock_mirror, interval=0.01)
        refresher.start()
        try:
            assert calls.acquire(timeout=2.0)
            assert calls.acquire(timeout=2.0)
            assert refresher.running
        finally:
            refresher.stop(timeout=2.0)
        assert len(attempts) >= 2

    def test_start_is_idempotent(self, mock_mirror):
        refresher = MirrorRefresher(mock_mirror, interval=60)
        refresher.start()
        try:
            thread = refresher._thread
            refresher.start()
            assert refresher._thread is thread
        finally:
            refresher.stop(timeout=2.0)

    def test_stop_without_start_is_noop(self, mock_mirror):
        MirrorRefresher(mock_mirror, interval=60).stop()
