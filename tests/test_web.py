"""Tests for the browser dashboard.

The dashboard exposes MMU state as JSON through Flask.  Tests use
``pytest.importorskip`` so they are skipped gracefully when Flask is not
installed.
"""

from __future__ import annotations

from typing import Any

import pytest

flask = pytest.importorskip("flask")

from py_mmu import AccessKind, Mmu, MmuConfig  # noqa: E402
from py_mmu.web.app import create_app  # noqa: E402

HTTP_OK = 200
HTTP_NOT_FOUND = 404


def _client(mmu: Mmu | None = None) -> Any:
    """Create a test client from a fresh app."""
    app = create_app(mmu)
    app.config["TESTING"] = True
    return app.test_client()


def _forked_mmu() -> Mmu:
    mmu = Mmu(config=MmuConfig(ptes_per_directory=4, total_frames=8))
    mmu.allocate(0, AccessKind.WRITE)
    mmu.allocate(1, AccessKind.READ)
    mmu.switch_or_fork(3)
    return mmu


class TestAppCreation:
    """Verify the app factory."""

    def test_create_app_returns_flask(self) -> None:
        """create_app should return a Flask application."""
        assert isinstance(create_app(), flask.Flask)


class TestStatusEndpoint:
    """Verify GET /api/status."""

    def test_fresh_status(self) -> None:
        """A fresh MMU should report init running and all frames free."""
        response = _client().get("/api/status")
        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert data["current"] == 0
        assert data["ready"] == []
        assert data["free_frames"] == data["total_frames"]

    def test_status_after_fork(self) -> None:
        """After a fork the parent should be ready and frames shared."""
        data = _client(_forked_mmu()).get("/api/status").get_json()
        assert data["current"] == 3
        assert data["ready"] == [0]
        assert data["free_frames"] == 6
        assert data["shared_frames"] == 2


class TestFramesEndpoint:
    """Verify GET /api/frames."""

    def test_frames(self) -> None:
        """Only frames in use should be listed with their mapcounts."""
        data = _client(_forked_mmu()).get("/api/frames").get_json()
        assert data == {"0": 2, "1": 2}


class TestPageTableEndpoint:
    """Verify GET /api/processes/<pid>/pagetable."""

    def test_parent_table(self) -> None:
        """The parent's writable page should now be COW."""
        response = _client(_forked_mmu()).get("/api/processes/0/pagetable")
        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert data["state"] == "ready"
        assert data["entries"][0] == {
            "vpn": 0,
            "pfn": 0,
            "state": "shared_cow",
            "writable": False,
            "private": True,
        }
        assert data["entries"][1]["state"] == "exclusive_read_only"

    def test_unknown_pid(self) -> None:
        """An unknown pid should return 404."""
        response = _client().get("/api/processes/42/pagetable")
        assert response.status_code == HTTP_NOT_FOUND
        assert "error" in response.get_json()


class TestLogEndpoint:
    """Verify GET /api/log."""

    def test_log_lists_entries(self) -> None:
        """The log should include the fork."""
        data = _client(_forked_mmu()).get("/api/log").get_json()
        assert any("fork 0 -> 3" in line for line in data["entries"])
