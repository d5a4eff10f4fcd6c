from __future__ import annotations

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient

from gameplan.health import repository


def test_health_ok(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def _ok() -> tuple[bool, str | None]:
        return True, None

    monkeypatch.setattr(repository, "check_db", _ok)

    r = client.get("/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["database"] == {"ok": True, "detail": None}
    assert body["version"]
    assert body["environment"] == "test"


def test_health_reports_database_failure(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def _down() -> tuple[bool, str | None]:
        return False, "connection refused"

    monkeypatch.setattr(repository, "check_db", _down)

    r = client.get("/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "error"
    assert body["database"]["detail"] == "connection refused"
