"""
Pytest fixtures for the document template service.

The service layer talks to `document_templates.repository`; tests swap that
module for `InMemoryTemplateRepository`, which keeps rows in a list and applies
each write as one step, the way the SQL repository applies one transaction.
"""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
import pytest

from auth import dependencies as auth_dependencies
from document_templates import service
from document_templates.errors import ConflictError

SYSTEM_ADMIN = {
    "id": 1,
    "email": "ops@example.com",
    "role": "system_admin",
    "is_active": True,
    "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
}


class InMemoryTemplateRepository:
    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _newest_first(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return sorted(rows, key=lambda r: (r["created_at"], r["id"]), reverse=True)

    def _of_type(self, template_type: str) -> list[dict[str, Any]]:
        return [r for r in self.rows if r["type"] == template_type]

    def _find(self, template_id: str) -> dict[str, Any] | None:
        return next((r for r in self.rows if r["id"] == template_id), None)

    def add(
        self,
        template_type: str,
        version: str,
        content: Any,
        *,
        is_active: bool = False,
        description: str | None = "seed",
    ) -> dict[str, Any]:
        """Insert a row directly, bypassing the versioning policy."""
        row = {
            "id": str(uuid.uuid4()),
            "type": template_type,
            "version": version,
            "content": copy.deepcopy(content),
            "is_active": is_active,
            "description": description,
            "created_at": self._tick(),
            "created_by": None,
        }
        self.rows.append(row)
        return copy.deepcopy(row)

    def active_count(self, template_type: str) -> int:
        return sum(1 for r in self._of_type(template_type) if r["is_active"])

    async def list_versions(self, template_type: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._newest_first(self._of_type(template_type)))

    async def get_version(self, template_id: str) -> dict[str, Any] | None:
        return copy.deepcopy(self._find(template_id))

    async def get_active(self, template_type: str) -> dict[str, Any] | None:
        active = [r for r in self._of_type(template_type) if r["is_active"]]
        return copy.deepcopy(active[0]) if active else None

    async def list_active(self, template_types: list[str]) -> list[dict[str, Any]]:
        active = [r for r in self.rows if r["is_active"] and r["type"] in template_types]
        return copy.deepcopy(sorted(active, key=lambda r: r["type"]))

    async def insert_active_version(
        self,
        *,
        template_type: str,
        content: Any,
        description: str,
        created_by: int | None,
        compute_version: Callable[[str | None, set[str]], str],
    ) -> tuple[dict[str, Any], dict[str, Any] | None]:
        previous = await self.get_active(template_type)
        taken = {r["version"] for r in self._of_type(template_type)}
        version = compute_version(previous["version"] if previous is not None else None, taken)
        if any(r["version"] == version for r in self._of_type(template_type)):
            raise ConflictError(f"Template {template_type} version {version} already exists.")

        for r in self._of_type(template_type):
            r["is_active"] = False
        row = self.add(template_type, version, content, is_active=True, description=description)
        self._find(row["id"])["created_by"] = created_by
        return await self.get_version(row["id"]), previous

    async def activate_version(self, template_id: str) -> dict[str, Any] | None:
        target = self._find(template_id)
        if target is None:
            return None
        for r in self._of_type(target["type"]):
            r["is_active"] = r["id"] == template_id
        return copy.deepcopy(target)

    async def delete_version(
        self, template_id: str
    ) -> tuple[dict[str, Any], dict[str, Any] | None] | None:
        target = self._find(template_id)
        if target is None:
            return None
        self.rows.remove(target)

        reactivated = None
        if target["is_active"]:
            remaining = self._newest_first(self._of_type(target["type"]))
            if remaining:
                remaining[0]["is_active"] = True
                reactivated = copy.deepcopy(remaining[0])
        return copy.deepcopy(target), reactivated

    async def insert_seed_version(
        self,
        *,
        template_type: str,
        version: str,
        content: Any,
        description: str,
        created_by: int | None = None,
    ) -> dict[str, Any] | None:
        if self._of_type(template_type):
            return None
        return self.add(template_type, version, content, is_active=True, description=description)


@pytest.fixture
def repo(monkeypatch: pytest.MonkeyPatch) -> InMemoryTemplateRepository:
    fake = InMemoryTemplateRepository()
    monkeypatch.setattr(service, "repository", fake)
    return fake


@pytest.fixture
def current_user() -> dict:
    return dict(SYSTEM_ADMIN)


@pytest.fixture
async def client(repo: InMemoryTemplateRepository, current_user: dict):
    import main

    main.app.dependency_overrides[auth_dependencies.get_current_user] = lambda: current_user
    transport = httpx.ASGITransport(app=main.app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
            yield http_client
    finally:
        main.app.dependency_overrides.clear()
