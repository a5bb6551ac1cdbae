import uuid
from datetime import datetime, timezone

import pytest

from document_templates import assembly

TYPE = "formation_agenda"

OPERATOR = {
    "id": 1,
    "email": "ops@example.com",
    "role": "system_admin",
    "is_active": True,
    "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
}

VIEWER = {**OPERATOR, "id": 2, "email": "viewer@example.com", "role": "admin"}


@pytest.fixture
def current_user(request) -> dict:
    # Tests opt into the read-only role with indirect parametrization.
    return dict(getattr(request, "param", OPERATOR))


def _agenda(chairman: str = "") -> dict:
    content = assembly.default_content(TYPE)
    content["chairman"] = chairman
    return content


async def test_save_creates_initial_then_patch_versions(client):
    first = await client.post(
        f"/templates/types/{TYPE}/versions",
        json={"content": _agenda("A"), "description": "first"},
    )
    second = await client.post(
        f"/templates/types/{TYPE}/versions",
        json={"content": _agenda("B"), "description": "second"},
    )

    assert first.status_code == 201
    assert first.json()["template"]["version"] == "1.0.0"
    assert second.status_code == 201
    body = second.json()
    assert body["template"]["version"] == "1.0.1"
    assert body["template"]["is_active"] is True
    assert body["template"]["created_by"] == 1
    assert body["message"] == "Template saved as v1.0.1."


async def test_save_with_blank_description_is_rejected(client, repo):
    response = await client.post(
        f"/templates/types/{TYPE}/versions",
        json={"content": _agenda(), "description": "   "},
    )

    assert response.status_code == 400
    assert repo.rows == []


async def test_save_with_invalid_agenda_is_rejected(client, repo):
    content = _agenda()
    content["agendas"] = [{"content": "missing title"}]

    response = await client.post(
        f"/templates/types/{TYPE}/versions",
        json={"content": content, "description": "broken"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Agenda 1 needs a title."
    assert repo.rows == []


@pytest.mark.parametrize("current_user", [VIEWER], indirect=True)
async def test_read_only_admin_cannot_change_templates(client, repo):
    row = repo.add(TYPE, "1.0.0", _agenda(), is_active=True)

    save = await client.post(
        f"/templates/types/{TYPE}/versions",
        json={"content": _agenda("B"), "description": "edit"},
    )
    activate = await client.post(f"/templates/{row['id']}/activate")
    delete = await client.delete(f"/templates/{row['id']}")
    listing = await client.get(f"/templates/types/{TYPE}/versions")

    assert [save.status_code, activate.status_code, delete.status_code] == [403, 403, 403]
    assert listing.status_code == 200
    assert listing.json()["count"] == 1


async def test_active_version_missing_is_not_found(client, repo):
    response = await client.get(f"/templates/types/{TYPE}/active")

    assert response.status_code == 404


async def test_unknown_version_is_not_found(client, repo):
    missing = await client.get(f"/templates/{uuid.uuid4()}")
    garbage = await client.post("/templates/not-a-uuid/activate")

    assert missing.status_code == 404
    assert garbage.status_code == 404


async def test_diff_between_versions(client, repo):
    old = repo.add(TYPE, "1.0.0", {"chairman": "A", "agendas": [{"title": "x"}]})
    new = repo.add(TYPE, "1.0.1", {"chairman": "B", "agendas": [{"title": "x"}, {"title": "y"}]})

    response = await client.get("/templates/diff", params={"from": old["id"], "to": new["id"]})

    assert response.status_code == 200
    body = response.json()
    assert body["from_version"] == "1.0.0"
    assert body["to_version"] == "1.0.1"
    assert body["changes"] == [
        {
            "path": "agendas[1]",
            "type": "added",
            "old_value": None,
            "new_value": '{"title":"y"}',
            "display_path": "Agenda 2",
        },
        {
            "path": "chairman",
            "type": "modified",
            "old_value": "A",
            "new_value": "B",
            "display_path": "Chairman",
        },
    ]
    assert body["summary"] == {"added": 1, "removed": 0, "modified": 1}


async def test_diff_with_itself_is_rejected(client, repo):
    row = repo.add(TYPE, "1.0.0", {"chairman": "A"})

    response = await client.get("/templates/diff", params={"from": row["id"], "to": row["id"]})

    assert response.status_code == 400


async def test_activate_rolls_back(client, repo):
    old = repo.add(TYPE, "1.0.0", {"chairman": "A"})
    repo.add(TYPE, "1.0.1", {"chairman": "B"}, is_active=True)

    response = await client.post(f"/templates/{old['id']}/activate")
    active = await client.get(f"/templates/types/{TYPE}/active")

    assert response.status_code == 200
    assert response.json()["message"] == "Template v1.0.0 is now active."
    assert active.json()["template"]["content"] == {"chairman": "A"}


async def test_delete_active_reports_reactivated_version(client, repo):
    repo.add(TYPE, "1.0.0", {"chairman": "A"})
    newest = repo.add(TYPE, "1.0.1", {"chairman": "B"}, is_active=True)

    response = await client.delete(f"/templates/{newest['id']}")

    assert response.status_code == 200
    assert response.json() == {
        "message": "Template v1.0.1 was deleted.",
        "deleted_version": "1.0.1",
        "reactivated_version": "1.0.0",
    }


async def test_list_templates_by_category(client, repo):
    repo.add(TYPE, "1.0.0", _agenda(), is_active=True)
    repo.add("lpa", "1.0.0", {"v": 1}, is_active=True)

    ok = await client.get("/templates", params={"category": "assembly"})
    unsupported = await client.get("/templates", params={"category": "lpa"})

    assert ok.status_code == 200
    assert [t["type"] for t in ok.json()["templates"]] == [TYPE]
    assert unsupported.status_code == 400


async def test_preview_prefers_transient_content(client, repo):
    repo.add(TYPE, "1.0.0", {"chairman": "stored"}, is_active=True)

    response = await client.post("/templates/preview", json={"type": TYPE, "content": {"chairman": "draft"}})

    body = response.json()
    assert response.status_code == 200
    assert body["source"] == "transient"
    assert body["version"] is None
    assert body["content"] == {"chairman": "draft"}
    assert body["sample_data"] == assembly.sample_data(TYPE)


async def test_preview_falls_back_to_active_version(client, repo):
    repo.add(TYPE, "1.0.0", {"chairman": "stored"}, is_active=True)

    response = await client.post(
        "/templates/preview",
        json={"type": TYPE, "test_data": {"assembly_date": "2025-01-01"}},
    )

    body = response.json()
    assert body["source"] == "active"
    assert body["version"] == "1.0.0"
    assert body["content"] == {"chairman": "stored"}
    assert body["sample_data"] == {"assembly_date": "2025-01-01"}


async def test_preview_without_active_version_is_not_found(client, repo):
    response = await client.post("/templates/preview", json={"type": "regular_minutes"})

    assert response.status_code == 404


async def test_empty_object_saves_for_types_without_rules(client, repo):
    response = await client.post("/templates/types/lpa/versions", json={"content": {}, "description": "blank"})

    assert response.status_code == 201
    assert response.json()["template"]["content"] == {}
