"""
Template version persistence (raw SQL).

Every write runs in a single transaction that first takes a per-type advisory
lock, so writers on the same template type are serialized and readers only
ever see a committed state with at most one active row per type. The
`document_templates_one_active_per_type` exclusion constraint (deferred to
commit) backs this up at the storage level.
"""

from __future__ import annotations

from typing import Any, Callable

import asyncpg

from core import db

from .errors import ConflictError

COLUMNS = "id, type, version, content, is_active, description, created_at, created_by"


class _RowVanished(Exception):
    pass


def _to_template(row: dict[str, Any] | asyncpg.Record | None) -> dict[str, Any] | None:
    if row is None:
        return None
    out = dict(row)
    out["id"] = str(out["id"])
    return out


async def _lock_type(conn: asyncpg.Connection, template_type: str) -> None:
    await conn.execute(
        "SELECT pg_advisory_xact_lock(hashtext('document_templates:' || $1))",
        template_type,
    )


async def _fetch_active_for_update(conn: asyncpg.Connection, template_type: str) -> asyncpg.Record | None:
    return await conn.fetchrow(
        f"""
        SELECT {COLUMNS}
        FROM document_templates
        WHERE type = $1
          AND is_active = true
        ORDER BY created_at DESC, id DESC
        LIMIT 1
        FOR UPDATE
        """,
        template_type,
    )


async def _deactivate_others(conn: asyncpg.Connection, template_type: str, keep_id: str | None = None) -> None:
    await conn.execute(
        """
        UPDATE document_templates
        SET is_active = false
        WHERE type = $1
          AND is_active = true
          AND ($2::uuid IS NULL OR id <> $2::uuid)
        """,
        template_type,
        keep_id,
    )


async def list_versions(template_type: str) -> list[dict[str, Any]]:
    rows = await db.fetch_all(
        f"""
        SELECT {COLUMNS}
        FROM document_templates
        WHERE type = $1
        ORDER BY created_at DESC, id DESC
        """,
        template_type,
    )
    return [_to_template(r) for r in rows]


async def get_version(template_id: str) -> dict[str, Any] | None:
    row = await db.fetch_one(
        f"""
        SELECT {COLUMNS}
        FROM document_templates
        WHERE id = $1::uuid
        """,
        template_id,
    )
    return _to_template(row)


async def get_active(template_type: str) -> dict[str, Any] | None:
    row = await db.fetch_one(
        f"""
        SELECT {COLUMNS}
        FROM document_templates
        WHERE type = $1
          AND is_active = true
        LIMIT 1
        """,
        template_type,
    )
    return _to_template(row)


async def list_active(template_types: list[str]) -> list[dict[str, Any]]:
    rows = await db.fetch_all(
        f"""
        SELECT {COLUMNS}
        FROM document_templates
        WHERE type = ANY($1::text[])
          AND is_active = true
        ORDER BY type ASC
        """,
        list(template_types),
    )
    return [_to_template(r) for r in rows]


async def insert_active_version(
    *,
    template_type: str,
    content: Any,
    description: str,
    created_by: int | None,
    compute_version: Callable[[str | None, set[str]], str],
) -> tuple[dict[str, Any], dict[str, Any] | None]:
    """
    Insert a new version of `template_type` and make it the active one.

    `compute_version` receives the currently active version string (or None)
    and the set of versions already stored for the type, and returns the
    version for the new row. It is called while the type lock is held, so two
    concurrent saves never compute from the same predecessor.

    Returns (new_row, previously_active_row).
    """
    version: str | None = None
    try:
        async with db.transaction() as conn:
            await _lock_type(conn, template_type)
            previous = await _fetch_active_for_update(conn, template_type)
            taken = {
                str(r["version"])
                for r in await conn.fetch("SELECT version FROM document_templates WHERE type = $1", template_type)
            }
            version = compute_version(str(previous["version"]) if previous is not None else None, taken)

            await _deactivate_others(conn, template_type)
            row = await conn.fetchrow(
                f"""
                INSERT INTO document_templates (type, version, content, is_active, description, created_by)
                VALUES ($1, $2, $3::jsonb, true, $4, $5)
                RETURNING {COLUMNS}
                """,
                template_type,
                version,
                content,
                description,
                created_by,
            )
    except asyncpg.UniqueViolationError as exc:
        raise ConflictError(f"Template {template_type} version {version} already exists.") from exc
    except asyncpg.ExclusionViolationError as exc:
        raise ConflictError(f"Another active version of {template_type} was written concurrently.") from exc

    if row is None:
        raise RuntimeError("Failed to insert template version.")
    return _to_template(row), _to_template(previous)


async def activate_version(template_id: str) -> dict[str, Any] | None:
    """
    Make `template_id` the only active version of its type.

    Returns the activated row, or None if the id does not exist.
    """
    target = await get_version(template_id)
    if target is None:
        return None
    template_type = str(target["type"])

    try:
        async with db.transaction() as conn:
            await _lock_type(conn, template_type)
            await _deactivate_others(conn, template_type, keep_id=template_id)
            row = await conn.fetchrow(
                f"""
                UPDATE document_templates
                SET is_active = true
                WHERE id = $1::uuid
                RETURNING {COLUMNS}
                """,
                template_id,
            )
            if row is None:
                # Deleted between the lookup and the lock; undo the deactivation.
                raise _RowVanished()
    except _RowVanished:
        return None
    except asyncpg.ExclusionViolationError as exc:
        raise ConflictError(f"Another active version of {template_type} was written concurrently.") from exc

    return _to_template(row)


async def delete_version(template_id: str) -> tuple[dict[str, Any], dict[str, Any] | None] | None:
    """
    Delete a version. If it was active, activate the newest remaining version
    of the same type in the same transaction.

    Returns (deleted_row, reactivated_row_or_None), or None if the id does not exist.
    """
    target = await get_version(template_id)
    if target is None:
        return None
    template_type = str(target["type"])

    try:
        async with db.transaction() as conn:
            await _lock_type(conn, template_type)
            deleted = await conn.fetchrow(
                f"""
                DELETE FROM document_templates
                WHERE id = $1::uuid
                RETURNING {COLUMNS}
                """,
                template_id,
            )
            if deleted is None:
                return None

            reactivated = None
            if deleted["is_active"]:
                reactivated = await conn.fetchrow(
                    f"""
                    UPDATE document_templates
                    SET is_active = true
                    WHERE id = (
                        SELECT id
                        FROM document_templates
                        WHERE type = $1
                        ORDER BY created_at DESC, id DESC
                        LIMIT 1
                    )
                    RETURNING {COLUMNS}
                    """,
                    template_type,
                )
    except asyncpg.ExclusionViolationError as exc:
        raise ConflictError(f"Another active version of {template_type} was written concurrently.") from exc

    return _to_template(deleted), _to_template(reactivated)


async def insert_seed_version(
    *,
    template_type: str,
    version: str,
    content: Any,
    description: str,
    created_by: int | None = None,
) -> dict[str, Any] | None:
    """
    Insert an active seed version if `template_type` has no versions at all.

    Returns the inserted row, or None when the type already has versions.
    """
    async with db.transaction() as conn:
        await _lock_type(conn, template_type)
        existing = await conn.fetchval(
            "SELECT count(*) FROM document_templates WHERE type = $1",
            template_type,
        )
        if existing:
            return None
        row = await conn.fetchrow(
            f"""
            INSERT INTO document_templates (type, version, content, is_active, description, created_by)
            VALUES ($1, $2, $3::jsonb, true, $4, $5)
            RETURNING {COLUMNS}
            """,
            template_type,
            version,
            content,
            description,
            created_by,
        )
    return _to_template(row)

