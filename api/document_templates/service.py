"""
Template versioning business logic.

Scope:
- version history and the active version per template type
- save (new active version with the next version number)
- activate (rollback) and delete (with re-activation of the newest survivor)
- diff between two stored versions
- content resolution for the document generator (active or transient)
- seeding the initial 1.0.0 versions
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from . import assembly, content, diff, labels, repository, versioning
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SOURCE_ACTIVE = "active"
SOURCE_TRANSIENT = "transient"


@dataclass(frozen=True)
class DiffResult:
    from_version: str
    to_version: str
    changes: list[diff.Change]
    summary: diff.DiffSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "from_version": self.from_version,
            "to_version": self.to_version,
            "changes": [
                {
                    "path": change.path,
                    "type": change.type,
                    "old_value": change.old_value,
                    "new_value": change.new_value,
                    "display_path": labels.display_path(change.segments),
                }
                for change in self.changes
            ],
            "summary": {
                "added": self.summary.added,
                "removed": self.summary.removed,
                "modified": self.summary.modified,
            },
        }


@dataclass(frozen=True)
class DeleteResult:
    deleted_version: str
    reactivated_version: str | None


def _normalize_type(template_type: str) -> str:
    template_type = (template_type or "").strip()
    if not template_type:
        raise ValidationError("Template type is required.")
    return template_type


def _normalize_id(template_id: str) -> str:
    # Anything that is not a UUID cannot exist in the store.
    try:
        return str(UUID(str(template_id).strip()))
    except ValueError as exc:
        raise NotFoundError(f"Template version {template_id} not found.") from exc


def _check_content(value: Any) -> None:
    try:
        content.parse(value)
    except content.ContentTypeError as exc:
        raise ValidationError(f"Invalid template content: {exc}") from exc


async def list_versions(template_type: str) -> list[dict]:
    return await repository.list_versions(_normalize_type(template_type))


async def get_active(template_type: str) -> dict | None:
    return await repository.get_active(_normalize_type(template_type))


async def get_version(template_id: str) -> dict:
    row = await repository.get_version(_normalize_id(template_id))
    if row is None:
        raise NotFoundError(f"Template version {template_id} not found.")
    return row


async def list_assembly_templates() -> list[dict]:
    return await repository.list_active(list(assembly.ASSEMBLY_TEMPLATE_TYPES))


async def save(
    template_type: str,
    template_content: Any,
    description: str,
    *,
    author_id: int | None = None,
    bump: str = "patch",
) -> dict:
    """
    Store `template_content` as the new active version of `template_type`.

    The version number is derived from the currently active version: patch+1
    by default, or a minor/major bump when requested, skipping versions that
    already exist. The first version of a type is 1.0.0.
    """
    template_type = _normalize_type(template_type)
    description = (description or "").strip()
    if not description:
        raise ValidationError("A description of the change is required.")
    if bump not in versioning.BUMP_KINDS:
        raise ValidationError(
            f"Unknown version bump '{bump}'. Allowed: {', '.join(versioning.BUMP_KINDS)}."
        )
    _check_content(template_content)

    row, previous = await repository.insert_active_version(
        template_type=template_type,
        content=template_content,
        description=description,
        created_by=author_id,
        compute_version=lambda current, taken: versioning.next_version(current, bump, taken),
    )
    logger.info(
        "template_saved type=%s version=%s previous=%s user_id=%s",
        template_type,
        row["version"],
        previous["version"] if previous is not None else None,
        author_id,
    )
    return row


async def activate(template_id: str, *, actor_id: int | None = None) -> dict:
    row = await repository.activate_version(_normalize_id(template_id))
    if row is None:
        raise NotFoundError(f"Template version {template_id} not found.")
    logger.info(
        "template_activated type=%s version=%s id=%s user_id=%s",
        row["type"],
        row["version"],
        row["id"],
        actor_id,
    )
    return row


async def delete(template_id: str, *, actor_id: int | None = None) -> DeleteResult:
    result = await repository.delete_version(_normalize_id(template_id))
    if result is None:
        raise NotFoundError(f"Template version {template_id} not found.")

    deleted, reactivated = result
    if reactivated is not None:
        logger.info(
            "template_reactivated type=%s version=%s after_delete_of=%s",
            reactivated["type"],
            reactivated["version"],
            deleted["version"],
        )
    elif deleted["is_active"]:
        logger.info("template_type_emptied type=%s", deleted["type"])

    logger.info(
        "template_deleted type=%s version=%s id=%s user_id=%s",
        deleted["type"],
        deleted["version"],
        deleted["id"],
        actor_id,
    )
    return DeleteResult(
        deleted_version=str(deleted["version"]),
        reactivated_version=str(reactivated["version"]) if reactivated is not None else None,
    )


async def compare(from_template_id: str, to_template_id: str) -> DiffResult:
    """
    Diff the content of two stored versions of the same template type.
    """
    from_row = await get_version(from_template_id)
    to_row = await get_version(to_template_id)

    if from_row["type"] != to_row["type"]:
        raise ValidationError("Templates of different types cannot be compared.")

    try:
        changes = diff.diff_content(from_row["content"], to_row["content"])
    except content.ContentTypeError as exc:
        raise ValidationError(f"Stored template content cannot be compared: {exc}") from exc

    return DiffResult(
        from_version=str(from_row["version"]),
        to_version=str(to_row["version"]),
        changes=changes,
        summary=diff.summarize(changes),
    )


async def resolve_content(
    template_type: str,
    transient_content: Any | None = None,
) -> tuple[Any, str, dict | None]:
    """
    Content the document generator should render for `template_type`.

    An unsaved (transient) blob wins when given; otherwise the active version
    is used. Returns (content, source, active_row_or_None).
    """
    template_type = _normalize_type(template_type)
    if transient_content is not None:
        _check_content(transient_content)
        return transient_content, SOURCE_TRANSIENT, None

    active = await repository.get_active(template_type)
    if active is None:
        raise NotFoundError(f"No active template for type {template_type}.")
    return active["content"], SOURCE_ACTIVE, active


async def seed_defaults(*, created_by: int | None = None) -> list[dict]:
    """
    Create the 1.0.0 version for every template family that ships default
    content and has no versions yet. Returns the rows that were inserted.
    """
    inserted: list[dict] = []
    for template_type in assembly.seedable_types():
        row = await repository.insert_seed_version(
            template_type=template_type,
            version=versioning.INITIAL_VERSION,
            content=assembly.default_content(template_type),
            description=assembly.default_description(template_type),
            created_by=created_by,
        )
        if row is None:
            logger.info("template_seed_skipped type=%s reason=has_versions", template_type)
            continue
        logger.info("template_seeded type=%s version=%s", template_type, row["version"])
        inserted.append(row)
    return inserted
