"""
Document template API endpoints.

Reads need an admin; anything that changes which version is used for
document generation needs a system admin.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from auth import dependencies as auth_dependencies

from . import assembly, schemas, service
from .errors import NotFoundError, ValidationError

router = APIRouter(prefix="/templates")


def _template(row: dict) -> schemas.TemplateVersionResponse:
    return schemas.TemplateVersionResponse(**row)


@router.get("")
async def list_templates(
    category: str = Query(..., max_length=50),
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    if category != "assembly":
        raise HTTPException(status_code=400, detail=f"Unsupported template category '{category}'.")
    rows = await service.list_assembly_templates()
    return {"templates": [_template(r) for r in rows], "count": len(rows)}


@router.get("/types/{template_type}/versions")
async def list_versions(
    template_type: str,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    rows = await service.list_versions(template_type)
    return {"type": template_type, "versions": [_template(r) for r in rows], "count": len(rows)}


@router.get("/types/{template_type}/active")
async def get_active(
    template_type: str,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    row = await service.get_active(template_type)
    if row is None:
        raise NotFoundError(f"No active template for type {template_type}.")
    return {"template": _template(row)}


@router.post("/types/{template_type}/versions", status_code=201)
async def save_version(
    template_type: str,
    request: schemas.SaveTemplateRequest,
    current_user: dict = Depends(auth_dependencies.require_system_admin),
) -> dict:
    """
    Save edited content as the new active version of `template_type`.
    """
    problem = assembly.validate_content(template_type, request.content)
    if problem is not None:
        raise ValidationError(problem)

    row = await service.save(
        template_type,
        request.content,
        request.description,
        author_id=int(current_user["id"]),
        bump=request.bump,
    )
    return {
        "template": _template(row),
        "message": f"Template saved as v{row['version']}.",
    }


@router.get("/diff")
async def diff_versions(
    from_id: str = Query(..., alias="from", min_length=1),
    to_id: str = Query(..., alias="to", min_length=1),
    _: dict = Depends(auth_dependencies.require_admin),
) -> schemas.DiffResponse:
    if from_id == to_id:
        raise ValidationError("A template version cannot be compared with itself.")
    result = await service.compare(from_id, to_id)
    return schemas.DiffResponse(**result.to_dict())


@router.post("/preview")
async def preview(
    request: schemas.PreviewRequest,
    _: dict = Depends(auth_dependencies.require_system_admin),
) -> dict:
    """
    Resolve what the document generator would render for a template type.

    Rendering itself happens in the generator; this returns its inputs.
    """
    content, source, active = await service.resolve_content(request.type, request.content)
    return {
        "type": request.type,
        "source": source,
        "version": active["version"] if active is not None else None,
        "content": content,
        "sample_data": request.test_data if request.test_data is not None else assembly.sample_data(request.type),
    }


@router.get("/{template_id}")
async def get_version(
    template_id: str,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    row = await service.get_version(template_id)
    return {"template": _template(row)}


@router.post("/{template_id}/activate")
async def activate_version(
    template_id: str,
    current_user: dict = Depends(auth_dependencies.require_system_admin),
) -> dict:
    row = await service.activate(template_id, actor_id=int(current_user["id"]))
    return {
        "template": _template(row),
        "message": f"Template v{row['version']} is now active.",
    }


@router.delete("/{template_id}")
async def delete_version(
    template_id: str,
    current_user: dict = Depends(auth_dependencies.require_system_admin),
) -> schemas.DeleteResponse:
    result = await service.delete(template_id, actor_id=int(current_user["id"]))
    return schemas.DeleteResponse(
        message=f"Template v{result.deleted_version} was deleted.",
        deleted_version=result.deleted_version,
        reactivated_version=result.reactivated_version,
    )
