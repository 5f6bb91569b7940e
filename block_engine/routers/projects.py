"""
Project API router - create, list and delete website projects
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from dependencies import assembler_dependency, current_user_id, store_dependency
from logging_config import logger
from services.block_models import WizardProfile
from services.supabase_store import PersistenceConflictError, PersistenceError, SupabaseStore
from services.website_assembler import WebsiteAssembler, estimate_build_time, get_ai_recommendations

router = APIRouter()

PROJECTS_TABLE = "projects"
MAX_SUBDOMAIN_ATTEMPTS = 3


class CreateProjectRequest(BaseModel):
    """Request model for creating a project"""
    model_config = ConfigDict(populate_by_name=True)

    form_data: Optional[WizardProfile] = Field(default=None, alias="formData")


@router.post("/projects", status_code=201)
async def create_project(
    data: CreateProjectRequest,
    user_id: str = Depends(current_user_id),
    assembler: WebsiteAssembler = Depends(assembler_dependency),
    store: SupabaseStore = Depends(store_dependency)
):
    """
    Create a new website project from the wizard answers.

    Assembles five blocks for the brand's vibe, allocates a subdomain and
    stores the project unpublished.
    """
    form = data.form_data
    if form is None or not form.brand_name or not form.industry or not form.vibe:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: brandName, industry, and vibe are required"
        )

    logger.info("Assembling website", brand_name=form.brand_name, user_id=user_id)
    project = assembler.assemble_website(form)

    row = None
    for attempt in range(1, MAX_SUBDOMAIN_ATTEMPTS + 1):
        subdomain = assembler.generate_subdomain(form.brand_name)
        record = {
            "user_id": user_id,
            "name": project.name,
            "description": project.description,
            "subdomain": subdomain,
            "blocks": [b.model_dump(by_alias=True, mode="json") for b in project.blocks],
            "global_config": project.global_config.model_dump(by_alias=True, mode="json"),
            "meta_title": project.meta_title,
            "meta_description": project.meta_description,
            "is_published": False,
        }

        try:
            row = await store.insert(PROJECTS_TABLE, record)
            break
        except PersistenceConflictError:
            logger.warning("Subdomain taken, retrying", subdomain=subdomain, attempt=attempt)
        except PersistenceError as e:
            raise HTTPException(status_code=500, detail=f"Failed to create project: {e}")

    if row is None:
        raise HTTPException(status_code=500, detail="Failed to allocate a unique subdomain")

    logger.info("Project created", project_id=row.get("id"), subdomain=row.get("subdomain"))

    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "project": {
                "id": row.get("id"),
                "name": row.get("name", project.name),
                "subdomain": row.get("subdomain", subdomain),
                "createdAt": row.get("created_at"),
                "blocks": record["blocks"],
            },
            "recommendations": get_ai_recommendations(form),
            "estimatedBuildTime": estimate_build_time(project.blocks, form.vibe_intensity),
            "message": "Website created successfully!",
        }
    )


@router.get("/projects")
async def list_projects(
    user_id: str = Depends(current_user_id),
    store: SupabaseStore = Depends(store_dependency)
):
    """Get all projects for the authenticated user, newest first"""
    try:
        projects = await store.select(
            PROJECTS_TABLE,
            filters={"user_id": user_id},
            order="created_at"
        )
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to fetch projects")

    return {"projects": projects, "count": len(projects)}


@router.delete("/projects")
async def delete_project(
    project_id: Optional[str] = Query(default=None, alias="id"),
    user_id: str = Depends(current_user_id),
    store: SupabaseStore = Depends(store_dependency)
):
    """Delete a project owned by the authenticated user"""
    if not project_id:
        raise HTTPException(status_code=400, detail="Project ID is required")

    try:
        await store.delete(PROJECTS_TABLE, {"id": project_id, "user_id": user_id})
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to delete project")

    logger.info("Project deleted", project_id=project_id, user_id=user_id)
    return {"success": True, "message": "Project deleted successfully"}
