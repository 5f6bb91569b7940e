"""
Block library API router - browse stored blocks and add hand-written ones
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import Field
from typing import Any, Dict, List, Optional

from dependencies import current_user_id, store_dependency
from logging_config import logger
from services.block_models import BlockType, CamelModel, Tier
from services.code_validator import get_configured_validator
from services.supabase_store import PersistenceError, SupabaseStore

router = APIRouter()

BLOCKS_TABLE = "blocks"
DEFAULT_LIMIT = 50
MAX_LIMIT = 200

VALID_TYPES = [t.value for t in BlockType]
VALID_TIERS = [t.value for t in Tier]


class CreateBlockRequest(CamelModel):
    """Request model for adding a block to the library"""
    type: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None
    config: Optional[Dict[str, Any]] = None
    tags: List[str] = Field(default_factory=list)
    is_premium: bool = False
    required_tier: Optional[str] = None


@router.get("/blocks")
async def list_blocks(
    type: Optional[str] = Query(default=None),
    premium: Optional[str] = Query(default=None),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    store: SupabaseStore = Depends(store_dependency)
):
    """List library blocks, newest first, optionally filtered by type and premium flag"""
    filters = {}
    if type:
        filters["type"] = type
    is_premium = None
    if premium is not None:
        is_premium = premium == "true"
        filters["is_premium"] = is_premium

    try:
        blocks = await store.select(BLOCKS_TABLE, filters=filters, order="created_at", limit=limit)
    except PersistenceError as e:
        logger.error("Failed to fetch blocks", error=str(e), filters=filters)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch blocks", "details": str(e)}
        )

    return {
        "data": blocks,
        "count": len(blocks),
        "filters": {"type": type, "isPremium": is_premium, "limit": limit},
    }


@router.post("/blocks", status_code=201)
async def create_block(
    data: CreateBlockRequest,
    user_id: str = Depends(current_user_id),
    store: SupabaseStore = Depends(store_dependency)
):
    """
    Add a hand-written block to the library.

    The code goes through the same validator as generated blocks and is
    rejected when any rule fails.
    """
    if not data.type or not data.name or not data.code:
        raise HTTPException(status_code=400, detail="Missing required fields: type, name, code")

    if data.type not in VALID_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid block type. Must be one of: {', '.join(VALID_TYPES)}"
        )

    if data.required_tier is not None and data.required_tier not in VALID_TIERS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid tier. Must be one of: {', '.join(VALID_TIERS)}"
        )

    validation = get_configured_validator().validate(data.code)
    if not validation.is_valid:
        logger.warning("Rejected block code", user_id=user_id, errors=validation.errors)
        return JSONResponse(
            status_code=400,
            content={
                "error": "Code validation failed",
                "details": validation.errors,
                "warnings": validation.warnings,
            }
        )

    record = {
        "type": data.type,
        "name": data.name,
        "description": data.description,
        "code": data.code,
        "config": data.config or {},
        "tags": data.tags,
        "is_premium": data.is_premium,
        "required_tier": data.required_tier,
        "created_by": user_id,
    }

    try:
        row = await store.insert(BLOCKS_TABLE, record)
    except PersistenceError as e:
        logger.error("Failed to create block", user_id=user_id, error=str(e))
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to create block", "details": str(e)}
        )

    logger.info("Block added to library", block_id=row.get("id"), block_type=data.type, user_id=user_id)

    return JSONResponse(status_code=201, content={"success": True, "data": row})
