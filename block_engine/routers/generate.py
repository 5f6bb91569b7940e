"""
Block generation API router
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from typing import Optional

from config import settings
from dependencies import current_user_id, generator_dependency, limiter, store_dependency
from logging_config import logger
from services.block_generator import BlockGenerator
from services.block_models import BlockType, CamelModel, GenerateBlockParams, Tier
from services.code_validator import get_configured_validator
from services.supabase_store import PersistenceError, SupabaseStore

router = APIRouter()

VALID_TYPES = [t.value for t in BlockType]
GENERATION_COST = 1


class GenerateRequest(CamelModel):
    """Request model for generating a block"""
    prompt: Optional[str] = None
    type: Optional[str] = None
    vibe: Optional[str] = None
    is_premium: bool = False


class ValidateRequest(CamelModel):
    code: str


async def _fetch_profile(store: SupabaseStore, user_id: str) -> dict:
    try:
        rows = await store.select(
            "users",
            columns="credits,subscription_tier",
            filters={"id": user_id},
            limit=1
        )
    except PersistenceError:
        rows = []

    if not rows:
        raise HTTPException(status_code=500, detail="Failed to fetch user profile")
    return rows[0]


@router.post("/generate", status_code=201)
@limiter.limit(settings.GENERATE_RATE_LIMIT)
async def generate(
    request: Request,
    data: GenerateRequest,
    user_id: str = Depends(current_user_id),
    store: SupabaseStore = Depends(store_dependency),
    generator: BlockGenerator = Depends(generator_dependency)
):
    """
    Generate a block with AI for the authenticated user.

    Costs one credit, deducted only after the block is stored.
    """
    if not data.prompt or not data.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required and must be a string")

    if not data.type:
        raise HTTPException(status_code=400, detail="Type is required and must be a valid block type")

    if data.type not in VALID_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid block type. Must be one of: {', '.join(VALID_TYPES)}"
        )

    profile = await _fetch_profile(store, user_id)
    credits = profile.get("credits") or 0
    if credits <= 0:
        raise HTTPException(
            status_code=403,
            detail="Insufficient credits. Please upgrade your plan or purchase more credits."
        )

    logger.info("Block generation request", user_id=user_id, block_type=data.type)

    result = await generator.generate_block(
        GenerateBlockParams(
            prompt=data.prompt,
            type=BlockType(data.type),
            user_id=user_id,
            is_premium=data.is_premium,
            vibe=data.vibe or None
        )
    )

    if not result.success:
        return JSONResponse(
            status_code=500,
            content={
                "error": result.error or "Failed to generate block",
                "details": result.data.model_dump(by_alias=True, mode="json") if result.data else None
            }
        )

    try:
        await store.rpc("deduct_credits", {"user_id": user_id, "amount": GENERATION_COST})
    except PersistenceError as e:
        # Block is already stored; the request still succeeds
        logger.error("Failed to deduct credits", user_id=user_id, error=str(e))

    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "blockId": result.block_id,
            "block": result.data.model_dump(by_alias=True, mode="json"),
            "creditsRemaining": credits - GENERATION_COST,
        }
    )


@router.get("/generate")
async def generation_status(
    user_id: str = Depends(current_user_id),
    store: SupabaseStore = Depends(store_dependency)
):
    """Credits, subscription tier and the user's five most recent blocks"""
    try:
        profiles = await store.select(
            "users",
            columns="credits,subscription_tier",
            filters={"id": user_id},
            limit=1
        )
        recent_blocks = await store.select(
            "blocks",
            columns="id,name,type,created_at",
            filters={"created_by": user_id},
            order="created_at",
            limit=5
        )
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to fetch generation status")

    profile = profiles[0] if profiles else {}
    return {
        "user": {
            "id": user_id,
            "credits": profile.get("credits") or 0,
            "subscription_tier": profile.get("subscription_tier") or Tier.FREE.value,
        },
        "recentBlocks": recent_blocks,
    }


@router.post("/validate")
async def validate(data: ValidateRequest):
    """Run the code validator over a snippet"""
    validator = get_configured_validator()
    result = validator.validate(data.code)
    return {
        **result.model_dump(by_alias=True),
        "rulesetVersion": validator.version,
    }
