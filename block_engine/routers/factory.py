"""
Factory API router - scheduled block generation and factory statistics
"""
from dataclasses import asdict
from datetime import datetime, timezone
import hmac
import time

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from config import settings
from dependencies import generator_dependency, randomizer_dependency, store_dependency
from logging_config import logger
from services.block_generator import BlockGenerator
from services.block_models import GenerateBlockParams
from services.factory_randomizer import BLOCK_CATEGORIES, FactoryRandomizer, generation_stats
from services.factory_stats import RECENT_LOGS_LIMIT, summarize_factory_logs
from services.supabase_store import PersistenceError, SupabaseStore

router = APIRouter()

FACTORY_LOGS_TABLE = "factory_logs"
MAX_BATCH_SIZE = 10


def _secret_matches(candidate: str) -> bool:
    return bool(candidate) and hmac.compare_digest(candidate.encode(), settings.CRON_SECRET.encode())


def verify_cron_secret(request: Request) -> bool:
    """
    Accept the cron secret from an ``Authorization: Bearer`` header, the
    ``x-vercel-cron`` header set by the scheduler, or a ``secret`` query
    parameter for manual runs.
    """
    if not settings.CRON_SECRET:
        logger.error("CRON_SECRET not configured")
        return False

    auth_header = request.headers.get("authorization")
    if auth_header:
        return _secret_matches(auth_header.replace("Bearer ", "", 1).strip())

    if _secret_matches(request.headers.get("x-vercel-cron", "")):
        return True

    return _secret_matches(request.query_params.get("secret", ""))


@router.api_route("/cron/generate", methods=["GET", "POST"])
async def cron_generate(
    request: Request,
    generator: BlockGenerator = Depends(generator_dependency),
    randomizer: FactoryRandomizer = Depends(randomizer_dependency),
    store: SupabaseStore = Depends(store_dependency)
):
    """
    Generate one random free block for the public library.

    Triggered by the scheduler (or manually with the cron secret).
    """
    start_time = time.time()

    if not verify_cron_secret(request):
        logger.warning("Unauthorized cron attempt", client=request.client.host if request.client else None)
        return JSONResponse(
            status_code=401,
            content={
                "success": False,
                "error": "Unauthorized - Invalid or missing CRON_SECRET",
                "message": "Please provide valid credentials via Authorization header or ?secret=XXX",
            }
        )

    picked = randomizer.random_block_params()
    category, vibe, prompt = picked.category, picked.vibe, picked.prompt

    logger.info("Factory tick", category=category.value, vibe=vibe, prompt=prompt)

    result = await generator.generate_block(
        GenerateBlockParams(prompt=prompt, type=category, vibe=vibe, is_premium=False)
    )
    duration_ms = int((time.time() - start_time) * 1000)

    try:
        await store.insert(FACTORY_LOGS_TABLE, {
            "block_id": result.block_id,
            "category": category.value,
            "vibe": vibe,
            "prompt": prompt,
            "success": result.success,
            "error": result.error,
            "generation_time_ms": duration_ms,
            "created_at": datetime.now(timezone.utc).isoformat(),
        })
    except PersistenceError as e:
        logger.warning("Failed to write factory log", error=str(e))

    params = {"category": category.value, "vibe": vibe, "prompt": prompt}

    if not result.success:
        logger.error("Factory generation failed", error=result.error, **params)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": result.error, "params": params, "duration_ms": duration_ms}
        )

    logger.info("Factory block generated", block_id=result.block_id, duration_ms=duration_ms)

    return {
        "success": True,
        "blockId": result.block_id,
        **params,
        "duration_ms": duration_ms,
        "message": f"Successfully generated {category.value} block with {vibe} vibe",
    }


@router.post("/cron/generate-batch")
async def cron_generate_batch(
    request: Request,
    count: int = Query(default=3, ge=1, le=MAX_BATCH_SIZE),
    generator: BlockGenerator = Depends(generator_dependency),
    randomizer: FactoryRandomizer = Depends(randomizer_dependency)
):
    """Generate ``count`` random blocks sequentially, throttled between calls"""
    if not verify_cron_secret(request):
        return JSONResponse(
            status_code=401,
            content={"success": False, "error": "Unauthorized - Invalid or missing CRON_SECRET"}
        )

    params_list = []
    for _ in range(count):
        picked = randomizer.random_block_params()
        params_list.append(GenerateBlockParams(
            prompt=picked.prompt,
            type=picked.category,
            vibe=picked.vibe,
            is_premium=False
        ))

    results = await generator.generate_block_batch(params_list)

    return {
        "success": any(r.success for r in results),
        "generated": sum(1 for r in results if r.success),
        "results": [
            {
                "category": p.type.value,
                "vibe": p.vibe,
                "success": r.success,
                "blockId": r.block_id,
                "error": r.error,
            }
            for p, r in zip(params_list, results)
        ],
    }


@router.get("/factory/stats")
async def factory_stats(store: SupabaseStore = Depends(store_dependency)):
    """Statistics about the automated block factory (public)"""
    try:
        logs = await store.select(FACTORY_LOGS_TABLE, order="created_at", limit=RECENT_LOGS_LIMIT)
    except PersistenceError as e:
        logger.error("Failed to fetch factory logs", error=str(e))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e) or "Failed to fetch statistics"}
        )

    try:
        by_category = await store.select("factory_stats")
    except PersistenceError as e:
        logger.warning("Failed to fetch factory_stats view", error=str(e))
        by_category = []

    summary = summarize_factory_logs(logs)
    recent_logs = summary.pop("recent_logs")

    return {
        "success": True,
        "stats": summary,
        "by_category": by_category,
        "potential_combinations": asdict(generation_stats()),
        "categories": [c.value for c in BLOCK_CATEGORIES],
        "recent_logs": recent_logs,
    }
