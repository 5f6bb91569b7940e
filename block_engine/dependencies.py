"""
FastAPI dependencies shared by the routers
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

from logging_config import logger
from services.block_generator import BlockGenerator, get_block_generator
from services.factory_randomizer import FactoryRandomizer
from services.supabase_store import IdentityError, SupabaseStore, get_store
from services.website_assembler import WebsiteAssembler


# Shared rate limiter; main.py registers it on the app
limiter = Limiter(key_func=get_remote_address)


def store_dependency() -> SupabaseStore:
    return get_store()


def generator_dependency() -> BlockGenerator:
    return get_block_generator()


def assembler_dependency() -> WebsiteAssembler:
    return WebsiteAssembler()


def randomizer_dependency() -> FactoryRandomizer:
    return FactoryRandomizer()


async def current_user_id(
    authorization: Optional[str] = Header(default=None),
    store: SupabaseStore = Depends(store_dependency)
) -> str:
    """Id of the user behind the bearer token; 401 otherwise"""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized. Please log in.")

    token = authorization[len("bearer "):].strip()
    try:
        user = await store.get_user(token)
    except IdentityError as e:
        logger.warning("Rejected access token", error=str(e))
        raise HTTPException(status_code=401, detail="Unauthorized. Please log in.")

    return str(user["id"])
