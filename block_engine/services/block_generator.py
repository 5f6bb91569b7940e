"""
AI block generator - one completion round trip per block, gated by the code
validator before anything is stored.

Pipeline: prompt -> completion -> parse -> validate -> embedding (best effort)
-> insert into ``blocks``. Every expected failure comes back as a
``GenerateBlockResult`` with ``success=False``.
"""
import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from config import settings
from logging_config import logger
from services.block_models import (
    GenerateBlockParams,
    GenerateBlockResult,
    GeneratorResponse,
    Tier,
)
from services.block_system_prompt import BLOCK_SYSTEM_PROMPT, build_block_prompt
from services.code_validator import CodeValidator, get_configured_validator
from services.completion_client import CompletionError, CompletionProvider, get_completion_provider
from services.embedding_client import (
    Embedding,
    EmbeddingProvider,
    format_vector_literal,
    get_embedding_provider,
)
from services.llm_response_handler import LLMResponseHandler, ResponseParseError
from services.supabase_store import PersistenceError, PersistenceProvider, get_store


BLOCKS_TABLE = "blocks"


class BlockGenerator:
    """Generates library blocks with an LLM and stores the ones that pass validation"""

    def __init__(
        self,
        completion: CompletionProvider,
        embeddings: EmbeddingProvider,
        store: PersistenceProvider,
        validator: Optional[CodeValidator] = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
        batch_delay: float = 2.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.completion = completion
        self.embeddings = embeddings
        self.store = store
        self.validator = validator or CodeValidator()
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.batch_delay = batch_delay
        self._sleep = sleep

    async def generate_block(self, params: GenerateBlockParams) -> GenerateBlockResult:
        """
        Generate, validate and store one block.

        Args:
            params: Prompt, block type and optional owner/premium/vibe

        Returns:
            Result with ``block_id`` and ``data`` on success. On validation or
            storage failure ``data`` still carries the parsed response for
            diagnostics; it must not be rendered.
        """
        start_time = time.time()
        user_prompt = build_block_prompt(params)

        logger.info(
            "Generating block",
            block_type=params.type.value,
            vibe=params.vibe,
            user_id=params.user_id
        )

        try:
            text = await self.completion.complete(
                BLOCK_SYSTEM_PROMPT,
                user_prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True
            )
        except CompletionError as e:
            return GenerateBlockResult(success=False, error=str(e))

        if not text or not text.strip():
            logger.warning("Empty completion response", block_type=params.type.value)
            return GenerateBlockResult(success=False, error="Empty response from completion provider")

        try:
            parsed = LLMResponseHandler.parse_generator_response(text)
        except ResponseParseError as e:
            logger.error("Failed to parse generator response", error=str(e), length=len(text))
            return GenerateBlockResult(
                success=False,
                error=f"Failed to parse completion response into valid JSON: {e}"
            )

        validation = self.validator.validate(parsed.code)
        if not validation.is_valid:
            logger.warning(
                "Generated code rejected",
                name=parsed.name,
                errors=validation.errors,
                ruleset=self.validator.version
            )
            return GenerateBlockResult(
                success=False,
                error=f"Code validation failed: {', '.join(validation.errors)}",
                data=parsed
            )

        if validation.warnings:
            logger.warning("Generated code warnings", name=parsed.name, warnings=validation.warnings)

        embedding = await self._compute_embedding(params, parsed)

        record = build_block_record(parsed, params, embedding)
        try:
            row = await self.store.insert(BLOCKS_TABLE, record)
        except PersistenceError as e:
            return GenerateBlockResult(
                success=False,
                error=f"Failed to save block to database: {e}",
                data=parsed
            )

        block_id = str(row["id"])
        logger.info(
            "Block generated",
            block_id=block_id,
            block_type=params.type.value,
            has_embedding=embedding is not None,
            duration_s=round(time.time() - start_time, 2)
        )

        return GenerateBlockResult(success=True, block_id=block_id, data=parsed)

    async def generate_block_batch(
        self,
        params_list: Sequence[GenerateBlockParams]
    ) -> List[GenerateBlockResult]:
        """
        Generate blocks one after another with ``batch_delay`` seconds between
        calls. An exception from one entry becomes that entry's failure result.
        """
        results: List[GenerateBlockResult] = []

        for index, params in enumerate(params_list):
            if index > 0:
                await self._sleep(self.batch_delay)

            try:
                result = await self.generate_block(params)
            except Exception as e:
                logger.error(
                    "Batch generation item failed",
                    index=index,
                    block_type=params.type.value,
                    error=str(e),
                    exc_info=True
                )
                result = GenerateBlockResult(success=False, error=str(e) or "Batch generation failed")

            results.append(result)

        logger.info(
            "Batch generation finished",
            total=len(results),
            succeeded=sum(1 for r in results if r.success)
        )
        return results

    async def _compute_embedding(
        self,
        params: GenerateBlockParams,
        parsed: GeneratorResponse
    ) -> Optional[Embedding]:
        """Embedding for semantic search; None when the provider fails"""
        try:
            return await self.embeddings.embed(embedding_text(params, parsed))
        except Exception as e:
            logger.warning("Embedding skipped", error=str(e))
            return None


def embedding_text(params: GenerateBlockParams, parsed: GeneratorResponse) -> str:
    """Descriptive text used for the block's vibe embedding"""
    parts = [params.prompt, parsed.name, parsed.description or "", " ".join(parsed.tags or [])]
    return " ".join(p for p in parts if p)


def build_block_record(
    parsed: GeneratorResponse,
    params: GenerateBlockParams,
    embedding: Optional[Embedding]
) -> Dict[str, Any]:
    """Row for the ``blocks`` table"""
    return {
        "type": params.type.value,
        "name": parsed.name,
        "description": parsed.description,
        "code": parsed.code,
        "config": parsed.config.to_record(),
        "tags": parsed.tags or [],
        "is_premium": params.is_premium,
        "required_tier": (Tier.PRO if params.is_premium else Tier.FREE).value,
        "created_by": params.user_id,
        "vibe_embedding": format_vector_literal(embedding),
    }


def get_block_generator() -> BlockGenerator:
    """Generator wired to the configured providers"""
    return BlockGenerator(
        completion=get_completion_provider(),
        embeddings=get_embedding_provider(),
        store=get_store(),
        validator=get_configured_validator(),
        temperature=settings.TEMPERATURE,
        max_tokens=settings.MAX_TOKENS,
        batch_delay=settings.BATCH_DELAY_SECONDS
    )
