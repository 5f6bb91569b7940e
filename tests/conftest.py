"""Pytest configuration and fixtures."""

import json
import os

# Settings are read at import time; configure the test environment first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("OPENAI_BASE_URL", "https://llm.test/v1")
os.environ.setdefault("SUPABASE_URL", "https://supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")

import pytest
from fastapi.testclient import TestClient

from dependencies import (
    current_user_id,
    limiter,
    store_dependency,
)
from main import app
from services.block_generator import BlockGenerator
from services.supabase_store import PersistenceConflictError, PersistenceError


# ============================================================================
# Provider fakes
# ============================================================================

class FakeCompletion:
    """Completion provider returning canned replies in order"""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def complete(self, system_prompt, user_prompt, *, temperature, max_tokens, json_mode=True):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "json_mode": json_mode,
        })
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeEmbeddings:
    def __init__(self, vector=None, error=None):
        self.vector = vector
        self.error = error
        self.texts = []

    async def embed(self, text):
        self.texts.append(text)
        if self.error:
            raise self.error
        return self.vector


class FakeStore:
    """In-memory stand-in for SupabaseStore"""

    def __init__(self, fail_insert=None, conflicts=0, tables=None):
        self.fail_insert = fail_insert
        self.conflicts = conflicts
        self.tables = tables or {}
        self.inserted = []
        self.deleted = []
        self.rpc_calls = []
        self.rpc_error = None
        self.select_error = None
        self._next_id = 1

    async def insert(self, table, record):
        if self.conflicts:
            self.conflicts -= 1
            raise PersistenceConflictError("duplicate key value violates unique constraint")
        if self.fail_insert:
            raise PersistenceError(self.fail_insert)
        row = {"id": f"{table}-{self._next_id}", "created_at": "2026-10-17T00:00:00+00:00", **record}
        self._next_id += 1
        self.inserted.append((table, record))
        return row

    async def select(self, table, columns="*", filters=None, order=None, descending=True, limit=None):
        if self.select_error:
            raise PersistenceError(self.select_error)
        rows = [
            row for row in self.tables.get(table, [])
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        return rows[:limit] if limit is not None else rows

    async def delete(self, table, filters):
        self.deleted.append((table, filters))

    async def rpc(self, function, params):
        self.rpc_calls.append((function, params))
        if self.rpc_error:
            raise PersistenceError(self.rpc_error)
        return None

    async def ping(self):
        return self.select_error is None

    def inserts_into(self, table):
        return [record for name, record in self.inserted if name == table]


# ============================================================================
# Data Fixtures
# ============================================================================

CLEAN_COMPONENT = """'use client';

interface HeroProps {
  title?: string;
}

export default function Hero({ title = 'Build faster' }: HeroProps) {
  return (
    <section className="bg-slate-950 py-24 text-white">
      <h1 className="text-5xl font-bold">{title}</h1>
      <button className="mt-8 rounded-lg bg-indigo-500 px-6 py-3">Get started</button>
    </section>
  );
}
"""


@pytest.fixture
def clean_code():
    return CLEAN_COMPONENT


@pytest.fixture
def generator_payload():
    return {
        "code": CLEAN_COMPONENT,
        "config": {
            "colors": {"primary": "#6366F1", "background": "#020617"},
            "layout": {"variant": "centered", "columns": 1},
            "content": {"heading": "Build faster", "buttonText": "Get started"},
            "animation": {"enabled": True, "type": "fade"},
            "glow": "soft",
        },
        "name": "GlassHero",
        "description": "Dark hero with a glass CTA",
        "tags": ["hero", "dark", "glass"],
    }


@pytest.fixture
def generator_json(generator_payload):
    return json.dumps(generator_payload)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings(vector=[0.1, 0.2, 0.3])


@pytest.fixture
def make_generator(fake_embeddings, fake_store):
    """Build a BlockGenerator around fakes; providers can be swapped per test"""

    def _make(*replies, store=None, embeddings=None, **kwargs):
        kwargs.setdefault("batch_delay", 0)
        return BlockGenerator(
            completion=FakeCompletion(*replies),
            embeddings=embeddings or fake_embeddings,
            store=store or fake_store,
            **kwargs
        )

    return _make


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest.fixture
def api(fake_store):
    """TestClient with providers overridden; yields (client, overrides)"""
    limiter.enabled = False
    app.dependency_overrides[store_dependency] = lambda: fake_store
    app.dependency_overrides[current_user_id] = lambda: "user-1"

    client = TestClient(app, raise_server_exceptions=False)
    yield client, app.dependency_overrides

    app.dependency_overrides.clear()
    limiter.enabled = True
