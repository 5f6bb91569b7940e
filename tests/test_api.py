"""HTTP API tests with providers replaced by in-memory fakes."""

import json
import random

import pytest

import main
from conftest import FakeStore
from dependencies import (
    assembler_dependency,
    current_user_id,
    generator_dependency,
    randomizer_dependency,
)
from services.block_models import BlockType
from services.factory_randomizer import BLOCK_CATEGORIES, BLOCK_PROMPTS, FactoryRandomizer
from services.website_assembler import WebsiteAssembler


WIZARD = {"brandName": "Acme Labs", "industry": "SaaS", "vibe": "minimal", "vibeIntensity": 60}
CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}


@pytest.fixture
def use_generator(api, make_generator):
    """Install a generator built from canned completion replies"""
    _, overrides = api

    def _install(*replies, **kwargs):
        generator = make_generator(*replies, **kwargs)
        overrides[generator_dependency] = lambda: generator
        return generator

    return _install


# ============================================================================
# Service endpoints
# ============================================================================

def test_root(api):
    client, _ = api
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "Block Engine"


def test_health_and_readiness(api, monkeypatch):
    client, _ = api
    store = FakeStore()
    monkeypatch.setattr(main, "get_store", lambda: store)

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["checks"]["database"]["status"] == "ok"
    assert client.get("/readiness").json() == {"status": "ready"}

    store.select_error = "down"
    assert client.get("/health").json()["status"] == "degraded"
    assert client.get("/readiness").status_code == 503


# ============================================================================
# Projects
# ============================================================================

def test_create_project(api, fake_store):
    client, overrides = api
    overrides[assembler_dependency] = lambda: WebsiteAssembler(rng=random.Random(4))

    response = client.post("/api/projects", json={"formData": WIZARD})

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["project"]["id"] == "projects-1"
    assert body["project"]["name"] == "Acme Labs Website"
    assert body["project"]["subdomain"].startswith("acme-labs-")
    assert [b["order"] for b in body["project"]["blocks"]] == [0, 1, 2, 3, 4]
    assert body["recommendations"] == ["features", "pricing", "testimonials", "cta"]
    assert body["estimatedBuildTime"] == 18
    assert body["message"] == "Website created successfully!"

    [record] = fake_store.inserts_into("projects")
    assert record["user_id"] == "user-1"
    assert record["is_published"] is False
    assert record["global_config"]["brandName"] == "Acme Labs"
    assert record["global_config"]["colorScheme"]["primary"] == "#000000"
    assert set(record["blocks"][0]) == {"blockId", "name", "type", "order"}


@pytest.mark.parametrize("form", [
    None,
    {"industry": "SaaS", "vibe": "minimal"},
    {"brandName": "Acme", "vibe": "minimal"},
    {"brandName": "Acme", "industry": "SaaS"},
])
def test_create_project_missing_fields(api, fake_store, form):
    client, _ = api
    payload = {"formData": form} if form is not None else {}

    response = client.post("/api/projects", json=payload)

    assert response.status_code == 400
    assert "Missing required fields" in response.json()["detail"]
    assert fake_store.inserted == []


def test_create_project_retries_taken_subdomain(api, fake_store):
    client, _ = api
    fake_store.conflicts = 2

    response = client.post("/api/projects", json={"formData": WIZARD})

    assert response.status_code == 201
    assert len(fake_store.inserts_into("projects")) == 1


def test_create_project_gives_up_after_repeated_conflicts(api, fake_store):
    client, _ = api
    fake_store.conflicts = 3

    response = client.post("/api/projects", json={"formData": WIZARD})

    assert response.status_code == 500
    assert fake_store.inserted == []


def test_create_project_requires_auth(api):
    client, overrides = api
    del overrides[current_user_id]

    response = client.post("/api/projects", json={"formData": WIZARD})

    assert response.status_code == 401


def test_list_projects(api, fake_store):
    client, _ = api
    fake_store.tables["projects"] = [
        {"id": "p-1", "user_id": "user-1", "name": "Mine"},
        {"id": "p-2", "user_id": "user-2", "name": "Theirs"},
    ]

    body = client.get("/api/projects").json()

    assert body["count"] == 1
    assert body["projects"][0]["id"] == "p-1"


def test_list_projects_store_failure(api, fake_store):
    client, _ = api
    fake_store.select_error = "timeout"

    response = client.get("/api/projects")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch projects"


def test_delete_project(api, fake_store):
    client, _ = api

    response = client.delete("/api/projects", params={"id": "p-1"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert fake_store.deleted == [("projects", {"id": "p-1", "user_id": "user-1"})]


def test_delete_project_requires_id(api, fake_store):
    client, _ = api

    response = client.delete("/api/projects")

    assert response.status_code == 400
    assert response.json()["detail"] == "Project ID is required"
    assert fake_store.deleted == []


# ============================================================================
# Generation
# ============================================================================

@pytest.fixture
def funded_user(fake_store):
    fake_store.tables["users"] = [{"id": "user-1", "credits": 5, "subscription_tier": "pro"}]
    return fake_store


def test_generate_block(api, use_generator, funded_user, generator_json):
    client, _ = api
    use_generator(generator_json)

    response = client.post("/api/generate", json={"prompt": "A glass hero", "type": "hero", "vibe": "dark"})

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["blockId"] == "blocks-1"
    assert body["block"]["name"] == "GlassHero"
    assert body["creditsRemaining"] == 4
    assert funded_user.rpc_calls == [("deduct_credits", {"user_id": "user-1", "amount": 1})]
    [record] = funded_user.inserts_into("blocks")
    assert record["created_by"] == "user-1"


def test_generate_block_premium(api, use_generator, funded_user, generator_json):
    client, _ = api
    use_generator(generator_json)

    client.post("/api/generate", json={"prompt": "A glass hero", "type": "hero", "isPremium": True})

    [record] = funded_user.inserts_into("blocks")
    assert record["required_tier"] == "pro"


def test_generate_succeeds_when_credit_deduction_fails(api, use_generator, funded_user, generator_json):
    client, _ = api
    use_generator(generator_json)
    funded_user.rpc_error = "function deduct_credits does not exist"

    response = client.post("/api/generate", json={"prompt": "A glass hero", "type": "hero"})

    assert response.status_code == 201


@pytest.mark.parametrize("payload,message", [
    ({"type": "hero"}, "Prompt is required"),
    ({"prompt": "   ", "type": "hero"}, "Prompt is required"),
    ({"prompt": "A hero"}, "Type is required"),
    ({"prompt": "A hero", "type": "sidebar"}, "Invalid block type"),
])
def test_generate_rejects_bad_input(api, use_generator, funded_user, generator_json, payload, message):
    client, _ = api
    generator = use_generator(generator_json)

    response = client.post("/api/generate", json=payload)

    assert response.status_code == 400
    assert message in response.json()["detail"]
    assert generator.completion.calls == []


def test_generate_without_credits(api, use_generator, fake_store, generator_json):
    client, _ = api
    generator = use_generator(generator_json)
    fake_store.tables["users"] = [{"id": "user-1", "credits": 0}]

    response = client.post("/api/generate", json={"prompt": "A hero", "type": "hero"})

    assert response.status_code == 403
    assert generator.completion.calls == []


def test_generate_without_profile(api, use_generator, generator_json):
    client, _ = api
    use_generator(generator_json)

    response = client.post("/api/generate", json={"prompt": "A hero", "type": "hero"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch user profile"


def test_generate_failure_does_not_charge(api, use_generator, funded_user, generator_payload):
    client, _ = api
    generator_payload["code"] += "\neval(x);\n"
    use_generator(json.dumps(generator_payload))

    response = client.post("/api/generate", json={"prompt": "A hero", "type": "hero"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Code validation failed: eval() usage detected"
    assert body["details"]["name"] == "GlassHero"
    assert funded_user.rpc_calls == []
    assert funded_user.inserted == []


def test_generation_status(api, funded_user):
    client, _ = api
    funded_user.tables["blocks"] = [
        {"id": "b-1", "name": "Hero", "type": "hero", "created_by": "user-1"},
        {"id": "b-2", "name": "Other", "type": "cta", "created_by": "user-2"},
    ]

    body = client.get("/api/generate").json()

    assert body["user"] == {"id": "user-1", "credits": 5, "subscription_tier": "pro"}
    assert [b["id"] for b in body["recentBlocks"]] == ["b-1"]


def test_validate_endpoint(api, clean_code):
    client, _ = api

    ok = client.post("/api/validate", json={"code": clean_code}).json()
    bad = client.post("/api/validate", json={"code": "eval(1)"}).json()

    assert ok["isValid"] is True
    assert ok["rulesetVersion"]
    assert bad["isValid"] is False
    assert "eval() usage detected" in bad["errors"]


# ============================================================================
# Factory
# ============================================================================

@pytest.fixture
def seeded_randomizer(api):
    _, overrides = api
    overrides[randomizer_dependency] = lambda: FactoryRandomizer(rng=random.Random(11))


@pytest.mark.parametrize("kwargs", [
    {},
    {"headers": {"Authorization": "Bearer wrong"}},
    {"params": {"secret": "wrong"}},
    {"headers": {"x-vercel-cron": "nope"}},
])
def test_cron_rejects_bad_secret(api, use_generator, generator_json, kwargs):
    client, _ = api
    generator = use_generator(generator_json)

    response = client.get("/api/cron/generate", **kwargs)

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert generator.completion.calls == []


@pytest.mark.parametrize("method,kwargs", [
    ("get", {"headers": CRON_HEADERS}),
    ("post", {"headers": CRON_HEADERS}),
    ("get", {"params": {"secret": "test-cron-secret"}}),
    ("get", {"headers": {"x-vercel-cron": "test-cron-secret"}}),
])
def test_cron_generates_free_block(api, use_generator, seeded_randomizer, fake_store, generator_json, method, kwargs):
    client, _ = api
    use_generator(generator_json)

    response = getattr(client, method)("/api/cron/generate", **kwargs)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["blockId"] == "blocks-1"

    [block] = fake_store.inserts_into("blocks")
    assert block["is_premium"] is False
    assert block["created_by"] is None
    assert block["type"] == body["category"]

    [log] = fake_store.inserts_into("factory_logs")
    assert log["success"] is True
    assert log["block_id"] == "blocks-1"
    assert log["category"] == body["category"]
    assert log["vibe"] == body["vibe"]
    assert log["prompt"] in BLOCK_PROMPTS[BlockType(body["category"])]


def test_cron_failure_is_logged(api, use_generator, seeded_randomizer, fake_store):
    client, _ = api
    use_generator("not json")

    response = client.get("/api/cron/generate", headers=CRON_HEADERS)

    assert response.status_code == 500
    assert response.json()["error"].startswith("Failed to parse")
    [log] = fake_store.inserts_into("factory_logs")
    assert log["success"] is False
    assert log["block_id"] is None


def test_cron_batch(api, use_generator, seeded_randomizer, fake_store, generator_json):
    client, _ = api
    use_generator(generator_json)

    response = client.post("/api/cron/generate-batch", params={"count": 3}, headers=CRON_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["generated"] == 3
    assert len(body["results"]) == 3
    assert len(fake_store.inserts_into("blocks")) == 3


def test_cron_batch_limits_count(api, use_generator, generator_json):
    client, _ = api
    use_generator(generator_json)

    response = client.post("/api/cron/generate-batch", params={"count": 50}, headers=CRON_HEADERS)

    assert response.status_code == 422


def test_factory_stats(api, fake_store):
    client, _ = api
    fake_store.tables["factory_logs"] = [
        {"category": "hero", "vibe": "dark", "success": True, "generation_time_ms": 1000,
         "created_at": "2020-01-01T00:00:00Z"},
        {"category": "cta", "vibe": "neon", "success": False, "generation_time_ms": 3000,
         "created_at": "2020-01-01T00:00:00Z"},
    ]

    body = client.get("/api/factory/stats").json()

    assert body["success"] is True
    assert body["stats"]["total_blocks_generated"] == 2
    assert body["stats"]["success_rate_percent"] == 50.0
    assert body["stats"]["avg_generation_time_ms"] == 2000
    assert body["stats"]["blocks_last_24h"] == 0
    assert body["stats"]["last_generation"]["category"] == "hero"
    assert len(body["recent_logs"]) == 2
    assert body["categories"] == [c.value for c in BLOCK_CATEGORIES]
    assert body["potential_combinations"]["total_combinations"] == 14 * 15 * 5


def test_factory_stats_store_failure(api, fake_store):
    client, _ = api
    fake_store.select_error = "down"

    response = client.get("/api/factory/stats")

    assert response.status_code == 500
    assert response.json()["success"] is False


# ============================================================================
# Block library
# ============================================================================

LIBRARY = [
    {"id": "b-1", "type": "hero", "name": "Glass Hero", "is_premium": False},
    {"id": "b-2", "type": "hero", "name": "Neon Hero", "is_premium": True},
    {"id": "b-3", "type": "footer", "name": "Slim Footer", "is_premium": False},
]


def test_list_blocks(api, fake_store):
    client, _ = api
    fake_store.tables["blocks"] = LIBRARY

    body = client.get("/api/blocks").json()

    assert body["count"] == 3
    assert [b["id"] for b in body["data"]] == ["b-1", "b-2", "b-3"]
    assert body["filters"] == {"type": None, "isPremium": None, "limit": 50}


@pytest.mark.parametrize("params,expected", [
    ({"type": "hero"}, ["b-1", "b-2"]),
    ({"premium": "true"}, ["b-2"]),
    ({"premium": "false"}, ["b-1", "b-3"]),
    ({"type": "hero", "premium": "false"}, ["b-1"]),
    ({"limit": 1}, ["b-1"]),
])
def test_list_blocks_filters(api, fake_store, params, expected):
    client, _ = api
    fake_store.tables["blocks"] = LIBRARY

    body = client.get("/api/blocks", params=params).json()

    assert [b["id"] for b in body["data"]] == expected
    assert body["count"] == len(expected)


def test_list_blocks_echoes_filters(api, fake_store):
    client, _ = api

    body = client.get("/api/blocks", params={"type": "cta", "premium": "true", "limit": 10}).json()

    assert body["filters"] == {"type": "cta", "isPremium": True, "limit": 10}


def test_list_blocks_rejects_bad_limit(api):
    client, _ = api

    assert client.get("/api/blocks", params={"limit": 0}).status_code == 422


def test_list_blocks_store_failure(api, fake_store):
    client, _ = api
    fake_store.select_error = "connection reset"

    response = client.get("/api/blocks")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch blocks", "details": "connection reset"}


def test_create_block(api, fake_store, clean_code):
    client, _ = api

    response = client.post("/api/blocks", json={
        "type": "hero",
        "name": "Glass Hero",
        "code": clean_code,
        "tags": ["glass"],
        "config": {"colors": {"primary": "#000"}, "items": []},
    })

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["id"] == "blocks-1"

    [record] = fake_store.inserts_into("blocks")
    assert record["created_by"] == "user-1"
    assert record["description"] is None
    assert record["config"] == {"colors": {"primary": "#000"}, "items": []}
    assert record["tags"] == ["glass"]
    assert record["is_premium"] is False
    assert record["required_tier"] is None


def test_create_block_defaults_config(api, fake_store, clean_code):
    client, _ = api

    client.post("/api/blocks", json={"type": "faq", "name": "FAQ", "code": clean_code, "isPremium": True,
                                     "requiredTier": "pro"})

    [record] = fake_store.inserts_into("blocks")
    assert record["config"] == {}
    assert record["tags"] == []
    assert record["is_premium"] is True
    assert record["required_tier"] == "pro"


@pytest.mark.parametrize("payload", [
    {"name": "Hero", "code": "x"},
    {"type": "hero", "code": "x"},
    {"type": "hero", "name": "Hero"},
    {"type": "hero", "name": "", "code": "x"},
])
def test_create_block_missing_fields(api, fake_store, payload):
    client, _ = api

    response = client.post("/api/blocks", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields: type, name, code"
    assert fake_store.inserted == []


@pytest.mark.parametrize("payload,message", [
    ({"type": "carousel"}, "Invalid block type"),
    ({"type": "hero", "requiredTier": "gold"}, "Invalid tier"),
])
def test_create_block_rejects_unknown_values(api, fake_store, clean_code, payload, message):
    client, _ = api

    response = client.post("/api/blocks", json={"name": "Hero", "code": clean_code, **payload})

    assert response.status_code == 400
    assert message in response.json()["detail"]
    assert fake_store.inserted == []


def test_create_block_rejects_unsafe_code(api, fake_store, clean_code):
    client, _ = api

    response = client.post("/api/blocks", json={
        "type": "hero",
        "name": "Hero",
        "code": clean_code + "\neval(window.name);\n",
    })

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Code validation failed"
    assert "eval() usage detected" in body["details"]
    assert fake_store.inserted == []


def test_create_block_store_failure(api, fake_store, clean_code):
    client, _ = api
    fake_store.fail_insert = "disk full"

    response = client.post("/api/blocks", json={"type": "hero", "name": "Hero", "code": clean_code})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create block", "details": "disk full"}


def test_create_block_requires_auth(api, fake_store, clean_code):
    client, overrides = api
    del overrides[current_user_id]

    response = client.post("/api/blocks", json={"type": "hero", "name": "Hero", "code": clean_code})

    assert response.status_code == 401
    assert fake_store.inserted == []
