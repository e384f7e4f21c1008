"""
Integration tests for the console API endpoints.

Tests the /api/documents, /api/disclosure and /api/catalog routes using
httpx AsyncClient against a catalog built from a temporary corpus.
"""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from skilldex.config.settings import SkilldexSettings
from skilldex.manager import CatalogManager

from server.app import create_app
from server.config import ConsoleConfig
from server.dependencies import set_catalog_manager, set_console_config


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def corpus(tmp_path, monkeypatch):
    monkeypatch.delenv("SKILLDEX_CORPUS_PATH", raising=False)
    root = tmp_path / "plugins"
    _write(
        root / "python" / "skills" / "python-testing" / "SKILL.md",
        "---\n"
        "name: python-testing\n"
        "description: Pytest patterns\n"
        "summary: [Use fixtures, Mock at boundaries]\n"
        "context_cost: low\n"
        "load_when: [mocking python]\n"
        "requires: [python-basics]\n"
        "tags: [Testing, python]\n"
        "---\n"
        "Core testing body.\n"
        "See templates.md for scaffolds.\n",
    )
    _write(root / "python" / "skills" / "python-testing" / "templates.md", "TEMPLATE CONTENT")
    _write(
        root / "python" / "skills" / "python-basics" / "SKILL.md",
        "---\nname: python-basics\ndescription: Python basics\ntags: [python]\n---\nBasics.\n",
    )
    _write(
        root / "ops" / "commands" / "deploy.md",
        "---\nname: deploy\ndescription: Deploy the app\n---\nDeploy $ARGUMENTS\n",
    )
    return root


@pytest.fixture
async def client(corpus):
    """Create test client with a catalog initialized from the temp corpus."""
    app = create_app()

    config = ConsoleConfig(default_budget_tokens=1000)
    set_console_config(config)
    manager = CatalogManager(
        corpus_dirs=[corpus],
        config=SkilldexSettings(summary_line_tokens=10, chars_per_token=1),
    )
    await manager.initialize()
    set_catalog_manager(manager)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "skilldex-console"}


class TestDocuments:
    @pytest.mark.asyncio
    async def test_list_all(self, client: AsyncClient):
        resp = await client.get("/api/documents")
        assert resp.status_code == 200
        ids = [d["id"] for d in resp.json()]
        assert ids == ["command:deploy", "skill:python-basics", "skill:python-testing"]

    @pytest.mark.asyncio
    async def test_filter_by_kind(self, client: AsyncClient):
        resp = await client.get("/api/documents", params={"kind": "command"})
        assert [d["name"] for d in resp.json()] == ["deploy"]

    @pytest.mark.asyncio
    async def test_filter_by_tag(self, client: AsyncClient):
        resp = await client.get("/api/documents", params={"tag": "testing"})
        assert [d["name"] for d in resp.json()] == ["python-testing"]

        resp = await client.get("/api/documents", params={"tag": "python", "kind": "skill"})
        assert len(resp.json()) == 2

    @pytest.mark.asyncio
    async def test_invalid_kind(self, client: AsyncClient):
        resp = await client.get("/api/documents", params={"kind": "plugin"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_get_document(self, client: AsyncClient):
        resp = await client.get("/api/documents/skill:python-testing")
        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"] == ["Use fixtures", "Mock at boundaries"]
        assert data["requires"] == ["skill:python-basics"]
        assert data["context_cost"] == "low"
        assert data["extended_files"][0]["name"] == "templates"
        assert data["extended_files"][0]["see_also"] is True
        assert data["extended_files"][0]["size_bytes"] == len("TEMPLATE CONTENT")

    @pytest.mark.asyncio
    async def test_get_unknown_document(self, client: AsyncClient):
        resp = await client.get("/api/documents/skill:nope")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Document not found"


class TestDisclosure:
    @pytest.mark.asyncio
    async def test_load_plan(self, client: AsyncClient):
        resp = await client.post(
            "/api/disclosure/load", json={"query": "mocking python", "budget_tokens": 1000}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert [e["document_id"] for e in data["entries"]] == [
            "skill:python-basics",
            "skill:python-testing",
        ]
        testing = data["entries"][1]
        assert testing["matched"] is True
        assert testing["tier"] == 3
        assert data["over_budget"] is False
        assert data["blocks"] is None

    @pytest.mark.asyncio
    async def test_default_budget(self, client: AsyncClient):
        resp = await client.post("/api/disclosure/load", json={"query": "mocking python"})
        assert resp.json()["budget_tokens"] == 1000

    @pytest.mark.asyncio
    async def test_load_and_render(self, client: AsyncClient):
        resp = await client.post(
            "/api/disclosure/load",
            json={"query": "mocking python", "budget_tokens": 1000, "render": True},
        )
        blocks = resp.json()["blocks"]
        assert blocks[-1]["tier"] == 3
        assert blocks[-1]["content"] == "TEMPLATE CONTENT"

    @pytest.mark.asyncio
    async def test_zero_budget(self, client: AsyncClient):
        resp = await client.post(
            "/api/disclosure/load", json={"query": "mocking python", "budget_tokens": 0}
        )
        data = resp.json()
        assert len(data["entries"]) == 1
        assert data["entries"][0]["tier"] == 1
        assert data["over_budget"] is True

    @pytest.mark.asyncio
    async def test_no_match(self, client: AsyncClient):
        resp = await client.post(
            "/api/disclosure/load", json={"query": "kubernetes", "budget_tokens": 1000}
        )
        assert resp.json()["entries"] == []


class TestCatalog:
    @pytest.mark.asyncio
    async def test_refresh(self, client: AsyncClient, corpus: Path):
        _write(
            corpus / "ops" / "agents" / "deployer.md",
            "---\nname: deployer\ndescription: Deploys\n---\nYou deploy.\n",
        )
        _write(corpus / "ops" / "commands" / "broken.md", "no frontmatter\n")
        resp = await client.post("/api/catalog/refresh")
        assert resp.status_code == 200
        data = resp.json()
        assert data["document_count"] == 4
        assert len(data["failures"]) == 1
        assert data["failures"][0]["error_type"] == "MalformedMetadataError"

    @pytest.mark.asyncio
    async def test_refresh_validation_error(self, client: AsyncClient, corpus: Path):
        _write(
            corpus / "python" / "skills" / "session-cache" / "SKILL.md",
            "---\nname: session-cache\ndescription: Sessions\nrequires: [redis-patterns]\n---\n",
        )
        resp = await client.post("/api/catalog/refresh")
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["error"] == "DanglingReferenceError"
        assert "skill:session-cache" in detail["document_ids"]

        # Previous registry is still served
        resp = await client.get("/api/documents")
        assert len(resp.json()) == 3

    @pytest.mark.asyncio
    async def test_index(self, client: AsyncClient):
        resp = await client.get("/api/catalog/index")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/markdown")
        assert "## Skills (2)" in resp.text
        assert "## Commands (1)" in resp.text

        resp = await client.get("/api/catalog/index", params={"kind": "command"})
        assert "## Skills" not in resp.text


@pytest.mark.asyncio
async def test_catalog_not_ready(corpus):
    app = create_app()
    set_console_config(ConsoleConfig())
    set_catalog_manager(CatalogManager(corpus_dirs=[corpus]))

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        resp = await c.get("/api/documents")
    assert resp.status_code == 503
