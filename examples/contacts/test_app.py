"""Smoke tests for the contacts example."""

import json

from ron.testing import TestClient


class TestContactsHTML:
    async def test_first_page(self, example_engine) -> None:
        async with TestClient(example_engine) as client:
            response = await client.get("/")
        assert response.status == 200
        assert "<title>Contacts</title>" in response.text
        assert "Contact 1 " in response.text
        assert "Contact 11 " not in response.text
        assert "<strong>1</strong>" in response.text

    async def test_last_page_is_clamped(self, example_engine) -> None:
        async with TestClient(example_engine) as client:
            response = await client.get("/?page=999")
        assert "Contact 42 " in response.text
        assert "Contact 40 " not in response.text

    async def test_zero_limit_is_400(self, example_engine) -> None:
        async with TestClient(example_engine) as client:
            response = await client.get("/?limit=0")
        assert response.status == 400

    async def test_create_redirects(self, example_engine) -> None:
        async with TestClient(example_engine) as client:
            response = await client.post("/", form={"name": "Dana", "email": "d@example.com"})
            page = await client.get(response.header("location") or "/")
        assert response.status == 303
        assert "Dana" in page.text

    async def test_stylesheet(self, example_engine) -> None:
        async with TestClient(example_engine) as client:
            response = await client.get("/static/site.css")
        assert response.status == 200
        assert response.content_type == "text/css; charset=utf-8"


class TestContactsAPI:
    async def test_list(self, example_engine) -> None:
        async with TestClient(example_engine) as client:
            response = await client.get("/api/contacts?limit=5&page=2")
        payload = json.loads(response.text)
        assert payload["page"] == 2
        assert payload["total_pages"] == 9
        assert [c["id"] for c in payload["contacts"]] == [6, 7, 8, 9, 10]
        assert response.header("x-request-id")

    async def test_show_and_missing(self, example_engine) -> None:
        async with TestClient(example_engine) as client:
            found = await client.get("/api/contacts/3")
            missing = await client.get("/api/contacts/999")
        assert json.loads(found.text)["email"] == "contact3@example.com"
        assert missing.status == 404

    async def test_create_requires_json(self, example_engine) -> None:
        async with TestClient(example_engine) as client:
            created = await client.post("/api/contacts", json={"name": "Eve", "email": "e@x.io"})
            rejected = await client.post("/api/contacts", form={"name": "Eve"})
        assert created.status == 201
        assert json.loads(created.text)["id"] == 43
        assert rejected.status == 400
