"""Notion page creation."""

import json

import httpx
import pytest

from studiobook.integrations import notion_client as notion
from studiobook.integrations.notion_client import NotionClient, NotionError


def test_create_page_posts_parent_and_properties():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"object": "page", "id": "page-1"})

    client = NotionClient(
        api_key="secret_abc", api_version="2022-06-28", transport=httpx.MockTransport(handler)
    )
    page = client.create_page("db-1", {"Name": notion.title("Omar Saeed")})

    assert page["id"] == "page-1"
    request = seen[0]
    assert str(request.url) == "https://api.notion.com/v1/pages"
    assert request.headers["Notion-Version"] == "2022-06-28"
    assert request.headers["Authorization"] == "Bearer secret_abc"
    assert json.loads(request.content) == {
        "parent": {"database_id": "db-1"},
        "properties": {"Name": {"title": [{"text": {"content": "Omar Saeed"}}]}},
    }


def test_rejected_request_raises():
    client = NotionClient(
        api_key="secret_abc",
        transport=httpx.MockTransport(lambda request: httpx.Response(400, json={})),
    )

    with pytest.raises(NotionError) as exc_info:
        client.create_page("db-1", {})
    assert exc_info.value.status_code == 400


def test_property_helpers():
    assert notion.date_range("2026-10-26T14:00:00+04:00") == {
        "date": {"start": "2026-10-26T14:00:00+04:00", "end": None}
    }
    assert notion.number(3) == {"number": 3}
    assert notion.select("Standard") == {"select": {"name": "Standard"}}
