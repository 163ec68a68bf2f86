import json

import httpx
import pytest

from case_intake.adapters.notion import NotionClient, RecordCreationError

DATABASE_ID = "2d31c70f-ce6f-8096-9f7a-d4bd1ecd16a4"
PROPERTIES = {"CaseID": {"title": [{"text": {"content": "C-1"}}]}}


def _client(settings, handler) -> NotionClient:
    return NotionClient(settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_create_record_posts_page(settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"object": "page", "id": "page-1", "url": "https://www.notion.so/page-1"})

    client = _client(settings, handler)
    try:
        ref = await client.create_record(DATABASE_ID, PROPERTIES)
    finally:
        await client.close()

    assert ref.id == "page-1"
    assert ref.url == "https://www.notion.so/page-1"
    assert seen["url"] == "https://api.notion.com/v1/pages"
    assert seen["headers"]["authorization"] == "Bearer secret_test_token"
    assert seen["headers"]["notion-version"] == settings.notion_version
    assert seen["body"] == {"parent": {"database_id": DATABASE_ID}, "properties": PROPERTIES}


@pytest.mark.asyncio
async def test_error_response_is_translated(settings):
    error_body = {"object": "error", "status": 400, "code": "validation_error", "message": "Urgency is not a property that exists."}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json=error_body)

    client = _client(settings, handler)
    with pytest.raises(RecordCreationError) as info:
        await client.create_record(DATABASE_ID, PROPERTIES)
    await client.close()

    exc = info.value
    assert exc.message == "Urgency is not a property that exists."
    assert exc.code == "validation_error"
    assert exc.status == 400
    assert json.loads(exc.body) == error_body


@pytest.mark.asyncio
async def test_non_json_error_keeps_raw_body(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    client = _client(settings, handler)
    with pytest.raises(RecordCreationError) as info:
        await client.create_record(DATABASE_ID, PROPERTIES)
    await client.close()

    assert info.value.status == 502
    assert info.value.code is None
    assert info.value.body == "Bad Gateway"


@pytest.mark.asyncio
async def test_transport_failure(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(settings, handler)
    with pytest.raises(RecordCreationError) as info:
        await client.create_record(DATABASE_ID, PROPERTIES)
    await client.close()

    assert info.value.code == "network_error"
    assert "connection refused" in info.value.message


@pytest.mark.asyncio
async def test_response_without_id(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"object": "page"})

    client = _client(settings, handler)
    with pytest.raises(RecordCreationError) as info:
        await client.create_record(DATABASE_ID, PROPERTIES)
    await client.close()

    assert info.value.code == "invalid_response"
