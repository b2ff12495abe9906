"""
Integration tests for the Gmail label/filter client against mocked Google endpoints.
"""

import json

import httpx
import pytest
import pytest_asyncio

from app.services.gmail.google_client import (
    GMAIL_API_BASE_URL,
    GoogleGmailClient,
    GoogleGmailError,
)

LABELS_URL = f"{GMAIL_API_BASE_URL}/users/me/labels"
FILTERS_URL = f"{GMAIL_API_BASE_URL}/users/me/settings/filters"


@pytest_asyncio.fixture
async def client():
    gmail = GoogleGmailClient()
    yield gmail
    await gmail.close()


@pytest.mark.asyncio
async def test_create_label(httpx_mock, client):
    httpx_mock.add_response(
        method="POST",
        url=LABELS_URL,
        json={"id": "Label_42", "name": "Alice School", "type": "user"},
    )

    label = await client.create_label("token-abc", "Alice School")

    assert label.id == "Label_42"
    assert label.is_user_label()

    request = httpx_mock.get_request()
    assert request.headers["Authorization"] == "Bearer token-abc"
    assert json.loads(request.content) == {
        "name": "Alice School",
        "labelListVisibility": "labelShow",
        "messageListVisibility": "show",
    }


@pytest.mark.asyncio
async def test_create_label_conflict_keeps_google_message(httpx_mock, client):
    httpx_mock.add_response(
        method="POST",
        url=LABELS_URL,
        status_code=409,
        json={"error": {"code": 409, "message": "Label name exists or conflicts"}},
    )

    with pytest.raises(GoogleGmailError) as exc_info:
        await client.create_label("token-abc", "Alice School")

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "Label name exists or conflicts"


@pytest.mark.asyncio
async def test_create_label_without_id_is_an_error(httpx_mock, client):
    httpx_mock.add_response(method="POST", url=LABELS_URL, json={"name": "Alice School"})

    with pytest.raises(GoogleGmailError):
        await client.create_label("token-abc", "Alice School")


@pytest.mark.asyncio
async def test_get_label_missing_returns_none(httpx_mock, client):
    httpx_mock.add_response(
        method="GET",
        url=f"{LABELS_URL}/Label_42",
        status_code=404,
        json={"error": {"code": 404, "message": "Requested entity was not found."}},
    )

    assert await client.get_label("token-abc", "Label_42") is None


@pytest.mark.asyncio
async def test_get_label_auth_failure_raises(httpx_mock, client):
    httpx_mock.add_response(
        method="GET",
        url=f"{LABELS_URL}/Label_42",
        status_code=401,
        json={"error": {"code": 401, "message": "Invalid Credentials"}},
    )

    with pytest.raises(GoogleGmailError) as exc_info:
        await client.get_label("token-abc", "Label_42")

    assert exc_info.value.is_auth_error
    assert "reconnect" in exc_info.value.message


@pytest.mark.asyncio
async def test_delete_label_empty_body(httpx_mock, client):
    httpx_mock.add_response(method="DELETE", url=f"{LABELS_URL}/Label_42", status_code=204)

    await client.delete_label("token-abc", "Label_42")


@pytest.mark.asyncio
async def test_delete_missing_label_raises_not_found(httpx_mock, client):
    httpx_mock.add_response(
        method="DELETE",
        url=f"{LABELS_URL}/Label_42",
        status_code=404,
        json={"error": {"code": 404, "message": "Not Found"}},
    )

    with pytest.raises(GoogleGmailError) as exc_info:
        await client.delete_label("token-abc", "Label_42")

    assert exc_info.value.is_not_found


@pytest.mark.asyncio
async def test_create_filter_sends_query_and_label(httpx_mock, client):
    httpx_mock.add_response(
        method="POST",
        url=FILTERS_URL,
        json={
            "id": "ANe1Bmj",
            "criteria": {"query": '"Alice" AND ((from:a@x.com))'},
            "action": {"addLabelIds": ["Label_42"]},
        },
    )

    gmail_filter = await client.create_filter("token-abc", "Alice", ["a@x.com"], [], "Label_42")

    assert gmail_filter.id == "ANe1Bmj"
    assert gmail_filter.targets_label("Label_42")
    assert json.loads(httpx_mock.get_request().content) == {
        "criteria": {"query": '"Alice" AND ((from:a@x.com))'},
        "action": {"addLabelIds": ["Label_42"]},
    }


@pytest.mark.asyncio
async def test_create_filter_empty_name_sends_nothing(httpx_mock, client):
    with pytest.raises(ValueError):
        await client.create_filter("token-abc", "", ["a@x.com"], [], "Label_42")

    assert httpx_mock.get_requests() == []


@pytest.mark.asyncio
async def test_get_filter_missing_returns_none(httpx_mock, client):
    httpx_mock.add_response(method="GET", url=f"{FILTERS_URL}/ANe1Bmj", status_code=404)

    assert await client.get_filter("token-abc", "ANe1Bmj") is None


@pytest.mark.asyncio
async def test_delete_filter(httpx_mock, client):
    httpx_mock.add_response(method="DELETE", url=f"{FILTERS_URL}/ANe1Bmj", status_code=204)

    await client.delete_filter("token-abc", "ANe1Bmj")


@pytest.mark.asyncio
async def test_transport_error_becomes_gmail_error(httpx_mock, client):
    httpx_mock.add_exception(httpx.ConnectTimeout("timed out"))

    with pytest.raises(GoogleGmailError):
        await client.get_filter("token-abc", "ANe1Bmj")


@pytest.mark.asyncio
async def test_client_recreated_after_close(client):
    first = client.client
    await client.close()

    assert client.client is not first
    assert not client.client.is_closed
