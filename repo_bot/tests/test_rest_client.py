"""Tests for the legacy REST transport."""

import httpx
import pytest

from repo_bot.libs.rest_client import RestClient, github_headers, project_api_preview_headers
from repo_bot.utils.constants import PROJECT_API_PREVIEW_ACCEPT


def _mock_transport(requests: list[httpx.Request], status_code: int = 201) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, text="{}")

    return httpx.MockTransport(handler)


@pytest.fixture
def rest_client(bot_info, mock_logger):
    return RestClient(bot_info=bot_info, logger=mock_logger)


def test_github_headers(bot_info):
    assert github_headers(bot_info) == {
        "Authorization": f"bearer {bot_info.github_token}",
        "User-Agent": "repo-bot-test",
    }


def test_project_api_preview_headers(bot_info):
    headers = project_api_preview_headers(bot_info)

    assert headers["Accept"] == PROJECT_API_PREVIEW_ACCEPT
    assert headers["Authorization"] == f"bearer {bot_info.github_token}"


async def test_send_request_posts_body_verbatim(rest_client, bot_info):
    requests: list[httpx.Request] = []
    rest_client._client = httpx.AsyncClient(transport=_mock_transport(requests))

    response = await rest_client.send_request("https://api.github.com/repos/o/r/statuses/abc", '{"state": "success"}')

    assert response.status_code == 201
    assert requests[0].method == "POST"
    assert requests[0].content == b'{"state": "success"}'
    assert requests[0].headers["Authorization"] == f"bearer {bot_info.github_token}"
    await rest_client.close()


async def test_patch_with_custom_headers(rest_client):
    requests: list[httpx.Request] = []
    rest_client._client = httpx.AsyncClient(transport=_mock_transport(requests, status_code=200))

    await rest_client.patch("https://api.github.com/repos/o/r/issues/1", '{"milestone": null}', {"X-Test": "1"})

    assert requests[0].method == "PATCH"
    assert requests[0].headers["X-Test"] == "1"
    assert "Authorization" not in requests[0].headers
    await rest_client.close()


async def test_error_status_is_logged_not_raised(rest_client, mock_logger):
    requests: list[httpx.Request] = []
    rest_client._client = httpx.AsyncClient(transport=_mock_transport(requests, status_code=422))

    response = await rest_client.send_request("https://api.github.com/projects/columns/1/cards", "{}")

    assert response.status_code == 422
    mock_logger.warning.assert_called_once()
    await rest_client.close()


async def test_context_manager_closes_client(rest_client):
    async with rest_client as client:
        assert client._client is not None

    assert rest_client._client is None
