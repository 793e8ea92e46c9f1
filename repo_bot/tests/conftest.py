import logging as python_logging
import os
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ["REPO_BOT_DATA_DIR"] = os.path.join(os.path.dirname(__file__), "manifests")

from repo_bot.libs.graphql.unified_api import UnifiedGitHubAPI  # noqa: E402
from repo_bot.libs.models import BotInfo, GitHubID  # noqa: E402

# Test token constant to silence S106 security warnings
TEST_GITHUB_TOKEN = "ghs_" + "test1234567890abcdefghijklmnopqrstuvwxyz"  # pragma: allowlist secret


@pytest.fixture
def bot_info():
    return BotInfo(github_token=TEST_GITHUB_TOKEN, github_name="repo-bot-test")


@pytest.fixture
def mock_logger():
    """Create a mock logger."""
    return MagicMock(spec=python_logging.Logger)


@pytest.fixture
def mock_graphql_client():
    """Create a mock GraphQL client."""
    client = AsyncMock()
    client.execute = AsyncMock(return_value={})
    return client


@pytest.fixture
def mock_rest_client():
    """Create a mock REST client."""
    client = AsyncMock()
    client.send_request = AsyncMock()
    client.patch = AsyncMock()
    return client


@pytest.fixture
def initialized_api(bot_info, mock_logger, mock_graphql_client, mock_rest_client):
    """UnifiedGitHubAPI wired to mocked transports."""
    api = UnifiedGitHubAPI(bot_info=bot_info, logger=mock_logger)
    api.graphql_client = mock_graphql_client
    api.rest_client = mock_rest_client
    api._initialized = True
    return api


@pytest.fixture
def issue_id():
    return GitHubID("I_kwDOAAAAAAAAAAAA")


@pytest.fixture
def repo_id():
    return GitHubID("R_kgDOAAAAAAAAAAAA")
