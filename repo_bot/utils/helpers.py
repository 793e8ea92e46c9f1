from __future__ import annotations

import os
from logging import Logger

from simple_logger.logger import get_logger

from repo_bot.libs.config import Config
from repo_bot.libs.models import Error, MutationResult


def get_logger_with_params(name: str = "repo-bot") -> Logger:
    mask_sensitive_patterns: list[str] = [
        # Tokens and API keys
        "token",
        "apikey",
        "api_key",
        "github_token",
        "github-token",
        "GITHUB_TOKEN",
        # Authentication headers
        "Authorization",
        "bearer",
        # Secrets
        "password",
        "secret",
    ]

    _config = Config()

    log_level: str = _config.get_value(value="log-level", return_on_none="INFO")
    log_file: str = _config.get_value(value="log-file")
    mask_sensitive: bool = _config.get_value(value="mask-sensitive-data", return_on_none=True)

    if log_file and not log_file.startswith("/"):
        log_file_path = os.path.join(_config.data_dir, "logs")

        if not os.path.isdir(log_file_path):
            os.makedirs(log_file_path, exist_ok=True)

        log_file = os.path.join(log_file_path, log_file)

    return get_logger(
        name=name,
        filename=log_file,
        level=log_level,
        file_max_bytes=1024 * 1024 * 10,
        mask_sensitive=mask_sensitive,
        mask_sensitive_patterns=mask_sensitive_patterns,
        console=True,
    )


def format_comment_report(result: MutationResult[str]) -> str:
    """Render the outcome of posting a comment as a single line."""
    if isinstance(result, Error):
        return f"Error while posting a comment: {result.message}"
    return f"Posted a new comment: {result.value}"


def format_check_run_report(result: MutationResult) -> str:
    """Render the outcome of creating a check run as a single line."""
    if isinstance(result, Error):
        return f"Error while creating a check run: {result.message}"
    return f"Created a new check run: {result.value.url}"
