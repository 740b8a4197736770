"""Service endpoints and the diff command, as configured by the environment."""

from __future__ import annotations

import os
import shlex
from urllib.parse import urlsplit

from reviewdog.diffservice import DiffCmd

DEFAULT_GITHUB_API = "https://api.github.com/"
DEFAULT_GITLAB_API = "https://gitlab.com/api/v4"


def _parse_url(url: str, origin: str) -> str:
    try:
        return urlsplit(url).geturl()
    except ValueError as exc:
        raise ValueError(f"{origin} is invalid: {url}, {exc}") from exc


def github_base_url() -> str:
    """Return the GitHub API base URL.

    GITHUB_API takes precedence, then GitHub Actions' GITHUB_API_URL (with a
    trailing slash added), then the public GitHub API.
    """
    base_url = os.environ.get("GITHUB_API", "")
    if base_url:
        return _parse_url(base_url, "GitHub base URL from GITHUB_API")
    base_url = os.environ.get("GITHUB_API_URL", "")
    if base_url:
        return _parse_url(base_url + "/", "GitHub base URL from GITHUB_API_URL")
    return _parse_url(DEFAULT_GITHUB_API, "GitHub base URL from reviewdog default")


def gitlab_base_url() -> str:
    """Return the GitLab API base URL: GITLAB_API, then CI_API_V4_URL, then gitlab.com."""
    base_url = (
        os.environ.get("GITLAB_API", "")
        or os.environ.get("CI_API_V4_URL", "")
        or DEFAULT_GITLAB_API
    )
    return _parse_url(base_url, "GitLab base URL")


def insecure_skip_verify() -> bool:
    """True when REVIEWDOG_INSECURE_SKIP_VERIFY is exactly 'true'."""
    return os.environ.get("REVIEWDOG_INSECURE_SKIP_VERIFY", "") == "true"


def diff_service(command: str, strip: int) -> DiffCmd:
    """Build a diff service that runs a shell-like command line."""
    args = shlex.split(command)
    if not args:
        raise ValueError("diff command is empty")
    return DiffCmd(args, strip)