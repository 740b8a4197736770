"""Build information taken from the environment of CI services."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any, Optional

_SLUG_ENVS = (
    "TRAVIS_REPO_SLUG",
    "DRONE_REPO",  # drone <= 0.4
    "BITBUCKET_REPO_FULL_NAME",
)

_OWNER_ENVS = (
    "CI_REPO_OWNER",  # common
    "CIRCLE_PROJECT_USERNAME",
    "DRONE_REPO_OWNER",
    "CI_PROJECT_NAMESPACE",  # GitLab CI
)

_REPO_ENVS = (
    "CI_REPO_NAME",  # common
    "CIRCLE_PROJECT_REPONAME",
    "DRONE_REPO_NAME",
    "CI_PROJECT_NAME",  # GitLab CI
)

_SHA_ENVS = (
    "CI_COMMIT",  # common
    "TRAVIS_PULL_REQUEST_SHA",
    "TRAVIS_COMMIT",
    "CIRCLE_SHA1",
    "DRONE_COMMIT",
    "CI_COMMIT_SHA",  # GitLab CI
    "BITBUCKET_COMMIT",
)

_BRANCH_ENVS = (
    "CI_BRANCH",  # common
    "TRAVIS_PULL_REQUEST_BRANCH",
    "CIRCLE_BRANCH",
    "DRONE_COMMIT_BRANCH",
    "CI_COMMIT_BRANCH",  # Woodpecker CI
    "BITBUCKET_PR_DESTINATION_BRANCH",  # only present in PR pipelines
    "BITBUCKET_BRANCH",
)

_PULL_REQUEST_ENVS = (
    "CI_PULL_REQUEST",  # common
    "TRAVIS_PULL_REQUEST",
    "CIRCLE_PULL_REQUEST",  # CircleCI 2.0
    "CIRCLE_PR_NUMBER",  # pull request from a fork
    "DRONE_PULL_REQUEST",
    "CI_MERGE_REQUEST_IID",  # GitLab CI merge trains
    "BITBUCKET_PR_ID",
    "CI_COMMIT_PULL_REQUEST",  # Woodpecker CI
)

_PR_NUM_RE = re.compile(r"[1-9][0-9]*\Z")
_MAX_INT = 2**63 - 1


class CIEnvError(Exception):
    """Build information could not be determined from the environment."""


@dataclass
class BuildInfo:
    """Build information about a GitHub or GitLab project."""

    owner: str = ""
    repo: str = ""
    sha: str = ""
    pull_request: int = 0  # merge request for GitLab
    branch: str = ""
    gerrit_change_id: str = ""
    gerrit_revision_id: str = ""


@dataclass
class GitHubPullRequest:
    """The parts of a pull request payload that are used."""

    number: int = 0
    head_sha: str = ""
    head_ref: str = ""
    head_repo_owner_id: int = 0
    base_repo_owner_id: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "GitHubPullRequest":
        data = _as_object(data, "pull_request")
        head = _obj(data, "head")
        base = _obj(data, "base")
        return cls(
            number=_int(data, "number"),
            head_sha=_str(head, "sha"),
            head_ref=_str(head, "ref"),
            head_repo_owner_id=_int(_obj(_obj(head, "repo"), "owner"), "id"),
            base_repo_owner_id=_int(_obj(_obj(base, "repo"), "owner"), "id"),
        )


@dataclass
class GitHubEvent:
    """The parts of a GitHub Actions event payload that are used."""

    pull_request: GitHubPullRequest = field(default_factory=GitHubPullRequest)
    repository_owner: str = ""
    repository_name: str = ""
    check_suite_after: str = ""
    check_suite_pull_requests: list[GitHubPullRequest] = field(default_factory=list)
    head_commit_id: str = ""
    action_name: str = ""  # from GITHUB_EVENT_NAME

    @classmethod
    def from_dict(cls, data: Any) -> "GitHubEvent":
        data = _as_object(data, "event")
        repository = _obj(data, "repository")
        check_suite = _obj(data, "check_suite")
        prs = check_suite.get("pull_requests")
        if prs is None:
            prs = []
        elif not isinstance(prs, list):
            raise CIEnvError("invalid GitHub event: check_suite.pull_requests is not a list")
        return cls(
            pull_request=GitHubPullRequest.from_dict(data.get("pull_request")),
            repository_owner=_str(_obj(repository, "owner"), "login"),
            repository_name=_str(repository, "name"),
            check_suite_after=_str(check_suite, "after"),
            check_suite_pull_requests=[GitHubPullRequest.from_dict(pr) for pr in prs],
            head_commit_id=_str(_obj(data, "head_commit"), "id"),
        )


def _as_object(value: Any, name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise CIEnvError(f"invalid GitHub event: {name} is not an object")
    return value


def _obj(data: dict, key: str) -> dict:
    return _as_object(data.get(key), key)


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CIEnvError(f"invalid GitHub event: {key} is not a string")
    return value


def _int(data: dict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise CIEnvError(f"invalid GitHub event: {key} is not an integer")
    return value


def _first_env(names: tuple[str, ...]) -> str:
    return next((v for v in map(os.environ.get, names) if v), "")


def _owner_and_repo_from_slug(names: tuple[str, ...]) -> tuple[str, str]:
    parts = _first_env(names).split("/", 1)
    if len(parts) < 2:
        return "", ""
    return parts[0], parts[1]


def get_build_info() -> tuple[BuildInfo, bool]:
    """Return the build information and whether it is a pull request build."""
    if is_in_github_action():
        return _build_info_from_github_action()
    owner, repo = _owner_and_repo_from_slug(_SLUG_ENVS)
    if not owner:
        owner = _first_env(_OWNER_ENVS)
    if not owner:
        raise CIEnvError("cannot get repo owner from environment variable. Set CI_REPO_OWNER?")
    if not repo:
        repo = _first_env(_REPO_ENVS)
    if not repo:
        raise CIEnvError("cannot get repo name from environment variable. Set CI_REPO_NAME?")
    sha = _first_env(_SHA_ENVS)
    if not sha:
        raise CIEnvError("cannot get commit SHA from environment variable. Set CI_COMMIT?")
    branch = _first_env(_BRANCH_ENVS)
    pr = get_pull_request_num()
    info = BuildInfo(owner=owner, repo=repo, sha=sha, pull_request=pr, branch=branch)
    return info, pr != 0


def get_gerrit_build_info() -> BuildInfo:
    """Return Gerrit specific build information."""
    change_id = os.environ.get("GERRIT_CHANGE_ID", "")
    if not change_id:
        raise CIEnvError("cannot get change id from environment variable. Set GERRIT_CHANGE_ID ?")
    revision_id = os.environ.get("GERRIT_REVISION_ID", "")
    if not revision_id:
        raise CIEnvError("cannot get revision id from environment variable. Set GERRIT_REVISION_ID ?")
    branch = os.environ.get("GERRIT_BRANCH", "")
    if not branch:
        raise CIEnvError("cannot get branch from environment variable. Set GERRIT_BRANCH ?")
    return BuildInfo(gerrit_change_id=change_id, gerrit_revision_id=revision_id, branch=branch)


def get_pull_request_num() -> int:
    """Return the pull request number from the environment, or 0."""
    for name in _PULL_REQUEST_ENVS:
        match = _PR_NUM_RE.search(os.environ.get(name, ""))
        if match:
            number = int(match.group())
            if 0 < number <= _MAX_INT:
                return number
    return 0


def load_github_event() -> GitHubEvent:
    """Load the event of the running GitHub Actions workflow."""
    event_path = os.environ.get("GITHUB_EVENT_PATH", "")
    if not event_path:
        raise CIEnvError("GITHUB_EVENT_PATH not found")
    return load_github_event_from_path(event_path)


def load_github_event_from_path(event_path: str | os.PathLike[str]) -> GitHubEvent:
    """Load a GitHub event payload from a JSON file."""
    with open(event_path, encoding="utf-8") as f:
        data = json.load(f)
    event = GitHubEvent.from_dict(data)
    event.action_name = os.environ.get("GITHUB_EVENT_NAME", "")
    return event


def _build_info_from_github_action() -> tuple[BuildInfo, bool]:
    event_path = os.environ.get("GITHUB_EVENT_PATH", "")
    if not event_path:
        raise CIEnvError("GITHUB_EVENT_PATH not found")
    return build_info_from_github_event_path(event_path)


def build_info_from_github_event_path(
    event_path: str | os.PathLike[str],
) -> tuple[BuildInfo, bool]:
    """Build information from a GitHub event payload file."""
    event = load_github_event_from_path(event_path)
    info = BuildInfo(
        owner=event.repository_owner,
        repo=event.repository_name,
        pull_request=event.pull_request.number,
        branch=event.pull_request.head_ref,
        sha=event.pull_request.head_sha,
    )
    # A re-run check_suite event carries its pull requests separately.
    if info.pull_request == 0 and event.check_suite_pull_requests:
        pr = event.check_suite_pull_requests[0]
        info.pull_request = pr.number
        info.branch = pr.head_ref
        info.sha = pr.head_sha
    if not info.sha:
        info.sha = event.head_commit_id
    if not info.sha:
        info.sha = os.environ.get("GITHUB_SHA", "")
    return info, info.pull_request != 0


def is_in_github_action() -> bool:
    """True when running in GitHub Actions."""
    return bool(os.environ.get("GITHUB_ACTIONS"))


def has_read_only_permission_github_token() -> bool:
    """True for a GitHub Actions run on a fork's pull request with a read-only token."""
    try:
        event: Optional[GitHubEvent] = load_github_event()
    except (CIEnvError, OSError, ValueError):
        return False
    pr = event.pull_request
    is_forked_repo = pr.head_repo_owner_id != pr.base_repo_owner_id
    return is_forked_repo and event.action_name != "pull_request_target"


def is_in_bitbucket_pipeline() -> bool:
    """True when running in Bitbucket Pipelines."""
    return bool(os.environ.get("BITBUCKET_PIPELINE_UUID"))


def is_in_bitbucket_pipe() -> bool:
    """True when running in a Bitbucket Pipe."""
    return bool(
        os.environ.get("BITBUCKET_PIPE_STORAGE_DIR")
        or os.environ.get("BITBUCKET_PIPE_SHARED_STORAGE_DIR")
    )