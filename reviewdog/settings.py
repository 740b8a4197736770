"""Command-line options and the helpers that read them."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

VERSION = "master"

DEFAULT_CONFIG_FILES = (
    ".reviewdog.yaml",
    ".reviewdog.yml",
    "reviewdog.yaml",
    "reviewdog.yml",
)


@dataclass
class Options:
    """Settings of one run, as given on the command line."""

    version: bool = False
    diff_cmd: str = ""
    diff_strip: int = 1
    efms: list[str] = field(default_factory=list)
    f: str = ""  # input format name
    f_diff_strip: int = 1
    list: bool = False  # list supported format names
    name: str = ""  # tool name used in comments
    conf: str = ""
    runners: str = ""
    reporter: str = "local"
    level: str = ""
    guess_pull_request: bool = False
    tee: bool = False
    filter_mode: str = "default"
    fail_on_error: bool = False
    log_level: str = "info"

    @property
    def is_project(self) -> bool:
        """True when neither -efm nor -f is given, so the config file drives the run."""
        return not self.efms and not self.f


def tool_name(options: Options) -> str:
    """Return the tool name used in comments: -name, falling back to -f."""
    return options.name or options.f


def build_runners_map(runners: str) -> set[str]:
    """Return the runner names in a comma separated list, blanks dropped."""
    return {name for name in (part.strip() for part in runners.split(",")) if name}


def non_empty_env(name: str) -> str:
    """Return the value of an environment variable that must be set and non-empty."""
    value = os.environ.get(name, "")
    if not value:
        raise LookupError(f"environment variable ${name} is not set")
    return value


def read_conf(path: Optional[str] = None) -> bytes:
    """Read the config file at ``path``, or the first default config file found."""
    candidates = (path,) if path else DEFAULT_CONFIG_FILES
    for candidate in candidates:
        try:
            with open(candidate, "rb") as f:
                return f.read()
        except OSError:
            continue
    raise FileNotFoundError(".reviewdog.yml not found")