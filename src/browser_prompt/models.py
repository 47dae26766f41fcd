"""Data structures shared by the resolver, the planner and the session."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from browser_prompt.errors import Error


def normalize_app_path(path: str) -> str:
    """Normalize a bundle path for identity comparison.

    Expands ~ and collapses redundant separators and trailing slashes.
    Symlinks are not resolved: the configured path is the identity.

    Args:
        path: Raw bundle path (e.g. "~/Applications/Arc.app/").

    Returns:
        Normalized path suitable for comparison.
    """
    if not path:
        return ""
    return os.path.normpath(os.path.expanduser(path))


class HandlerSource(Enum):
    BROWSER = "browser"
    APP_RULE = "app_rule"


class ActivationKind(Enum):
    PRIMARY = "primary"
    PRIVATE = "private"
    CANCEL = "cancel"


class LaunchMode(Enum):
    NORMAL = "normal"
    PRIVATE = "private"


@dataclass(frozen=True)
class AppRule:
    """A handler restricted to a host pattern, with optional scheme rewriting."""
    app: str
    host: str = ""
    scheme_override: str = ""


@dataclass(frozen=True)
class Handler:
    """One entry of the candidate list."""
    app: str
    source: HandlerSource
    host: str = ""
    scheme_override: str = ""

    @property
    def identity(self) -> str:
        return normalize_app_path(self.app)

    @property
    def is_browser(self) -> bool:
        return self.source is HandlerSource.BROWSER

    @classmethod
    def browser(cls, app: str) -> "Handler":
        return cls(app=app, source=HandlerSource.BROWSER)

    @classmethod
    def from_rule(cls, rule: AppRule) -> "Handler":
        return cls(
            app=rule.app,
            source=HandlerSource.APP_RULE,
            host=rule.host,
            scheme_override=rule.scheme_override,
        )


@dataclass(frozen=True)
class CandidateList:
    """Resolved candidates: general browsers first, then host-specific apps."""
    browsers: tuple[Handler, ...] = ()
    apps: tuple[Handler, ...] = ()

    @property
    def count(self) -> int:
        return len(self.browsers) + len(self.apps)

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Handler]:
        yield from self.browsers
        yield from self.apps

    def __getitem__(self, index: int) -> Handler:
        if index < 0 or index >= self.count:
            raise IndexError(f"candidate index out of range: {index}")
        if index < len(self.browsers):
            return self.browsers[index]
        return self.apps[index - len(self.browsers)]

    def is_browser_index(self, index: int) -> bool:
        return 0 <= index < len(self.browsers)


@dataclass(frozen=True)
class CandidateView:
    """Display annotations for one candidate (never affects dispatch)."""
    handler: Handler
    index: int
    name: str
    bundle_id: str | None = None
    shortcut: str | None = None

    def label(self) -> str:
        if self.shortcut:
            return f"{self.name}  [{self.shortcut}]"
        return self.name


@dataclass
class DispatchAction:
    """What to open, where, and how. Handed to the URL launcher."""
    urls: list[str]
    handler: Handler
    mode: LaunchMode = LaunchMode.NORMAL
    rewrite_errors: list[Error] = field(default_factory=list)

    @property
    def is_private(self) -> bool:
        return self.mode is LaunchMode.PRIVATE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "app": self.handler.app,
            "source": self.handler.source.value,
            "mode": self.mode.value,
            "url_count": len(self.urls),
            "rewrite_errors": len(self.rewrite_errors),
        }
