"""Candidate resolution: which handlers to offer for a set of URLs."""

from __future__ import annotations

import time

from loguru import logger

from browser_prompt.bundles import read_bundle_info
from browser_prompt.host_matcher import matches_all
from browser_prompt.models import (
    AppRule,
    CandidateList,
    CandidateView,
    Handler,
    normalize_app_path,
)


def visible_browsers(browsers: list[str], hidden_browsers: list[str] | set[str]) -> list[Handler]:
    """BrowserList minus HiddenSet, configured order preserved (first entry wins)."""
    seen = {normalize_app_path(path) for path in hidden_browsers}
    visible = []
    for path in browsers:
        identity = normalize_app_path(path)
        if identity in seen:
            continue
        seen.add(identity)
        visible.append(Handler.browser(path))
    return visible


def apps_for_urls(urls: list[str], apps: list[AppRule], taken: set[str]) -> list[Handler]:
    """
    App rules whose host pattern matches every URL.

    Rules whose app is already in `taken` (the visible browsers, then each
    earlier qualifying rule) are skipped so no app appears twice.
    """
    seen = set(taken)
    matched = []
    for rule in apps:
        if not matches_all(urls, rule.host):
            continue
        identity = normalize_app_path(rule.app)
        if identity in seen:
            continue
        seen.add(identity)
        matched.append(Handler.from_rule(rule))
    return matched


def resolve_candidates(
    urls: list[str],
    browsers: list[str],
    hidden_browsers: list[str] | set[str],
    apps: list[AppRule],
) -> CandidateList:
    """
    Compute the ordered list of handlers to offer.

    Order: visible browsers (configured order), then qualifying app rules
    (configured order). With no URLs there is nothing to dispatch, so the
    result is empty regardless of configuration.

    Args:
        urls: URLs to be opened
        browsers: Configured browser bundle paths, in priority order
        hidden_browsers: Bundle paths hidden from the prompt
        apps: Host-scoped app rules

    Returns:
        CandidateList (possibly empty)
    """
    start_time = time.perf_counter()

    if not urls:
        logger.debug(
            "No URLs - nothing to resolve",
            operation="resolve_candidates",
            status="empty",
        )
        return CandidateList()

    general = visible_browsers(browsers, hidden_browsers)
    specific = apps_for_urls(urls, apps, {h.identity for h in general})

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.debug(
        "Candidates resolved",
        operation="resolve_candidates",
        status="success",
        metrics={
            "url_count": len(urls),
            "browsers_configured": len(browsers),
            "browsers_visible": len(general),
            "app_rules": len(apps),
            "apps_matched": len(specific),
            "duration_ms": duration_ms,
        }
    )

    return CandidateList(browsers=tuple(general), apps=tuple(specific))


def build_candidate_views(
    candidates: CandidateList,
    shortcuts: dict[str, str] | None = None,
) -> list[CandidateView]:
    """Annotate each candidate with its display name and keyboard shortcut."""
    shortcuts = shortcuts or {}
    views = []
    for index, handler in enumerate(candidates):
        bundle = read_bundle_info(handler.app)
        views.append(CandidateView(
            handler=handler,
            index=index,
            name=bundle.name,
            bundle_id=bundle.identifier,
            shortcut=shortcuts.get(bundle.identifier) if bundle.identifier else None,
        ))
    return views
