"""Host pattern matching for app rules."""

from __future__ import annotations

from urllib.parse import urlsplit


def url_host(url: str) -> str | None:
    """Return the lowercased host of a URL, or None if it has none."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        # e.g. unbalanced IPv6 brackets
        return None
    return host or None


def matches_host(url: str, pattern: str) -> bool:
    """
    Check whether a URL belongs to a configured host pattern.

    An empty pattern matches every URL. Otherwise the URL's host must equal
    the pattern or be a subdomain of it (dot boundary), case-insensitively.
    A URL without a host never matches a non-empty pattern.

    Examples:
        matches_host("https://a.example.com/x", "example.com")  -> True
        matches_host("https://notexample.com/", "example.com")  -> False
    """
    if not pattern:
        return True

    host = url_host(url)
    if host is None:
        return False

    pattern = pattern.lower()
    return host == pattern or host.endswith("." + pattern)


def matches_all(urls: list[str], pattern: str) -> bool:
    """True when every URL matches the pattern."""
    return all(matches_host(url, pattern) for url in urls)
