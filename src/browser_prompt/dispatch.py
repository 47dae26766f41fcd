"""Dispatch planning: turn a selected handler into a launch action."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from loguru import logger

from browser_prompt.errors import Error, ErrorType, Result
from browser_prompt.models import (
    ActivationKind,
    DispatchAction,
    Handler,
    LaunchMode,
)

# RFC 3986: scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


def rewrite_scheme(url: str, scheme: str) -> Result[str]:
    """
    Replace the scheme of a URL, keeping host, port, path, query and fragment.

    Example:
        rewrite_scheme("https://example.com/x?y=1#z", "firefox")
        -> Ok("firefox://example.com/x?y=1#z")

    Returns:
        Result[str]: Ok with the rewritten URL, or Err(SCHEME_REWRITE_ERROR)
        if the override is not a valid scheme or the URL can't be split.
    """
    if not SCHEME_PATTERN.match(scheme):
        return Result.err(Error(
            error_type=ErrorType.SCHEME_REWRITE_ERROR,
            message=f"Invalid scheme override: {scheme!r}",
            context={"url": url, "scheme_override": scheme}
        ))

    try:
        parts = urlsplit(url)
        if not parts.scheme:
            raise ValueError("URL has no scheme")
        # Everything after the scheme is kept byte-for-byte
        prefix, sep, rest = url.partition(":")
        if not sep or prefix.lower() != parts.scheme:
            raise ValueError("URL does not start with its scheme")
        rewritten = f"{scheme}:{rest}"
    except ValueError as e:
        return Result.err(Error(
            error_type=ErrorType.SCHEME_REWRITE_ERROR,
            message=f"Cannot rewrite scheme of {url}: {e}",
            context={"url": url, "scheme_override": scheme},
            original_exception=e
        ))

    return Result.ok(rewritten)


def launch_mode_for(handler: Handler, activation: ActivationKind) -> LaunchMode:
    """Private mode is a browser-only concept; app rules always open normally."""
    if activation is ActivationKind.PRIVATE and handler.is_browser:
        return LaunchMode.PRIVATE
    return LaunchMode.NORMAL


def plan_dispatch(
    handler: Handler,
    urls: list[str],
    activation: ActivationKind,
) -> DispatchAction | None:
    """
    Plan what to open for the selected handler.

    Args:
        handler: The selected candidate
        urls: The URLs the prompt was opened for
        activation: PRIMARY, PRIVATE or CANCEL

    Returns:
        DispatchAction, or None when the activation is CANCEL.
        URLs whose scheme could not be rewritten are left out of
        `urls` and reported in `rewrite_errors`.
    """
    if activation is ActivationKind.CANCEL:
        logger.debug(
            "Activation cancelled - nothing to dispatch",
            operation="plan_dispatch",
            status="cancelled"
        )
        return None

    mode = launch_mode_for(handler, activation)

    if not handler.scheme_override:
        return DispatchAction(urls=list(urls), handler=handler, mode=mode)

    rewritten = []
    errors = []
    for url in urls:
        result = rewrite_scheme(url, handler.scheme_override)
        if result.is_ok():
            rewritten.append(result.value)
        else:
            errors.append(result.error)
            logger.warning(
                "Scheme rewrite failed",
                operation="plan_dispatch",
                status="rewrite_failed",
                url=url,
                scheme_override=handler.scheme_override,
                error=result.error.message
            )

    action = DispatchAction(
        urls=rewritten,
        handler=handler,
        mode=mode,
        rewrite_errors=errors,
    )
    logger.debug(
        "Dispatch planned",
        operation="plan_dispatch",
        status="success" if not errors else "partial",
        **action.to_dict()
    )
    return action
