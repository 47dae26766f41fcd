"""
Entry point.

Usage:
    browser-prompt URL [URL ...]          # Show the prompt and open the choice
    browser-prompt --list URL [URL ...]   # Print candidates as JSON lines
    browser-prompt --copy URL [URL ...]   # Copy the first URL, then prompt
                                          # (unless close_after_copy is set)

Exit codes:
    0 - opened, copied, or cancelled
    1 - configuration, dispatch or launch error
    2 - usage error
    3 - no candidates to present
"""

from __future__ import annotations

import json
import sys
from uuid import uuid4

from loguru import logger

from browser_prompt.config_loader import load_config
from browser_prompt.errors import ErrorReport
from browser_prompt.launcher import open_urls
from browser_prompt.logging_config import setup_logger, trace_id_var
from browser_prompt.prompt_dialog import show_prompt
from browser_prompt.session import PromptSession

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_NO_CANDIDATES = 3

KNOWN_FLAGS = {"--list", "--copy"}


def print_candidates(session: PromptSession) -> None:
    for view in session.views():
        print(json.dumps({
            "index": view.index,
            "name": view.name,
            "app": view.handler.app,
            "source": view.handler.source.value,
            "bundle_id": view.bundle_id,
            "shortcut": view.shortcut,
            "scheme_override": view.handler.scheme_override or None,
        }))


def main(argv: list[str]) -> int:
    """
    Run one prompt session.

    Flow:
    1. Load the configuration snapshot
    2. Resolve candidates for the URLs
    3. Show the prompt (or list / copy)
    4. Launch the planned action
    """
    args = argv[1:]
    list_mode = "--list" in args
    copy_mode = "--copy" in args
    urls = [arg for arg in args if not arg.startswith("--")]

    unknown_flags = [arg for arg in args if arg.startswith("--") and arg not in KNOWN_FLAGS]
    if unknown_flags or not urls:
        if unknown_flags:
            print(f"Unknown option: {unknown_flags[0]}", file=sys.stderr)
        print(__doc__.strip(), file=sys.stderr)
        return EXIT_USAGE

    main_trace_id = str(uuid4())
    trace_id_var.set(main_trace_id)
    report = ErrorReport()

    logger.info(
        "Browser prompt starting",
        operation="main",
        status="started",
        trace_id=main_trace_id,
        metrics={"url_count": len(urls)}
    )

    config_result = load_config()
    if not report.collect_result(config_result):
        report.log_summary(main_trace_id)
        return EXIT_ERROR

    session = PromptSession(urls, config_result.value)

    if list_mode:
        print_candidates(session)
        return EXIT_OK if session.candidates.count else EXIT_NO_CANDIDATES

    if session.candidates.count == 0:
        logger.warning(
            "No browsers or apps to offer - configure browsers in preferences.toml",
            operation="main",
            status="no_candidates",
            trace_id=main_trace_id
        )
        return EXIT_NO_CANDIDATES

    if copy_mode:
        outcome = session.copy_first_url()
        for error in outcome.errors:
            report.add_error(error)
        if outcome.closed or report.has_errors():
            report.log_summary(main_trace_id)
            return EXIT_ERROR if report.has_errors() else EXIT_OK

    outcome = show_prompt(session)
    for error in outcome.errors:
        report.add_error(error)

    if outcome.action is not None:
        report.collect_result(open_urls(outcome.action))

    report.log_summary(main_trace_id)
    return EXIT_ERROR if report.has_errors() else EXIT_OK


def run() -> None:
    setup_logger()
    sys.exit(main(sys.argv))


if __name__ == "__main__":
    run()
