"""URL launcher: opens a planned DispatchAction with open(1)."""

from __future__ import annotations

import subprocess
import time

from loguru import logger

from browser_prompt.bundles import read_bundle_info
from browser_prompt.errors import Error, ErrorType, Result
from browser_prompt.models import DispatchAction

OPEN_TIMEOUT_SECONDS = 10

# Command-line flag each browser uses for a private window
PRIVATE_MODE_ARGS = {
    "com.google.Chrome": "--incognito",
    "com.google.Chrome.beta": "--incognito",
    "com.google.Chrome.canary": "--incognito",
    "org.chromium.Chromium": "--incognito",
    "com.brave.Browser": "--incognito",
    "com.vivaldi.Vivaldi": "--incognito",
    "company.thebrowser.Browser": "--incognito",  # Arc
    "com.microsoft.edgemac": "--inprivate",
    "org.mozilla.firefox": "--private-window",
    "org.mozilla.firefoxdeveloperedition": "--private-window",
    "org.mozilla.nightly": "--private-window",
    "app.zen-browser.zen": "--private-window",
    "com.operasoftware.Opera": "--private",
}


def private_mode_flag(app_path: str) -> str | None:
    """Private-window flag for a browser bundle, or None if unknown."""
    bundle = read_bundle_info(app_path)
    if bundle.identifier is None:
        return None
    return PRIVATE_MODE_ARGS.get(bundle.identifier)


def build_open_command(action: DispatchAction) -> list[str]:
    """
    Build the open(1) argv for an action.

    Normal:  open -a <app> <urls...>
    Private: open -na <app> --args <flag> <urls...>

    Browsers without a known private flag fall back to a normal open.
    """
    app = action.handler.app

    if action.is_private:
        flag = private_mode_flag(app)
        if flag:
            return ["open", "-na", app, "--args", flag, *action.urls]
        logger.warning(
            "No private-mode flag known for browser - opening normally",
            operation="build_open_command",
            status="private_unsupported",
            app=app
        )

    return ["open", "-a", app, *action.urls]


def open_urls(action: DispatchAction) -> Result[None]:
    """
    Launch the handler with the action's URLs.

    Returns:
        Result[None]: Ok on success, Err(LAUNCH_ERROR / TIMEOUT_ERROR) otherwise
    """
    if not action.urls:
        return Result.err(Error(
            error_type=ErrorType.LAUNCH_ERROR,
            message="Nothing to open",
            context={"app": action.handler.app}
        ))

    cmd = build_open_command(action)
    start_time = time.perf_counter()

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=OPEN_TIMEOUT_SECONDS,
            check=False
        )
    except subprocess.TimeoutExpired as e:
        logger.error(
            "Timed out opening URLs",
            operation="open_urls",
            status="timeout",
            app=action.handler.app,
            timeout_seconds=OPEN_TIMEOUT_SECONDS
        )
        return Result.err(Error(
            error_type=ErrorType.TIMEOUT_ERROR,
            message=f"Timed out opening URLs in {action.handler.app}",
            context={"app": action.handler.app},
            original_exception=e
        ))
    except OSError as e:
        logger.error(
            "OS error opening URLs",
            operation="open_urls",
            status="os_error",
            app=action.handler.app,
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.LAUNCH_ERROR,
            message=f"Could not run open: {e}",
            context={"app": action.handler.app},
            original_exception=e
        ))

    duration_ms = int((time.perf_counter() - start_time) * 1000)

    if result.returncode != 0:
        stderr = result.stderr.strip() if result.stderr else None
        logger.error(
            "open exited with an error",
            operation="open_urls",
            status="failed",
            app=action.handler.app,
            returncode=result.returncode,
            stderr=stderr
        )
        return Result.err(Error(
            error_type=ErrorType.LAUNCH_ERROR,
            message=stderr or f"open exited with status {result.returncode}",
            context={"app": action.handler.app, "returncode": result.returncode}
        ))

    logger.info(
        "URLs opened",
        operation="open_urls",
        status="success",
        app=action.handler.app,
        mode=action.mode.value,
        metrics={"url_count": len(action.urls), "duration_ms": duration_ms}
    )
    return Result.ok()
