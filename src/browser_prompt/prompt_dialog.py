"""Prompt presentation through SwiftDialog."""

from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
from pathlib import Path

from loguru import logger

from browser_prompt.models import ActivationKind
from browser_prompt.session import PromptSession, SessionOutcome

SELECT_TITLE = "Open with"
DIALOG_TIMEOUT_SECONDS = 600

# SwiftDialog return codes
RC_BUTTON1 = 0
RC_BUTTON2 = 2
RC_INFO_BUTTON = 3
RC_TIMEOUT = 4

# Cached SwiftDialog path (None = not checked yet, False = not found)
_swiftdialog_path_cache: str | None | bool = None


def find_swiftdialog_path() -> str | None:
    """
    Find SwiftDialog binary across Intel and Apple Silicon Homebrew paths.

    Search order:
    1. /opt/homebrew/bin/dialog (Apple Silicon Homebrew)
    2. /usr/local/bin/dialog (Intel Homebrew)
    3. shutil.which("dialog") (fallback to PATH)

    Returns:
        Path to SwiftDialog binary, or None if not found
    """
    global _swiftdialog_path_cache

    if _swiftdialog_path_cache is not None:
        return _swiftdialog_path_cache if _swiftdialog_path_cache else None

    search_paths = [
        "/opt/homebrew/bin/dialog",
        "/usr/local/bin/dialog",
    ]

    for path in search_paths:
        if Path(path).exists():
            _swiftdialog_path_cache = path
            logger.debug(
                "Found SwiftDialog",
                path=path,
                operation="find_swiftdialog_path",
            )
            return path

    path_result = shutil.which("dialog")
    if path_result:
        _swiftdialog_path_cache = path_result
        logger.debug(
            "Found SwiftDialog via PATH",
            path=path_result,
            operation="find_swiftdialog_path",
        )
        return path_result

    _swiftdialog_path_cache = False
    logger.debug(
        "SwiftDialog not found",
        searched=search_paths,
        operation="find_swiftdialog_path",
    )
    return None


def run_swiftdialog(config: dict) -> tuple[int, dict | None]:
    """
    Run SwiftDialog with given configuration.

    Args:
        config: Dialog configuration dict (will be written as JSON)

    Returns:
        Tuple of (return_code, parsed_output_dict or None)
        Return codes:
        - 0: Button 1 clicked ("Open")
        - 2: Button 2 clicked ("Cancel")
        - 3: Info button clicked ("Open Private")
        - 4: Timeout
        - Other: Error
    """
    swiftdialog_bin = find_swiftdialog_path()
    if not swiftdialog_bin:
        logger.error("SwiftDialog not available", operation="run_swiftdialog")
        return (-1, None)

    config_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w', suffix='.json', delete=False
        ) as f:
            json.dump(config, f)
            config_path = f.name

        cmd = [swiftdialog_bin, "--jsonfile", config_path, "--json"]
        logger.debug(
            "Running SwiftDialog",
            config_path=config_path,
            operation="run_swiftdialog"
        )

        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=DIALOG_TIMEOUT_SECONDS,
            check=False
        )

        output_dict = None
        if result.stdout.strip():
            try:
                output_dict = json.loads(result.stdout)
            except json.JSONDecodeError:
                logger.warning(
                    "Could not parse SwiftDialog output",
                    stdout=result.stdout[:200],
                    operation="run_swiftdialog"
                )

        return (result.returncode, output_dict)

    except subprocess.TimeoutExpired:
        logger.error("SwiftDialog timed out", operation="run_swiftdialog")
        return (RC_TIMEOUT, None)
    except OSError as e:
        logger.error(
            "SwiftDialog OS error",
            error=str(e),
            operation="run_swiftdialog"
        )
        return (-1, None)
    finally:
        if config_path:
            try:
                Path(config_path).unlink(missing_ok=True)
            except OSError as e:
                logger.debug(
                    "Could not delete temp config file",
                    path=config_path,
                    error=str(e),
                    operation="run_swiftdialog"
                )


def build_dialog_config(session: PromptSession) -> dict:
    """
    SwiftDialog config for a session: one select list of candidates.

    Labels are numbered so duplicates of the same display name stay
    distinguishable; the current selection is the default value.
    """
    labels = [f"{view.index + 1}. {view.label()}" for view in session.views()]

    if len(session.urls) == 1:
        message = session.urls[0]
    else:
        message = f"{len(session.urls)} links"
    if session.copy_label:
        message = f"**{session.copy_label}**\n\n{message}"

    return {
        "title": "Open Link",
        "message": message,
        "icon": "SF=link,colour=blue",
        "button1text": "Open",
        "button2text": "Cancel",
        "infobuttontext": "Open Private",
        "selectitems": [
            {
                "title": SELECT_TITLE,
                "values": labels,
                "default": labels[session.selection.index] if labels else "",
            }
        ],
        "width": 520,
        "height": 300,
        "moveable": True,
        "ontop": True,
    }


def parse_selected_index(output: dict | None, labels: list[str]) -> int | None:
    """Read the chosen index from SwiftDialog JSON output."""
    if not output:
        return None

    entry = output.get(SELECT_TITLE)
    if isinstance(entry, dict):
        if isinstance(entry.get("selectedIndex"), int):
            return entry["selectedIndex"]
        value = entry.get("selectedValue")
    else:
        value = output.get("SelectedOption")
        if isinstance(output.get("SelectedIndex"), int):
            return output["SelectedIndex"]

    if isinstance(value, str) and value in labels:
        return labels.index(value)
    return None


def show_prompt(session: PromptSession) -> SessionOutcome:
    """
    Show the prompt and feed the user's choice into the session.

    Returns:
        The session outcome; a dialog failure or timeout counts as cancel.
    """
    config = build_dialog_config(session)
    labels = config["selectitems"][0]["values"]

    return_code, output = run_swiftdialog(config)

    if return_code == RC_BUTTON1:
        kind = ActivationKind.PRIMARY
    elif return_code == RC_INFO_BUTTON:
        kind = ActivationKind.PRIVATE
    else:
        logger.debug(
            "Prompt dismissed",
            operation="show_prompt",
            status="cancelled",
            return_code=return_code
        )
        return session.activate(ActivationKind.CANCEL)

    index = parse_selected_index(output, labels)
    if index is not None:
        session.hover(index)

    return session.activate(kind)
