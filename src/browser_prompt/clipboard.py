"""Clipboard access through AppKit (macOS)."""

from __future__ import annotations

from loguru import logger

from browser_prompt.errors import Error, ErrorType, Result


def copy_to_clipboard(text: str) -> Result[None]:
    """
    Put a string on the general pasteboard.

    Returns:
        Result[None]: Ok on success, Err(CLIPBOARD_ERROR) if AppKit is
        unavailable or the pasteboard rejects the write.
    """
    try:
        from AppKit import NSPasteboard, NSPasteboardTypeString
    except ImportError as e:
        logger.error(
            "AppKit not available - cannot copy",
            operation="copy_to_clipboard",
            status="failed",
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.CLIPBOARD_ERROR,
            message="Clipboard requires pyobjc (macOS)",
            original_exception=e
        ))

    pasteboard = NSPasteboard.generalPasteboard()
    pasteboard.declareTypes_owner_([NSPasteboardTypeString], None)
    if not pasteboard.setString_forType_(text, NSPasteboardTypeString):
        logger.error(
            "Pasteboard rejected write",
            operation="copy_to_clipboard",
            status="failed"
        )
        return Result.err(Error(
            error_type=ErrorType.CLIPBOARD_ERROR,
            message="Pasteboard rejected write"
        ))

    logger.debug(
        "Copied to clipboard",
        operation="copy_to_clipboard",
        status="success",
        metrics={"length": len(text)}
    )
    return Result.ok()
