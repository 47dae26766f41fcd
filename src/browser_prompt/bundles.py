"""Application bundle metadata (identifier and display name)."""

from __future__ import annotations

import plistlib
from dataclasses import dataclass
from pathlib import Path
from xml.parsers.expat import ExpatError

from loguru import logger

from browser_prompt.models import normalize_app_path


@dataclass(frozen=True)
class BundleInfo:
    path: str
    identifier: str | None
    name: str


# Cached bundle metadata keyed by normalized path (one lookup per session)
_bundle_cache: dict[str, BundleInfo] = {}


def read_bundle_info(app_path: str) -> BundleInfo:
    """
    Read CFBundleIdentifier and display name from an app bundle.

    Looks at <app>/Contents/Info.plist. If the bundle is missing or its
    plist can't be parsed, the identifier is None and the name falls back
    to the bundle file stem ("/Applications/Safari.app" -> "Safari").

    Args:
        app_path: Path to the .app bundle

    Returns:
        BundleInfo (never raises)
    """
    key = normalize_app_path(app_path)
    if key in _bundle_cache:
        return _bundle_cache[key]

    fallback_name = Path(key).stem or app_path
    info_plist = Path(key) / "Contents" / "Info.plist"

    try:
        with open(info_plist, "rb") as f:
            plist = plistlib.load(f)
        info = BundleInfo(
            path=key,
            identifier=plist.get("CFBundleIdentifier"),
            name=(
                plist.get("CFBundleDisplayName")
                or plist.get("CFBundleName")
                or fallback_name
            ),
        )
    except (OSError, ValueError, AttributeError, ExpatError) as e:
        logger.debug(
            "Could not read bundle Info.plist",
            operation="read_bundle_info",
            status="fallback",
            app=app_path,
            error=str(e),
            error_type=type(e).__name__
        )
        info = BundleInfo(path=key, identifier=None, name=fallback_name)

    _bundle_cache[key] = info
    return info


def clear_bundle_cache() -> None:
    _bundle_cache.clear()
