import plistlib

import pytest

from browser_prompt import bundles, prompt_dialog
from browser_prompt.config_loader import PromptConfig
from browser_prompt.models import AppRule

SAFARI = "/Applications/Safari.app"
CHROME = "/Applications/Google Chrome.app"
FIREFOX = "/Applications/Firefox.app"
NOTION = "/Applications/Notion.app"
SLACK = "/Applications/Slack.app"


@pytest.fixture(autouse=True)
def _reset_caches():
    bundles.clear_bundle_cache()
    prompt_dialog._swiftdialog_path_cache = None
    yield
    bundles.clear_bundle_cache()
    prompt_dialog._swiftdialog_path_cache = None


@pytest.fixture
def make_bundle(tmp_path):
    """Create a fake .app bundle with an Info.plist."""
    def _make(name: str, identifier: str | None = None, display_name: str | None = None) -> str:
        app = tmp_path / f"{name}.app"
        contents = app / "Contents"
        contents.mkdir(parents=True)
        plist = {"CFBundleName": display_name or name}
        if identifier:
            plist["CFBundleIdentifier"] = identifier
        with open(contents / "Info.plist", "wb") as f:
            plistlib.dump(plist, f)
        return str(app)
    return _make


@pytest.fixture
def config():
    return PromptConfig(
        browsers=(SAFARI, CHROME, FIREFOX),
        hidden_browsers=frozenset({FIREFOX}),
        apps=(
            AppRule(app=NOTION, host="notion.so", scheme_override="notion"),
            AppRule(app=SLACK, host="slack.com"),
        ),
    )
