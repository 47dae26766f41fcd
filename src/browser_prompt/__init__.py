"""
Browser Prompt
Asks which browser or app should open a link, then opens it there.

Configuration: ~/.config/browser-prompt/preferences.toml (XDG standard)

Features:
- Ordered browser list with hidden-browser overrides
- Host-scoped app rules with optional scheme rewriting
- Keyboard-driven selection (up/down, Return, Shift+Return for private mode)
- Copy-link shortcut
- Structured JSONL logging (machine-readable)
"""

COMPONENT = "browser-prompt"
VERSION = "1.0.0"
