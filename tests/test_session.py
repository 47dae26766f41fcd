from unittest.mock import Mock

from browser_prompt.config_loader import PromptConfig
from browser_prompt.errors import Error, ErrorType, Result
from browser_prompt.logging_config import trace_id_var
from browser_prompt.models import ActivationKind, AppRule, LaunchMode
from browser_prompt.session import PromptSession

from conftest import CHROME, NOTION, SAFARI, SLACK


def make_session(config, urls=("https://notion.so/page",), **kwargs):
    kwargs.setdefault("copier", Mock(return_value=Result.ok()))
    return PromptSession(list(urls), config, **kwargs)


def test_candidates_resolved_at_start(config):
    session = make_session(config)
    assert [h.app for h in session.candidates] == [SAFARI, CHROME, NOTION]
    assert session.selection.index == 0
    assert session.selected.app == SAFARI


def test_arrow_keys_move_and_scroll(config):
    hints = []
    session = make_session(config, on_scroll=hints.append)

    session.handle_key("down")
    session.handle_key("ArrowDown")
    session.handle_key("down")
    session.handle_key("up")

    assert session.selection.index == 1
    assert hints == [1, 2, 2, 1]
    assert not session.closed


def test_return_opens_selected_browser(config):
    session = make_session(config)
    session.handle_key("down")

    outcome = session.handle_key("return")

    assert outcome.closed
    assert outcome.action.handler.app == CHROME
    assert outcome.action.urls == ["https://notion.so/page"]
    assert outcome.action.mode is LaunchMode.NORMAL


def test_shift_return_opens_browser_privately(config):
    outcome = make_session(config).handle_key("Enter", {"Shift"})
    assert outcome.action.mode is LaunchMode.PRIVATE


def test_shift_return_on_app_opens_normally_with_rewrite(config):
    session = make_session(config)
    session.hover(2)

    outcome = session.handle_key("return", {"shift"})

    assert outcome.action.handler.app == NOTION
    assert outcome.action.mode is LaunchMode.NORMAL
    assert outcome.action.urls == ["notion://notion.so/page"]


def test_click_selects_and_activates(config):
    session = make_session(config)
    outcome = session.click(99, shift=True)

    assert session.selection.index == 2
    assert outcome.action.handler.app == NOTION


def test_escape_cancels_without_action(config):
    session = make_session(config)
    outcome = session.handle_key("escape")

    assert outcome.closed
    assert outcome.action is None
    assert session.closed


def test_events_after_close_are_ignored(config):
    session = make_session(config)
    session.activate(ActivationKind.CANCEL)

    assert session.handle_key("return").action is None
    assert session.click(0).action is None
    assert session.hover(2) == 0


def test_unknown_keys_do_nothing(config):
    session = make_session(config)
    outcome = session.handle_key("x")
    assert outcome.action is None
    assert not outcome.closed


def test_activation_with_no_candidates_is_ignored():
    session = make_session(PromptConfig(), urls=["https://example.com"])

    outcome = session.handle_key("return")

    assert session.candidates.count == 0
    assert session.selected is None
    assert outcome.action is None
    assert not outcome.closed


def test_rewrite_failure_aborts_batch_by_default():
    config = PromptConfig(apps=(AppRule(app=NOTION, scheme_override="notion"),))
    session = make_session(config, urls=["https://notion.so/a", "http://[::1/broken"])

    outcome = session.handle_key("return")

    assert outcome.closed
    assert outcome.action is None
    assert [e.error_type for e in outcome.errors] == [ErrorType.SCHEME_REWRITE_ERROR]


def test_rewrite_failure_can_skip_bad_urls():
    config = PromptConfig(
        apps=(AppRule(app=NOTION, scheme_override="notion"),),
        abort_on_rewrite_error=False,
    )
    session = make_session(config, urls=["https://notion.so/a", "http://[::1/broken"])

    outcome = session.handle_key("return")

    assert outcome.action.urls == ["notion://notion.so/a"]
    assert len(outcome.errors) == 1


class TestCopy:

    def test_copy_label_is_first_host(self, config):
        session = make_session(config, urls=["https://www.notion.so/a", "https://slack.com"])
        assert session.copy_label == "www.notion.so"

    def test_copy_shortcut_copies_first_url(self, config):
        copier = Mock(return_value=Result.ok())
        session = make_session(config, urls=["https://notion.so/a", "https://b.com"], copier=copier)

        outcome = session.handle_key("c", {"command", "option"})

        copier.assert_called_once_with("https://notion.so/a")
        assert outcome.copied == "https://notion.so/a"
        assert not outcome.closed

    def test_plain_command_c_needs_alternative_shortcut(self, config):
        copier = Mock(return_value=Result.ok())
        session = make_session(config, copier=copier)
        session.handle_key("c", {"command"})
        copier.assert_not_called()

        alt = PromptConfig(browsers=(SAFARI,), alternative_shortcut=True)
        session = make_session(alt, copier=copier)
        session.handle_key("c", {"command"})
        copier.assert_called_once()

    def test_close_after_copy(self):
        config = PromptConfig(browsers=(SAFARI,), close_after_copy=True)
        outcome = make_session(config).copy_first_url()
        assert outcome.closed

    def test_copy_unavailable_without_host(self, config):
        copier = Mock(return_value=Result.ok())
        session = make_session(config, urls=["mailto:a@b.c"], copier=copier)

        outcome = session.copy_first_url()

        assert session.copy_label is None
        assert outcome.copied is None
        copier.assert_not_called()

    def test_copy_failure_is_reported(self, config):
        error = Error(ErrorType.CLIPBOARD_ERROR, "no pasteboard")
        session = make_session(config, copier=Mock(return_value=Result.err(error)))

        outcome = session.copy_first_url()

        assert outcome.errors == [error]
        assert not session.closed


def test_views_follow_candidate_order(config):
    session = make_session(config, urls=["https://slack.com"])
    assert [v.name for v in session.views()] == ["Safari", "Google Chrome", "Slack"]
    assert [v.handler.app for v in session.views()] == [SAFARI, CHROME, SLACK]


def test_session_reuses_run_trace_id(config):
    token = trace_id_var.set("run-trace")
    try:
        session = make_session(config)
    finally:
        trace_id_var.reset(token)
    assert session.trace_id == "run-trace"


def test_session_creates_trace_id_when_none_set(config):
    assert make_session(config).trace_id
