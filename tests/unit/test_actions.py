"""Unit tests for the local action registry."""

import logging

import pytest
import pytest_check as check

from src.chat.actions import ActionKind, ActionRegistry, ParsedAction, parse_action
from tests.conftest import PROMO_URL
from tests.fakes import RecordingNavigator


class TestParseAction:
    """Tests for mapping action names to kinds."""

    def test_call_action_carries_number(self) -> None:
        assert parse_action("call_1900633070") == ParsedAction(ActionKind.CALL, "1900633070")

    def test_promo_redirect(self) -> None:
        assert parse_action("redirect_to_promo_page") == ParsedAction(
            ActionKind.REDIRECT_TO_PROMO_PAGE
        )

    @pytest.mark.parametrize(
        "name",
        ["", "call_", "call_abc", "call_19006 33070", "redirect", "open_app", "CALL_123"],
    )
    def test_unknown_names(self, name: str) -> None:
        assert parse_action(name) is None


class TestActionRegistry:
    """Tests for running actions through the navigator."""

    def test_call_opens_tel_link_in_same_tab(
        self, actions: ActionRegistry, navigator: RecordingNavigator
    ) -> None:
        check.is_true(actions.invoke("call_1900633070"))
        check.equal(navigator.opened, [("tel:1900633070", False)])

    def test_promo_opens_promo_url_in_new_tab(
        self, actions: ActionRegistry, navigator: RecordingNavigator
    ) -> None:
        check.is_true(actions.invoke("redirect_to_promo_page"))
        check.equal(navigator.opened, [(PROMO_URL, True)])

    def test_unknown_action_is_logged_noop(
        self,
        actions: ActionRegistry,
        navigator: RecordingNavigator,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="src.chat.actions"):
            result = actions.invoke("launch_rockets")

        check.is_false(result)
        check.equal(navigator.opened, [])
        check.is_in("Unknown action: launch_rockets", caplog.text)

    def test_registry_survives_unknown_action(
        self, actions: ActionRegistry, navigator: RecordingNavigator
    ) -> None:
        actions.invoke("nope")
        actions.invoke("call_1900633070")

        assert navigator.urls == ["tel:1900633070"]
