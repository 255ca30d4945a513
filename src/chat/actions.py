"""Registry of local side-effects that quick options can trigger by name.

The set of actions is closed. Names are parsed into an ActionKind and looked
up in an enum-keyed table; anything that does not parse is an unknown
action and is ignored.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)

_CALL_PATTERN = re.compile(r"^call_(\d+)$")
PROMO_ACTION = "redirect_to_promo_page"


class ActionKind(Enum):
    CALL = "call"
    REDIRECT_TO_PROMO_PAGE = "redirect_to_promo_page"


@dataclass(frozen=True)
class ParsedAction:
    """A recognized action name.

    Attributes:
        kind: Which side-effect to run.
        argument: Phone number for CALL, None otherwise.
    """

    kind: ActionKind
    argument: str | None = None


class Navigator(Protocol):
    """Opens URLs on behalf of the chat core (browser, tel: handler, ...)."""

    def open_external(self, url: str, new_tab: bool = True) -> None: ...


def parse_action(name: str) -> ParsedAction | None:
    """Map a symbolic action name to a ParsedAction, or None if unknown."""
    name = name.strip()
    if match := _CALL_PATTERN.match(name):
        return ParsedAction(ActionKind.CALL, match.group(1))
    if name == PROMO_ACTION:
        return ParsedAction(ActionKind.REDIRECT_TO_PROMO_PAGE)
    return None


class ActionRegistry:
    """Runs named actions through a Navigator.

    Args:
        navigator: Where calls and redirects are sent.
        promo_url: Target of ``redirect_to_promo_page``.
    """

    def __init__(self, navigator: Navigator, promo_url: str) -> None:
        self._navigator = navigator
        self._promo_url = promo_url
        self._handlers = {
            ActionKind.CALL: self._call,
            ActionKind.REDIRECT_TO_PROMO_PAGE: self._redirect_to_promo_page,
        }

    def invoke(self, name: str) -> bool:
        """Run the action called ``name``.

        Returns:
            True if the action was recognized and run, False otherwise.
        """
        parsed = parse_action(name)
        if parsed is None:
            logger.info(f"Unknown action: {name}")
            return False

        self._handlers[parsed.kind](parsed.argument)
        return True

    def _call(self, number: str | None) -> None:
        logger.info(f"Placing call to {number}")
        self._navigator.open_external(f"tel:{number}", new_tab=False)

    def _redirect_to_promo_page(self, _: str | None) -> None:
        self._navigator.open_external(self._promo_url, new_tab=True)
