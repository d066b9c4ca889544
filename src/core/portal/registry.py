"""
Per-visitor portal state.

Each browser gets its own controller, intake wizard, sign-in form and
logo gesture counter, looked up by an opaque visitor id. Ids are always
minted here; an unknown id from the outside gets a fresh visitor rather
than being adopted.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional
from uuid import uuid4

from ..intake.wizard import IntakeWizard
from ..landing.gesture import LogoGesture
from ..landing.signin import SignInForm
from .controller import PortalController

logger = logging.getLogger(__name__)


@dataclass
class Visitor:
    controller: PortalController
    wizard: IntakeWizard
    sign_in: SignInForm
    logo: LogoGesture


VisitorFactory = Callable[[], Visitor]


class VisitorRegistry:
    """
    Visitors by id, least recently used evicted first.

    Evicted and closed visitors have their auth subscription released.
    """

    def __init__(self, factory: VisitorFactory, max_visitors: int = 1000) -> None:
        if max_visitors < 1:
            raise ValueError("max_visitors must be positive")
        self._factory = factory
        self._max_visitors = max_visitors
        self._visitors: "OrderedDict[str, Visitor]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._visitors)

    def __contains__(self, visitor_id: object) -> bool:
        return visitor_id in self._visitors

    async def get(self, visitor_id: Optional[str]) -> tuple[str, Visitor]:
        """Return (id, visitor), creating and initializing one if needed."""
        if visitor_id and visitor_id in self._visitors:
            self._visitors.move_to_end(visitor_id)
            return visitor_id, self._visitors[visitor_id]

        new_id = uuid4().hex
        visitor = self._factory()
        await visitor.controller.initialize()
        self._visitors[new_id] = visitor

        while len(self._visitors) > self._max_visitors:
            old_id, old = self._visitors.popitem(last=False)
            old.controller.close()
            logger.debug("Evicted visitor", extra={"visitor_id": old_id})

        logger.info("New visitor", extra={"visitor_id": new_id, "active": len(self._visitors)})
        return new_id, visitor

    def close_all(self) -> None:
        for visitor in self._visitors.values():
            visitor.controller.close()
        self._visitors.clear()
