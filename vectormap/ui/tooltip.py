"""Tooltip collaborator - a single floating label attached to the document body."""

import logging

from vectormap.constants import ClassNames
from vectormap.ui.host import Element

logger = logging.getLogger(__name__)


class Tooltip:
    """Floating label shown while hovering regions/markers.

    Hooks receive the tooltip in "*.tooltip:show" events and may change
    its text before it is displayed.
    """

    def __init__(self, body: Element) -> None:
        self.element = body.append(Element(tag="div", classes=[ClassNames.TOOLTIP]))
        self.element.css(display="none")
        self.visible = False

    @property
    def text(self) -> str:
        return self.element.text

    @text.setter
    def text(self, value: str) -> None:
        self.element.text = value

    def show(self, x: float | None = None, y: float | None = None) -> None:
        self.visible = True
        self.element.css(display="block")
        if x is not None and y is not None:
            self.element.css(left=x, top=y)

    def hide(self) -> None:
        self.visible = False
        self.element.css(display="none")

    def destroy(self) -> None:
        """Detach the tooltip element from the document."""
        self.element.remove()
