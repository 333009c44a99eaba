"""Host environment - a minimal DOM-like element tree and document.

The engine never assumes a browser. It needs:
- Elements it can append children to, style, and attach listeners to
- A Document that reports whether it is interactive and fires a one-shot
  "DOMContentLoaded" signal when it becomes so
- A touch capability flag

Integrations (Streamlit, tests, a real DOM bridge) drive the engine by
calling Element.dispatch() with interaction events.
"""

import logging
from typing import Any, Callable, Iterator, Optional

logger = logging.getLogger(__name__)

READY_EVENT = "DOMContentLoaded"


class Element:
    """A node in the host element tree.

    Attributes:
        tag: Element kind ("div", "surface", "path", ...)
        classes: Class names
        style: Style properties (background_color, fill, ...)
        data: Free-form data attributes (category/key for entity elements)
        width: Layout width in pixels
        height: Layout height in pixels
    """

    def __init__(
        self,
        tag: str = "div",
        classes: Optional[list[str]] = None,
        element_id: Optional[str] = None,
        width: float = 0.0,
        height: float = 0.0,
    ) -> None:
        self.tag = tag
        self.classes: list[str] = list(classes or [])
        self.element_id = element_id
        self.width = width
        self.height = height
        self.style: dict[str, Any] = {}
        self.data: dict[str, Any] = {}
        self.text = ""
        self.parent: Optional["Element"] = None
        self.children: list["Element"] = []
        self._listeners: dict[str, list[Callable[..., Any]]] = {}

    # =========================================================================
    # Tree
    # =========================================================================

    def append(self, child: "Element") -> "Element":
        """Append child (re-parenting it) and return child."""
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        """Detach from the parent. No-op when already detached."""
        if self.parent is None:
            return
        self.parent.children.remove(self)
        self.parent = None

    def iter_tree(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def find(self, selector: str) -> Optional["Element"]:
        """Find by "#id" or ".class" in this subtree."""
        for element in self.iter_tree():
            if selector.startswith("#") and element.element_id == selector[1:]:
                return element
            if selector.startswith(".") and selector[1:] in element.classes:
                return element
        return None

    def contains(self, other: "Element") -> bool:
        node: Optional[Element] = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    # =========================================================================
    # Styling
    # =========================================================================

    def add_class(self, name: str) -> "Element":
        if name not in self.classes:
            self.classes.append(name)
        return self

    def css(self, **properties: Any) -> "Element":
        self.style.update(properties)
        return self

    # =========================================================================
    # Events
    # =========================================================================

    def add_event_listener(self, event_name: str, handler: Callable[..., Any]) -> None:
        self._listeners.setdefault(event_name, []).append(handler)

    def remove_event_listener(self, event_name: str, handler: Callable[..., Any]) -> None:
        handlers = self._listeners.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name is not None:
            return len(self._listeners.get(event_name, []))
        return sum(len(handlers) for handlers in self._listeners.values())

    def dispatch(self, event_name: str, event: Any = None) -> int:
        """Run listeners for event_name in registration order.

        Returns:
            Number of listeners invoked.
        """
        handlers = list(self._listeners.get(event_name, []))
        for handler in handlers:
            handler(event)
        return len(handlers)

    def __repr__(self) -> str:
        ident = f"#{self.element_id}" if self.element_id else ""
        cls = "." + ".".join(self.classes) if self.classes else ""
        return f"<{self.tag}{ident}{cls}>"


class Document(Element):
    """Root of the host tree with a readiness signal.

    Example:
        document = Document(ready=False)
        container = document.body.append(Element(element_id="map", width=800, height=400))
        ...
        document.mark_ready()  # fires DOMContentLoaded exactly once
    """

    def __init__(self, ready: bool = True, supports_touch: bool = False) -> None:
        super().__init__(tag="document")
        self.ready_state = "interactive" if ready else "loading"
        self.supports_touch = supports_touch
        self.body = self.append(Element(tag="body"))

    @property
    def is_interactive(self) -> bool:
        return self.ready_state != "loading"

    def mark_ready(self) -> int:
        """Move to the interactive state and fire the readiness signal once.

        Returns:
            Number of readiness listeners invoked (0 if already interactive).
        """
        if self.is_interactive:
            return 0
        self.ready_state = "interactive"
        logger.debug("Document became interactive")
        return self.dispatch(READY_EVENT)

    def query(self, selector: "str | Element") -> Optional[Element]:
        """Resolve a selector or pass an element through."""
        if isinstance(selector, Element):
            return selector
        return self.find(selector)
