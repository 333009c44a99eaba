"""Lifecycle state machine for a map instance.

Uses python-statemachine so every lifecycle step is an explicit, guarded
transition:

States:
    CONSTRUCTED: Options validated, nothing attached yet (initial)
    PENDING: Waiting for the document to become interactive
    INITIALIZING: Running the ordered initialization steps
    READY: Fully built; queries and interaction allowed
    DESTROYED: Torn down (final)

Transitions:
    CONSTRUCTED -> PENDING: wait_for_document (document still loading)
    CONSTRUCTED -> INITIALIZING: begin_init (document already interactive)
    PENDING -> INITIALIZING: begin_init (readiness signal fired)
    INITIALIZING -> READY: finish_init
    READY -> DESTROYED: destroy
    PENDING -> DESTROYED: destroy (map torn down before it was ever built)
    INITIALIZING -> DESTROYED: fail (an initialization step raised)

begin_init is not allowed from INITIALIZING or READY, so initialization can
never run twice for one instance.
"""

import logging

from statemachine import State, StateMachine

logger = logging.getLogger(__name__)


class LifecycleLogListener:
    """Listener that logs every lifecycle transition.

    Usage:
        lifecycle = MapLifecycle()
        lifecycle.add_listener(LifecycleLogListener(name="map-1"))
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[LIFECYCLE {self.name}] {source.name} --({event})--> {target.name}")


class MapLifecycle(StateMachine):
    """Lifecycle of one map instance. See module docstring for the transition table."""

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    constructed = State("Constructed", initial=True)
    pending = State("Pending")
    initializing = State("Initializing")
    ready = State("Ready")
    destroyed = State("Destroyed", final=True)

    # ==========================================================================
    # Transitions
    # ==========================================================================

    wait_for_document = constructed.to(pending)
    begin_init = constructed.to(initializing) | pending.to(initializing)
    finish_init = initializing.to(ready)
    destroy = ready.to(destroyed) | pending.to(destroyed)
    fail = initializing.to(destroyed)

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_pending(self) -> bool:
        return self.pending.is_active

    @property
    def is_ready(self) -> bool:
        return self.ready.is_active

    @property
    def is_destroyed(self) -> bool:
        return self.destroyed.is_active

    def get_state_name(self) -> str:
        """Current state name for display ("Ready", ...)."""
        return self.current_state.name

    def __repr__(self) -> str:
        return f"MapLifecycle(state={self.get_state_name()})"
