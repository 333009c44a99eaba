"""Lifecycle Transition Matrix - Parameterized validation of all event/state combinations.

Uses pytest.mark.parametrize to create a data-driven truth table for the map
lifecycle. This serves as executable documentation of the lifecycle contract.

Test Categories:
    1. Valid transitions: Event fires successfully from allowed source states
    2. Invalid transitions: Event raises TransitionNotAllowed from forbidden states

Matrix Reference (from lifecycle.py docstring):
    5 states x 5 events = 25 combinations
    7 valid transitions
    18 invalid transitions
"""

import logging

import pytest
from statemachine.exceptions import TransitionNotAllowed

from vectormap.ui.lifecycle import LifecycleLogListener, MapLifecycle

STATES = ["constructed", "pending", "initializing", "ready", "destroyed"]
EVENTS = ["wait_for_document", "begin_init", "finish_init", "destroy", "fail"]

# Event sequence reaching each state from the initial one
PATHS: dict[str, list[str]] = {
    "constructed": [],
    "pending": ["wait_for_document"],
    "initializing": ["begin_init"],
    "ready": ["begin_init", "finish_init"],
    "destroyed": ["begin_init", "finish_init", "destroy"],
}


# =============================================================================
# TRUTH TABLE
# =============================================================================
# Format: (event_name, source_state, target_state)

VALID_TRANSITIONS: list[tuple[str, str, str]] = [
    ("wait_for_document", "constructed", "pending"),
    ("begin_init", "constructed", "initializing"),
    ("begin_init", "pending", "initializing"),
    ("finish_init", "initializing", "ready"),
    ("destroy", "ready", "destroyed"),
    ("destroy", "pending", "destroyed"),
    ("fail", "initializing", "destroyed"),
]

_VALID_PAIRS = {(event, source) for event, source, _ in VALID_TRANSITIONS}
INVALID_TRANSITIONS: list[tuple[str, str]] = [
    (event, state) for event in EVENTS for state in STATES if (event, state) not in _VALID_PAIRS
]


def machine_in(state: str) -> MapLifecycle:
    machine = MapLifecycle()
    for event in PATHS[state]:
        machine.send(event)
    assert machine.current_state.id == state
    return machine


class TestTransitionMatrix:
    """Every event from every state."""

    def test_matrix_size(self) -> None:
        assert len(VALID_TRANSITIONS) + len(INVALID_TRANSITIONS) == len(STATES) * len(EVENTS)
        assert len(INVALID_TRANSITIONS) == 18

    @pytest.mark.parametrize("event, source, target", VALID_TRANSITIONS)
    def test_valid_transition(self, event: str, source: str, target: str) -> None:
        machine = machine_in(source)
        machine.send(event)
        assert machine.current_state.id == target

    @pytest.mark.parametrize("event, source", INVALID_TRANSITIONS)
    def test_invalid_transition(self, event: str, source: str) -> None:
        machine = machine_in(source)
        with pytest.raises(TransitionNotAllowed):
            machine.send(event)
        assert machine.current_state.id == source


class TestLifecycleProperties:
    """State check helpers."""

    def test_initial_state(self) -> None:
        machine = MapLifecycle()
        assert machine.get_state_name() == "Constructed"
        assert not machine.is_ready
        assert not machine.is_pending
        assert not machine.is_destroyed

    def test_state_flags(self) -> None:
        assert machine_in("pending").is_pending
        assert machine_in("ready").is_ready
        assert machine_in("destroyed").is_destroyed

    def test_repr(self) -> None:
        assert repr(machine_in("ready")) == "MapLifecycle(state=Ready)"


class TestLifecycleLogListener:
    """LifecycleLogListener - transition logging."""

    def test_logs_each_transition(self, caplog: pytest.LogCaptureFixture) -> None:
        machine = MapLifecycle()
        machine.add_listener(LifecycleLogListener(name="map-7"))

        with caplog.at_level(logging.INFO, logger="vectormap.ui.lifecycle"):
            machine.send("begin_init")
            machine.send("finish_init")

        messages = [r.getMessage() for r in caplog.records if r.name == "vectormap.ui.lifecycle"]
        assert len(messages) == 2
        assert messages[0].startswith("[LIFECYCLE map-7] Constructed --(")
        assert "begin_init" in messages[0]
        assert messages[0].endswith("--> Initializing")
        assert "finish_init" in messages[1]
        assert messages[1].endswith("--> Ready")
