"""Tests for the generic state machine and the plant stage table."""

from enum import Enum

import pytest

from nursery.exceptions import InvalidTransitionError, PreconditionError
from nursery.state_machine import (
    PLANT_STAGE_TRANSITIONS,
    PlantStage,
    StateMachine,
    create_plant_state_machine,
)


class GateState(Enum):
    OPEN = "open"
    CLOSED = "closed"
    BROKEN = "broken"


GATE_TRANSITIONS = {
    GateState.OPEN: [GateState.CLOSED, GateState.BROKEN],
    GateState.CLOSED: [GateState.OPEN, GateState.BROKEN],
    GateState.BROKEN: [],
}


class TestStateMachine:
    """Generic machine behaviour."""

    def test_valid_transition(self) -> None:
        machine = StateMachine(GateState.CLOSED, GATE_TRANSITIONS)
        assert machine.transition(GateState.OPEN) is GateState.OPEN
        assert machine.state is GateState.OPEN

    def test_invalid_transition_raises(self) -> None:
        machine = StateMachine(GateState.BROKEN, GATE_TRANSITIONS)
        with pytest.raises(InvalidTransitionError):
            machine.transition(GateState.OPEN)
        assert machine.state is GateState.BROKEN

    def test_invalid_transition_is_a_precondition_error(self) -> None:
        """Callers catching the broad precondition class also see it."""
        machine = StateMachine(GateState.BROKEN, GATE_TRANSITIONS)
        with pytest.raises(PreconditionError):
            machine.transition(GateState.CLOSED)

    def test_try_transition_returns_err(self) -> None:
        machine = StateMachine(GateState.BROKEN, GATE_TRANSITIONS)
        result = machine.try_transition(GateState.OPEN)
        assert result.is_err()
        assert "BROKEN -> OPEN" in result.error

    def test_unknown_initial_state_rejected(self) -> None:
        with pytest.raises(ValueError):
            StateMachine(GateState.OPEN, {GateState.CLOSED: []})

    def test_dead_end_state_has_no_exits(self) -> None:
        machine = StateMachine(GateState.OPEN, GATE_TRANSITIONS)
        machine.transition(GateState.BROKEN)
        assert not any(machine.can_transition(state) for state in GateState)

    def test_force_state_skips_validation(self) -> None:
        machine = StateMachine(GateState.BROKEN, GATE_TRANSITIONS)
        machine.force_state(GateState.OPEN)
        assert machine.state is GateState.OPEN

    def test_force_state_rejects_unknown_state(self) -> None:
        machine = StateMachine(GateState.OPEN, {GateState.OPEN: []})
        with pytest.raises(ValueError):
            machine.force_state(GateState.CLOSED)


class TestPlantStageTable:
    """The plant lifecycle only moves forward."""

    @pytest.mark.parametrize(
        "source,target",
        [
            (PlantStage.SEED, PlantStage.GROWING),
            (PlantStage.GROWING, PlantStage.RIPE),
            (PlantStage.SEED, PlantStage.DEAD),
            (PlantStage.GROWING, PlantStage.DEAD),
            (PlantStage.RIPE, PlantStage.DEAD),
        ],
    )
    def test_allowed(self, source: PlantStage, target: PlantStage) -> None:
        machine = create_plant_state_machine(source)
        assert machine.can_transition(target)

    @pytest.mark.parametrize(
        "source,target",
        [
            (PlantStage.SEED, PlantStage.RIPE),
            (PlantStage.GROWING, PlantStage.SEED),
            (PlantStage.RIPE, PlantStage.GROWING),
            (PlantStage.DEAD, PlantStage.SEED),
            (PlantStage.DEAD, PlantStage.GROWING),
        ],
    )
    def test_forbidden(self, source: PlantStage, target: PlantStage) -> None:
        machine = create_plant_state_machine(source)
        with pytest.raises(InvalidTransitionError):
            machine.transition(target)

    def test_dead_is_the_only_terminal_stage(self) -> None:
        terminal = [stage for stage, targets in PLANT_STAGE_TRANSITIONS.items() if not targets]
        assert terminal == [PlantStage.DEAD]

    def test_new_machine_starts_as_seed(self) -> None:
        assert create_plant_state_machine().state is PlantStage.SEED
