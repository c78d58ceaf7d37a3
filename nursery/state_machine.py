"""State machine abstractions for explicit state management.

All valid states are enumerated, valid transitions are declared up front,
and an invalid transition is caught the moment it is attempted.

Usage:
------
    machine = StateMachine(PlantStage.SEED, PLANT_STAGE_TRANSITIONS)
    machine.transition(PlantStage.GROWING)  # OK
    machine.transition(PlantStage.SEED)     # Raises InvalidTransitionError

    result = machine.try_transition(PlantStage.RIPE)
    if result.is_err():
        logger.warning(f"Invalid transition: {result.error}")
"""

from enum import Enum
from typing import Dict, Generic, List, TypeVar

from nursery.exceptions import InvalidTransitionError
from nursery.result import Err, Ok, Result

S = TypeVar("S", bound=Enum)


class StateMachine(Generic[S]):
    """A generic state machine with explicit transition validation.

    Example:
        class GateState(Enum):
            OPEN = "open"
            CLOSED = "closed"

        gate = StateMachine(GateState.CLOSED, {
            GateState.OPEN: [GateState.CLOSED],
            GateState.CLOSED: [GateState.OPEN],
        })
        gate.transition(GateState.OPEN)
    """

    def __init__(self, initial_state: S, valid_transitions: Dict[S, List[S]]) -> None:
        """Initialize the state machine.

        Args:
            initial_state: The starting state
            valid_transitions: Map of state -> list of valid target states
        """
        if initial_state not in valid_transitions:
            raise ValueError(
                f"Initial state {initial_state} not in valid_transitions. "
                f"Valid states: {list(valid_transitions.keys())}"
            )
        self._state = initial_state
        self._transitions = valid_transitions

    @property
    def state(self) -> S:
        return self._state

    def can_transition(self, target: S) -> bool:
        return target in self._transitions.get(self._state, [])

    def try_transition(self, target: S) -> Result[S, str]:
        """Attempt to transition to a new state.

        Returns Ok(new_state) if successful, Err(message) if invalid.
        """
        if not self.can_transition(target):
            valid_targets = self._transitions.get(self._state, [])
            return Err(
                f"Invalid transition: {self._state.name} -> {target.name}. "
                f"Valid targets from {self._state.name}: {[t.name for t in valid_targets]}"
            )
        self._state = target
        return Ok(target)

    def transition(self, target: S) -> S:
        """Transition to a new state, raising on an invalid transition.

        Use this when an invalid transition is a programming error. Use
        try_transition() when the transition might legitimately fail.

        Raises:
            InvalidTransitionError: If the transition is not declared
        """
        result = self.try_transition(target)
        if result.is_err():
            raise InvalidTransitionError(result.error)
        return result.unwrap()

    def force_state(self, state: S) -> None:
        """Set the state without validation.

        Only for restoring saved state (mementos, snapshots).
        """
        if state not in self._transitions:
            raise ValueError(f"Unknown state {state}")
        self._state = state

    def __repr__(self) -> str:
        return f"StateMachine(state={self._state.name})"


# ============================================================================
# Plant Lifecycle State Machine
# ============================================================================


class PlantStage(Enum):
    """Lifecycle stages of a plant.

    Values are the strings used in saved snapshots and views.
    """

    SEED = "seed"
    GROWING = "growing"
    RIPE = "ripe"
    DEAD = "dead"


# Plants only move forward; any living stage may die, Dead is terminal.
PLANT_STAGE_TRANSITIONS: Dict[PlantStage, List[PlantStage]] = {
    PlantStage.SEED: [PlantStage.GROWING, PlantStage.DEAD],
    PlantStage.GROWING: [PlantStage.RIPE, PlantStage.DEAD],
    PlantStage.RIPE: [PlantStage.DEAD],
    PlantStage.DEAD: [],
}


def create_plant_state_machine(initial_stage: PlantStage = PlantStage.SEED) -> StateMachine[PlantStage]:
    """Create a state machine for plant lifecycle management."""
    return StateMachine(initial_state=initial_stage, valid_transitions=PLANT_STAGE_TRANSITIONS)
