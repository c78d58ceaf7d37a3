"""Nursery exception hierarchy.

Centralised base classes so callers can catch narrowly and failures
become easier to diagnose.

Precondition violations (programming errors) derive from
``PreconditionError`` and are never caught inside the engine. Expected
runtime failures are not exceptions at all; they come back as
``nursery.result.Err`` values.
"""


class NurseryError(Exception):
    """Root of all nursery domain exceptions."""


class SimulationError(NurseryError):
    """Errors during simulation execution (engine, plants, commands)."""


class PreconditionError(SimulationError, ValueError):
    """A caller broke an operation's contract.

    Also a ValueError, so callers used to the stdlib convention catch it.
    """


class InvalidTransitionError(PreconditionError):
    """A plant was asked to move to a stage not reachable from its current one."""


class CommandAlreadyExecutedError(PreconditionError):
    """A command object was executed a second time."""


class MementoMismatchError(PreconditionError):
    """A memento was restored onto an entity it was not taken from."""


class PersistenceError(NurseryError):
    """Errors during save / load / snapshot operations."""


class SnapshotError(PersistenceError):
    """A saved snapshot is corrupt, incomplete, or from an unknown schema."""


class ConfigurationError(NurseryError):
    """Invalid or missing configuration."""
