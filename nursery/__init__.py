"""Nursery simulation engine.

This package contains the headless simulation logic for the plant nursery,
with no rendering or input dependencies. Key modules include:

- plants: species catalogue, lifecycle state machine, growth cycles
- greenhouse: plot management and worker notification
- workers / commands / memento: worker reactions, undoable actions
- store / customers: inventory economy and the customer loop
- simulation: the tick-phased engine tying everything together
- persistence / views: save/load contract and read-only UI snapshots

Use direct imports from subpackages; this module keeps its surface small.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
