"""Stable fingerprints of captured simulation state.

Two runs that are in the same state produce the same fingerprint, which
makes replay checks a string comparison:

    original.run(50)
    copy = NurserySimulation.from_snapshot(original.capture_state())
    original.run(50); copy.run(50)
    assert original.fingerprint() == copy.fingerprint()
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import orjson


@dataclass(frozen=True)
class SnapshotFingerprinter:
    """Compute stable fingerprints for JSON-compatible snapshots."""

    digest_size: int = 16
    float_precision: int | None = 6
    non_deterministic_keys: frozenset[str] = frozenset({"saved_at"})

    def fingerprint(self, snapshot: Mapping[str, Any]) -> str:
        canonical = canonicalize_for_fingerprint(
            snapshot,
            non_deterministic_keys=self.non_deterministic_keys,
            float_precision=self.float_precision,
        )
        payload = orjson.dumps(canonical, option=orjson.OPT_SORT_KEYS)
        return hashlib.blake2b(payload, digest_size=self.digest_size).hexdigest()


def fingerprint_snapshot(snapshot: Mapping[str, Any]) -> str:
    """Convenience wrapper using the default fingerprinter."""
    return SnapshotFingerprinter().fingerprint(snapshot)


def canonicalize_for_fingerprint(
    value: Any,
    non_deterministic_keys: Iterable[str] | None = None,
    float_precision: int | None = 6,
) -> Any:
    """Return a canonical, JSON-compatible structure for stable hashing.

    - Drops wall-clock keys anywhere in the structure.
    - Rounds floats so accumulated rounding noise does not matter.
    - Keeps list order: queue and arrival order are part of the state.
    """
    drop_keys = set(non_deterministic_keys or [])

    def _canon(v: Any) -> Any:
        if isinstance(v, float):
            if float_precision is None:
                return v
            return round(v, int(float_precision))
        if isinstance(v, Mapping):
            return {str(k): _canon(vv) for k, vv in v.items() if k not in drop_keys}
        if isinstance(v, (list, tuple)):
            return [_canon(x) for x in v]
        return v

    return _canon(value)
