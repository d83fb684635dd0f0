"""State layer.

Holds the only durable piece of shipment state (the last confirmed
status) and the pure transition check that consults it.
"""

from parcelwatch.state.detector import Changed, Detection, Unchanged, detect
from parcelwatch.state.store import LastState, StateStore

__all__ = ["Changed", "Detection", "LastState", "StateStore", "Unchanged", "detect"]
