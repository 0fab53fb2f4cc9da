"""Session domain services: registry, identity, state machine, scoring.

Everything here operates on in-memory ``Room`` aggregates and is imported
by the socket handlers, keeping transport concerns separated from the
game rules. Nothing in this package raises for races or stale events;
operations that cannot apply return ``None`` and log why.
"""
