"""Liquid democracy tally service.

Voters either pick an alternative or delegate their vote to another voter;
the engine resolves delegation chains (invalidating cycles) and counts the
result. Exposed as a stdin CLI (``liquid-democracy``) and a FastAPI service
(``liquid_democracy.main:app``) backed by persisted polls.
"""

__all__: list[str] = []
