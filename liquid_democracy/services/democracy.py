"""Liquid democracy delegation graph and tally engine.

Voters either *pick* an alternative or *delegate* to another voter. A voter's
resulting choice is found by following delegations until an alternative is
reached. Chains that loop back onto themselves (including self-delegation)
and chains ending at a voter without any choice resolve to an invalid vote.

Resolution is lazy: mutations only mark the graph dirty and the next query
recomputes every voter's outcome in a single linear pass. Each chain walk is
iterative and stops at the first already-resolved voter, so long delegation
lines never recurse and every voter is visited once per recomputation.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Set, Union

from liquid_democracy.services.errors import MissingVoterError
from liquid_democracy.utils import get_logger

logger = get_logger(__name__)


@dataclass(eq=False)
class _Alternative:
    name: str


@dataclass(eq=False)
class _Voter:
    name: str
    # Only the last pick / delegation counts.
    target: Optional[Union["_Voter", _Alternative]] = None


@dataclass(frozen=True)
class TallyResult:
    """Snapshot of one tally; never updated by later votes."""

    choices: Mapping[str, int] = field(default_factory=dict)
    invalid_vote_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "choices", MappingProxyType(dict(self.choices)))

    @property
    def total(self) -> int:
        return sum(self.choices.values()) + self.invalid_vote_count


class LiquidDemocracy:
    """Mutable delegation graph of voters and alternatives.

    Names are case sensitive. Voters and alternatives live in separate
    namespaces, so an alternative may share a voter's name.
    """

    def __init__(self) -> None:
        self._voters: Dict[str, _Voter] = {}
        self._alternatives: Dict[str, _Alternative] = {}
        self._resolved: Optional[Dict[str, Optional[str]]] = None

    def _voter(self, name: Optional[str]) -> _Voter:
        if not name:
            raise MissingVoterError()
        voter = self._voters.get(name)
        if voter is None:
            voter = self._voters[name] = _Voter(name)
            self._resolved = None
        return voter

    def _alternative(self, name: str) -> _Alternative:
        alternative = self._alternatives.get(name)
        if alternative is None:
            alternative = self._alternatives[name] = _Alternative(name)
        return alternative

    def pick(self, voter: Optional[str], alternative: Optional[str]) -> None:
        """Register ``voter`` picking ``alternative``.

        A missing alternative registers the voter without touching their
        previous choice (a fresh voter therefore ends up invalid).

        Raises:
            MissingVoterError: if ``voter`` is empty.
        """
        node = self._voter(voter)
        if not alternative:
            logger.debug("Pick without alternative", voter=voter)
            return
        node.target = self._alternative(alternative)
        self._resolved = None

    def delegate(self, voter: Optional[str], delegate: Optional[str]) -> None:
        """Register ``voter`` delegating their vote to ``delegate``.

        Raises:
            MissingVoterError: if ``voter`` is empty.
        """
        node = self._voter(voter)
        if not delegate:
            logger.debug("Delegation without delegate", voter=voter)
            return
        node.target = self._voter(delegate)
        self._resolved = None

    def voters(self) -> Set[str]:
        return set(self._voters)

    def alternatives(self) -> Set[str]:
        return set(self._alternatives)

    def _resolve(self) -> Dict[str, Optional[str]]:
        if self._resolved is not None:
            return self._resolved

        resolved: Dict[str, Optional[str]] = {}
        cycles = 0
        for start in self._voters.values():
            if start.name in resolved:
                continue
            chain: list[str] = []
            on_chain: Set[str] = set()
            node = start
            outcome: Optional[str] = None
            while True:
                if node.name in resolved:
                    outcome = resolved[node.name]
                    break
                if node.name in on_chain:
                    cycles += 1
                    outcome = None
                    break
                chain.append(node.name)
                on_chain.add(node.name)
                target = node.target
                if target is None:
                    break
                if isinstance(target, _Alternative):
                    outcome = target.name
                    break
                node = target
            for name in chain:
                resolved[name] = outcome

        logger.debug(
            "Delegations resolved",
            voters=len(resolved),
            cycles=cycles,
        )
        self._resolved = resolved
        return resolved

    def resulting_choices(self) -> Dict[str, Optional[str]]:
        """Map every voter to their (indirectly) chosen alternative, ``None`` when invalid."""
        return dict(self._resolve())

    def results(self) -> TallyResult:
        """Count votes per alternative; alternatives without votes are omitted."""
        counts = Counter(self._resolve().values())
        invalid = counts.pop(None, 0)
        return TallyResult(choices=counts, invalid_vote_count=invalid)


__all__ = ["LiquidDemocracy", "TallyResult"]
