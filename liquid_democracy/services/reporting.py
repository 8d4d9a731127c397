"""Text rendering of tallies and open votes."""
from __future__ import annotations

from typing import List, Mapping, Optional, Tuple

from liquid_democracy.config import TALLY_SETTINGS
from liquid_democracy.services.democracy import TallyResult


def _ranking_key(item: Tuple[str, int]) -> Tuple[int, str, str]:
    name, count = item
    # Most votes first; ties by name ignoring case, lowercase spelling first.
    return (-count, name.casefold(), name.swapcase())


def ranked_choices(result: TallyResult) -> List[Tuple[str, int]]:
    """Valid alternatives ordered for display: ``[(name, votes), ...]``."""
    return sorted(result.choices.items(), key=_ranking_key)


def format_results(result: Optional[TallyResult]) -> str:
    """Render one line per alternative plus the trailing invalid-votes line."""
    if result is None:
        return TALLY_SETTINGS["no_results"]
    line = TALLY_SETTINGS["result_line_format"]
    rows = [line % (count, name) for name, count in ranked_choices(result)]
    rows.append(line % (result.invalid_vote_count, TALLY_SETTINGS["invalid_label"]))
    return "".join(rows)


def format_open_votes(choices: Mapping[str, Optional[str]]) -> str:
    """Render who (indirectly) chose what, flagging invalid voters."""
    rows = [TALLY_SETTINGS["open_vote_header"]]
    for voter in sorted(choices):
        choice = choices[voter]
        if choice is not None:
            rows.append(TALLY_SETTINGS["open_vote_line_format"] % (voter, choice))
        else:
            rows.append(
                TALLY_SETTINGS["open_invalid_line_format"] % (voter, TALLY_SETTINGS["open_invalid_marker"])
            )
    return "".join(rows)


__all__ = ["ranked_choices", "format_results", "format_open_votes"]
