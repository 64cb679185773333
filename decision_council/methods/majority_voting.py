"""Majority voting: open discussion, then a plurality vote."""

import logging
import re
from typing import Any

from decision_council.methods.base import Phase, PhasedDiscussionMethod, dump_state
from decision_council.models import Council, Issue, MethodType, SessionRound

logger = logging.getLogger(__name__)

NO_WINNER = "No clear winner"

_VOTE_RE = re.compile(r"VOTE:[ \t]*(.*)", re.IGNORECASE)


def extract_vote(text: str) -> str:
    """Text after ``VOTE:`` up to the end of that line, else the first line."""
    match = _VOTE_RE.search(text)
    if match:
        choice = match.group(1)
    else:
        choice = text.strip().split("\n", 1)[0]
    return choice.strip(" \t[]*\"'.")


def tally_votes(votes: list[str], options: list[str] | None = None) -> list[tuple[str, int]]:
    """Group votes case-insensitively, most votes first; ties keep first-seen order.

    A vote that matches a declared option is reported under the option's spelling.
    """
    canonical = {o.lower(): o for o in options or []}
    counts: dict[str, int] = {}
    labels: dict[str, str] = {}
    for vote in votes:
        if not vote:
            continue
        key = vote.lower()
        labels.setdefault(key, canonical.get(key, vote))
        counts[key] = counts.get(key, 0) + 1
    ordered = sorted(counts, key=lambda k: -counts[k])
    return [(labels[k], counts[k]) for k in ordered]


class MajorityVotingMethod(PhasedDiscussionMethod):
    method_type = MethodType.MAJORITY_VOTING
    display_name = "Majority Voting"
    min_members = 2
    completion_reason = "Majority voting complete after discussion and vote rounds."
    contribution_format = "{content}"
    contribution_separator = "\n---\n"
    phases = (
        Phase(
            "Discussion",
            "Round 1 - Open Discussion: Share your perspective on \"{topic}\". "
            "Propose the option you favour, provide your rationale, and address any concerns.{options}",
            "Discussion Round:",
        ),
        Phase(
            "Vote",
            "Round 2 - Vote: Based on the preceding discussion about \"{topic}\", "
            "cast your vote by clearly stating: VOTE: [your chosen option]. "
            "Provide one sentence of justification for your choice.{options}",
            "Vote Round:",
        ),
    )

    def __init__(self, options: list[str] | None = None) -> None:
        self.options = list(options or [])

    def prompt_fields(self, state: dict[str, Any], index: int) -> dict[str, Any]:
        fields = super().prompt_fields(state, index)
        options = state.get("options")
        if isinstance(options, list) and options:
            fields["options"] = " The options under consideration are: " + ", ".join(map(str, options)) + "."
        else:
            fields["options"] = ""
        return fields

    def extend_state(self, state: dict[str, Any], session_round: SessionRound, summary: str) -> str:
        if session_round.round_number < self.max_rounds:
            return summary

        options = state.get("options") if isinstance(state.get("options"), list) else []
        votes = [extract_vote(c.raw_content) for c in session_round.contributions]
        tally = tally_votes(votes, [str(o) for o in options])
        if not tally or (len(tally) > 1 and tally[0][1] == tally[1][1]):
            winner = NO_WINNER
        else:
            winner = tally[0][0]
        state["tally"] = dict(tally)
        state["winner"] = winner
        logger.info("Majority vote winner: %s", winner)

        counts = ", ".join(f"{label}: {count} vote(s)" for label, count in tally) or "no votes cast"
        return f"Vote Tally: {counts}\nWinner: {winner}"

    def initialize_state(self, council: Council, issue: Issue) -> str:
        state = {
            "topic": issue.title,
            "context": issue.context,
            "options": self.options,
            "roundsCompleted": 0,
            "lastSummary": "",
            "history": [],
        }
        return dump_state(state)
