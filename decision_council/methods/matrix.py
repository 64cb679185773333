"""Shared four-round flow for the score-matrix methods.

Round 1 frames the problem, rounds 2-3 are open discussion, round 4 collects a score per
option and criterion from every member. The averaged matrix is handed to an MCDA
algorithm and the result is stored under ``result`` in the state.
"""

import logging
import math
import random
from collections.abc import Iterable
from typing import Any

from config.config_loader import CriterionConfig, MethodDefaults
from decision_council.mcda import McdaCriterion, McdaInput, McdaResult
from decision_council.methods.base import (
    NO_CONTRIBUTIONS,
    DecisionMethod,
    dump_state,
    load_state,
    text_field,
)
from decision_council.models import AggregationResult, Council, Issue, NextPrompt, Session, SessionRound
from decision_council.parsing import STANDARD_SCALE, ScoreExtractor, ScoreScale
from decision_council.scoring import average_votes

logger = logging.getLogger(__name__)

BUILTIN_DEFAULTS = MethodDefaults(
    options=["Status Quo", "Incremental Change", "Full Transformation"],
    criteria=[
        CriterionConfig("Feasibility", 0.25, True),
        CriterionConfig("Cost", 0.25, False),
        CriterionConfig("Impact", 0.30, True),
        CriterionConfig("Risk", 0.20, False),
    ],
)

SYNTHETIC_NOTICE = (
    "> **Notice:** no parseable scores were received in the scoring round. "
    "The ranking below is based on a synthetic, deterministically generated vote "
    "and does not reflect the council's judgement."
)


def synthetic_voter_key(session_round: SessionRound) -> str:
    return f"synthetic-{str(session_round.id)[:8]}"


def _usable_options(raw: Iterable[Any]) -> list[str] | None:
    """Distinct non-blank option names, or None when fewer than two remain."""
    options = list(dict.fromkeys(o.strip() for o in raw if isinstance(o, str) and o.strip()))
    return options if len(options) >= 2 else None


def _usable_criteria(raw: Iterable[Any]) -> list[dict[str, Any]] | None:
    """Well-formed criteria with unique names, or None when none carry positive weight."""
    criteria: list[dict[str, Any]] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        weight = item.get("weight", 1.0)
        if not isinstance(name, str) or not name.strip() or name in seen:
            continue
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            continue
        if not math.isfinite(weight) or weight < 0:
            continue
        seen.add(name)
        criteria.append({
            "name": name,
            "weight": float(weight),
            "isBenefit": bool(item.get("isBenefit", item.get("is_benefit", True))),
        })
    if not criteria or sum(c["weight"] for c in criteria) <= 0:
        return None
    return criteria


class MatrixScoringMethod(DecisionMethod):
    """Base for Weighted Deliberation and the five MCDA-backed methods.

    Subclasses set the texts, the score scale, the synthetic vote range and
    ``algorithm`` (a ``staticmethod`` wrapping one of the ``decision_council.mcda``
    functions).
    """

    max_rounds = 4
    min_members = 1

    label_prefix = ""
    scale: ScoreScale = STANDARD_SCALE
    synthetic_range: tuple[int, int] = (4, 8)
    impute_missing = True
    phase_labels: tuple[str, ...] = ("Moderator Framing", "Expert Discussion", "Expert Deliberation")

    criteria_title = "with weights"
    framing_focus = "Frame the key considerations. What should the panel focus on when evaluating each option?"
    discussion_focus = "Share your analysis of each option against the criteria."
    deliberation_focus = "Having considered all perspectives, refine your assessment and prepare to score."
    scoring_guidance = "Be objective and base scores on your expert judgement."

    algorithm: Any = None

    def __init__(self, defaults: MethodDefaults | None = None) -> None:
        defaults = defaults or BUILTIN_DEFAULTS
        options = _usable_options(defaults.options)
        if options is None:
            logger.warning("%s: configured options unusable, using built-in defaults", type(self).__name__)
            options = list(BUILTIN_DEFAULTS.options)
        criteria = _usable_criteria(
            {"name": c.name, "weight": c.weight, "isBenefit": c.is_benefit} for c in defaults.criteria
        )
        if criteria is None:
            logger.warning("%s: configured criteria unusable, using built-in defaults", type(self).__name__)
            criteria = [
                {"name": c.name, "weight": c.weight, "isBenefit": c.is_benefit} for c in BUILTIN_DEFAULTS.criteria
            ]
        self.defaults = MethodDefaults(
            options=options,
            criteria=[CriterionConfig(c["name"], c["weight"], c["isBenefit"]) for c in criteria],
        )

    # ─── State ──────────────────────────────────────────────────────────────

    def default_options(self) -> list[str]:
        return list(self.defaults.options)

    def default_criteria(self) -> list[dict[str, Any]]:
        return [
            {"name": c.name, "weight": c.weight, "isBenefit": c.is_benefit}
            for c in self.defaults.criteria
        ]

    def _clean_options(self, raw: Any) -> list[str]:
        if not isinstance(raw, list):
            return self.default_options()
        return _usable_options(raw) or self.default_options()

    def _clean_criteria(self, raw: Any) -> list[dict[str, Any]]:
        if not isinstance(raw, list):
            return self.default_criteria()
        return _usable_criteria(raw) or self.default_criteria()

    @staticmethod
    def _clean_votes(raw: Any) -> dict[str, dict[str, dict[str, float]]]:
        votes: dict[str, dict[str, dict[str, float]]] = {}
        if not isinstance(raw, dict):
            return votes
        for voter, ballot in raw.items():
            if not isinstance(ballot, dict):
                continue
            clean = {
                str(option): {
                    str(c): v for c, v in row.items()
                    if isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
                }
                for option, row in ballot.items()
                if isinstance(row, dict)
            }
            if clean:
                votes[str(voter)] = clean
        return votes

    def parse_state(self, payload: str | None) -> dict[str, Any]:
        """Load the state, reseeding options and criteria when they are unusable."""
        state = load_state(payload)
        discussions = state.get("discussions")
        voters = state.get("syntheticVoters")
        return {
            "topic": text_field(state, "topic", "the topic"),
            "context": text_field(state, "context", "(no additional context)"),
            "options": self._clean_options(state.get("options")),
            "criteria": self._clean_criteria(state.get("criteria")),
            "discussions": [d for d in discussions if isinstance(d, str)] if isinstance(discussions, list) else [],
            "votes": self._clean_votes(state.get("votes")),
            "syntheticVotes": bool(state.get("syntheticVotes", False)),
            "syntheticVoters": [str(v) for v in voters] if isinstance(voters, list) else [],
            "result": state.get("result"),
            "roundsCompleted": state.get("roundsCompleted", 0) if isinstance(state.get("roundsCompleted"), int) else 0,
        }

    def initialize_state(self, council: Council, issue: Issue) -> str:
        state = self.parse_state(None)
        state["topic"] = issue.title
        state["context"] = issue.context
        return dump_state(state)

    # ─── Prompts ────────────────────────────────────────────────────────────

    @property
    def prompt_prefix(self) -> str:
        return f"{self.label_prefix.upper()} " if self.label_prefix else ""

    def criterion_legend(self, criterion: dict[str, Any]) -> str:
        return f"  • {criterion['name']} ({criterion['weight']:.0%})"

    def criterion_tag(self, criterion: dict[str, Any]) -> str:
        return f"{criterion['name']}({criterion['weight']:.0%})"

    def framing_prompt(self, state: dict[str, Any]) -> str:
        options = "\n".join(f"  {i}. {o}" for i, o in enumerate(state["options"], start=1))
        criteria = "\n".join(self.criterion_legend(c) for c in state["criteria"])
        return (
            f"{self.prompt_prefix}MODERATOR ROUND: You are the Moderator. "
            "Present the decision problem to the council.\n\n"
            f"Problem: {state['topic']}\n"
            f"Context: {state['context']}\n\n"
            f"Options under consideration:\n{options}\n\n"
            f"Evaluation criteria ({self.criteria_title}):\n{criteria}\n\n"
            f"{self.framing_focus}"
        )

    def discussion_prompt(self, state: dict[str, Any]) -> str:
        return (
            f"{self.prompt_prefix}DISCUSSION ROUND: Analyse the decision options for '{state['topic']}'.\n\n"
            f"Options: {', '.join(state['options'])}\n"
            f"Criteria: {', '.join(c['name'] for c in state['criteria'])}\n\n"
            f"{self.discussion_focus}"
        )

    def deliberation_prompt(self, state: dict[str, Any]) -> str:
        return (
            f"{self.prompt_prefix}DELIBERATION ROUND: Refine your position on '{state['topic']}'.\n\n"
            f"{self.deliberation_focus}"
        )

    def scoring_prompt(self, state: dict[str, Any]) -> str:
        scale = self.scale.label()
        score_lines = "\n".join(
            f"{o}: " + " | ".join(f"{c['name']}=[{scale}]" for c in state["criteria"])
            for o in state["options"]
        )
        return (
            f"{self.prompt_prefix}SCORING ROUND: Score each option for '{state['topic']}' "
            f"on a scale of {self.scale.low} (worst) to {self.scale.high} (best).\n\n"
            f"Options: {', '.join(state['options'])}\n"
            f"Criteria: {', '.join(self.criterion_tag(c) for c in state['criteria'])}\n\n"
            "Provide your scores in this exact format:\n"
            f"SCORES:\n{score_lines}\n\n"
            f"{self.scoring_guidance}"
        )

    def next_prompt(self, session: Session) -> NextPrompt:
        if self.is_finished(session.current_round_number):
            return self.completed()
        state = self.parse_state(session.state_payload)
        builders = (self.framing_prompt, self.discussion_prompt, self.deliberation_prompt, self.scoring_prompt)
        return NextPrompt(prompt_text=builders[session.current_round_number](state))

    # ─── Aggregation ────────────────────────────────────────────────────────

    def phase_heading(self, round_number: int) -> str:
        if 1 <= round_number <= len(self.phase_labels):
            label = self.phase_labels[round_number - 1]
        else:
            label = f"Phase {round_number}"
        return f"{self.label_prefix} {label}".strip()

    def synthesize_votes(self, state: dict[str, Any], session_round: SessionRound) -> str:
        """Deterministic fallback ballot seeded from the round id."""
        rng = random.Random(session_round.id.int % 997 + 1)
        low, high = self.synthetic_range
        ballot = {
            option: {c["name"]: rng.randint(low, high) for c in state["criteria"]}
            for option in state["options"]
        }
        voter = synthetic_voter_key(session_round)
        state["votes"][voter] = ballot
        state["syntheticVotes"] = True
        if voter not in state["syntheticVoters"]:
            state["syntheticVoters"].append(voter)
        logger.warning(
            "%s round %d: no parseable scores, using synthetic vote %s",
            self.display_name or self.method_type.value, session_round.round_number, voter,
        )
        return voter

    def compute(self, state: dict[str, Any], averages: dict[str, dict[str, float]]) -> McdaResult:
        mcda_input = McdaInput(
            options=state["options"],
            criteria=[McdaCriterion(c["name"], c["weight"], c["isBenefit"]) for c in state["criteria"]],
            scores=averages,
        )
        return self.algorithm(mcda_input)

    def score_round(self, state: dict[str, Any], session_round: SessionRound) -> str:
        options = state["options"]
        names = [c["name"] for c in state["criteria"]]
        extractor = ScoreExtractor(self.scale)
        for contribution in session_round.contributions:
            ballot = extractor.extract(contribution.raw_content, options, names)
            if ballot:
                state["votes"][str(contribution.agent_id)] = ballot

        if not state["votes"]:
            self.synthesize_votes(state, session_round)

        averages = average_votes(state["votes"], options, names, impute_missing=self.impute_missing)
        result = self.compute(state, averages)
        state["result"] = {
            "method": result.method,
            "ranking": result.ranking,
            "scores": result.scores,
            "averageScores": averages,
            "details": result.details,
        }
        logger.info("%s ranking: %s", result.method, " > ".join(result.ranking))
        if state["syntheticVotes"]:
            return f"{SYNTHETIC_NOTICE}\n\n{result.summary}"
        return result.summary

    def aggregate_round(self, session_round: SessionRound, current_state_payload: str) -> AggregationResult:
        state = self.parse_state(current_state_payload)
        n = session_round.round_number

        if n < self.max_rounds:
            lines = [f"- {c.raw_content.strip()}" for c in session_round.contributions]
            summary = f"{self.phase_heading(n)}:\n" + ("\n".join(lines) if lines else NO_CONTRIBUTIONS)
            state["discussions"].append(summary)
        else:
            summary = self.score_round(state, session_round)

        state["roundsCompleted"] = n
        return AggregationResult(
            summary_text=summary,
            updated_state_payload=dump_state(state),
            should_continue=not self.is_finished(n),
        )
