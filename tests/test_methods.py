"""Tests for the decision methods in decision_council/methods/."""

import json

import pytest

from config.config_loader import AppConfig, CriterionConfig, MethodDefaults
from decision_council.errors import UnknownMethodError
from decision_council.methods.base import NO_CONTRIBUTIONS
from decision_council.methods.cost_benefit import extract_verdict
from decision_council.methods.majority_voting import NO_WINNER, MajorityVotingMethod, extract_vote, tally_votes
from decision_council.methods.matrix import BUILTIN_DEFAULTS, SYNTHETIC_NOTICE
from decision_council.methods.registry import MethodRegistry, build_registry
from decision_council.methods.topsis import TopsisMethod
from decision_council.models import MethodType
from tests.conftest import make_council, make_round, session_at

ALL_METHODS = [m.value for m in MethodType]

SCORES_REPLY = (
    "SCORES:\n"
    "Status Quo: Feasibility=9 | Cost=2 | Impact=2 | Risk=2\n"
    "Incremental Change: Feasibility=8 | Cost=3 | Impact=7 | Risk=3\n"
    "Full Transformation: Feasibility=3 | Cost=9 | Impact=9 | Risk=9\n"
)


def walk(method, council, issue, reply_for_round):
    """Run every round of a method against its own state; return (payload, results)."""
    payload = method.initialize_state(council, issue)
    results = []
    for n in range(1, method.max_rounds + 1):
        prompt = method.next_prompt(session_at(n - 1, payload))
        assert not prompt.is_complete
        assert prompt.prompt_text
        result = method.aggregate_round(make_round(reply_for_round(n), n), payload)
        payload = result.updated_state_payload
        results.append(result)
    return payload, results


# ─── Registry ────────────────────────────────────────────────────────────────


def test_registry_has_every_method(registry):
    assert len(registry) == len(MethodType)
    for method_type in MethodType:
        assert registry.get(method_type).method_type is method_type
        assert method_type.value in registry


def test_registry_lookup_by_string(registry):
    assert registry.get("topsis").display_name == "TOPSIS"


def test_registry_unknown_method():
    with pytest.raises(UnknownMethodError):
        build_registry().get("six_sigma")
    with pytest.raises(UnknownMethodError):
        MethodRegistry().get(MethodType.DELPHI)
    assert "six_sigma" not in MethodRegistry()


def test_build_registry_uses_configured_defaults(sample_app_config: AppConfig, sample_issue, sample_council):
    sample_app_config.method_defaults = MethodDefaults(
        options=["Keep", "Replace"],
        criteria=[CriterionConfig("Quality", 1.0)],
    )
    sample_app_config.method_overrides = {
        "ahp": MethodDefaults(options=["X", "Y", "Z"], criteria=[CriterionConfig("Value", 1.0)]),
    }
    registry = build_registry(sample_app_config)

    def options_of(method_type):
        payload = registry.get(method_type).initialize_state(sample_council, sample_issue)
        return json.loads(payload)["options"]

    assert options_of(MethodType.TOPSIS) == ["Keep", "Replace"]
    assert options_of(MethodType.AHP) == ["X", "Y", "Z"]
    assert options_of(MethodType.MAJORITY_VOTING) == ["Keep", "Replace"]


# ─── Lifecycle shared by all methods ─────────────────────────────────────────


@pytest.mark.parametrize("method_name", ALL_METHODS)
def test_next_prompt_at_max_rounds_reports_completion(registry, method_name):
    method = registry.get(method_name)
    prompt = method.next_prompt(session_at(method.max_rounds))
    assert prompt.is_complete
    assert prompt.completion_reason == method.completion_reason
    assert method.next_prompt(session_at(method.max_rounds + 3)).is_complete


@pytest.mark.parametrize("method_name", ALL_METHODS)
def test_first_prompt_mentions_topic(registry, sample_issue, method_name):
    method = registry.get(method_name)
    council = make_council(sample_issue, method=MethodType(method_name))
    payload = method.initialize_state(council, sample_issue)
    prompt = method.next_prompt(session_at(0, payload))
    assert sample_issue.title in prompt.prompt_text


@pytest.mark.parametrize("method_name", ALL_METHODS)
def test_full_walk_continues_until_last_round(registry, sample_issue, method_name):
    method = registry.get(method_name)
    council = make_council(sample_issue, method=MethodType(method_name))
    payload, results = walk(method, council, sample_issue, lambda n: [f"Reply for round {n}"])
    assert [r.should_continue for r in results] == [True] * (method.max_rounds - 1) + [False]
    assert all(r.summary_text.strip() for r in results)
    assert json.loads(payload)["roundsCompleted"] == method.max_rounds
    assert method.next_prompt(session_at(method.max_rounds, payload)).is_complete


@pytest.mark.parametrize("method_name", ALL_METHODS)
@pytest.mark.parametrize("payload", ["{}", "not json", "[1, 2, 3]", "", '{"topic": 42, "options": "A"}'])
def test_unreadable_state_is_tolerated(registry, method_name, payload):
    method = registry.get(method_name)
    prompt = method.next_prompt(session_at(0, payload))
    assert prompt.prompt_text
    result = method.aggregate_round(make_round(["Some reply"]), payload)
    assert json.loads(result.updated_state_payload)["roundsCompleted"] == 1


@pytest.mark.parametrize(
    "method_type, minimum",
    [
        (MethodType.DELPHI, 2),
        (MethodType.NGT, 2),
        (MethodType.RAPID, 2),
        (MethodType.MAJORITY_VOTING, 2),
        (MethodType.BRAINSTORMING, 1),
        (MethodType.TOPSIS, 1),
    ],
)
def test_validate_council_minimum_members(registry, sample_issue, method_type, minimum):
    method = registry.get(method_type)
    assert method.min_members == minimum
    assert method.validate_council(make_council(sample_issue, method=method_type, member_count=minimum))
    assert not method.validate_council(make_council(sample_issue, method=method_type, member_count=minimum - 1))


# ─── Narrative methods ───────────────────────────────────────────────────────


def test_delphi_without_topic_uses_placeholder(registry):
    prompt = registry.get(MethodType.DELPHI).next_prompt(session_at(0, "{}"))
    assert "the topic" in prompt.prompt_text
    assert prompt.prompt_text.startswith("Round 1 - Initial Assessment")


def test_delphi_refinement_carries_topic_and_summary(registry, sample_issue, sample_council):
    method = registry.get(MethodType.DELPHI)
    payload = method.initialize_state(sample_council, sample_issue)
    result = method.aggregate_round(make_round(["Go ahead.", "Wait a quarter."]), payload)
    assert result.summary_text == "Round 1 Summary:\nExpert: Go ahead.\n\nExpert: Wait a quarter."

    prompt = method.next_prompt(session_at(1, result.updated_state_payload)).prompt_text
    assert prompt.startswith("Round 2 - Refinement")
    assert sample_issue.title in prompt
    assert "Expert: Wait a quarter." in prompt


def test_round_without_contributions(registry, sample_council, sample_issue):
    method = registry.get(MethodType.DELPHI)
    payload = method.initialize_state(sample_council, sample_issue)
    result = method.aggregate_round(make_round([]), payload)
    assert result.summary_text == f"Round 1 Summary:\n{NO_CONTRIBUTIONS}"
    assert result.should_continue


@pytest.mark.parametrize(
    "method_type, placeholder",
    [
        (MethodType.COST_BENEFIT_ANALYSIS, "the proposal"),
        (MethodType.RAPID, "the decision"),
        (MethodType.OODA_LOOP, "the situation"),
        (MethodType.NGT, "the topic"),
    ],
)
def test_topic_placeholders(registry, method_type, placeholder):
    prompt = registry.get(method_type).next_prompt(session_at(0, "{}"))
    assert placeholder in prompt.prompt_text


def test_ngt_carries_ideas_forward(registry, sample_council, sample_issue):
    method = registry.get(MethodType.NGT)
    payload = method.initialize_state(sample_council, sample_issue)
    result = method.aggregate_round(make_round(["Use managed k8s", "Stay on VMs"]), payload)
    state = json.loads(result.updated_state_payload)
    assert state["lastPhase"] == "Silent Generation"
    assert state["ideasSummary"].startswith("NGT Phase 1 - Silent Generation:")

    prompt = method.next_prompt(session_at(1, result.updated_state_payload)).prompt_text
    assert prompt.startswith("NGT Phase 2 - Round-Robin Sharing")
    assert "- Use managed k8s" in prompt


def test_brainstorming_collects_ideas(registry, sample_council, sample_issue):
    method = registry.get(MethodType.BRAINSTORMING)
    payload = method.initialize_state(sample_council, sample_issue)
    result = method.aggregate_round(make_round(["Idea one", "  ", "Idea two"]), payload)
    assert json.loads(result.updated_state_payload)["ideas"] == ["Idea one", "Idea two"]
    assert not result.should_continue


def test_consensus_joins_with_pipes(registry, sample_council, sample_issue):
    method = registry.get(MethodType.CONSENSUS_BUILDING)
    payload = method.initialize_state(sample_council, sample_issue)
    result = method.aggregate_round(make_round(["Agree", "Mostly agree"]), payload)
    assert result.summary_text == "Consensus Round 1:\nAgree | Mostly agree"


def test_adkar_records_each_phase(registry, sample_council, sample_issue):
    method = registry.get(MethodType.ADKAR)
    payload, _ = walk(method, sample_council, sample_issue, lambda n: [f"phase {n} notes"])
    phases = json.loads(payload)["phases"]
    assert list(phases) == ["Awareness", "Desire", "Knowledge", "Ability", "Reinforcement"]
    assert phases["Knowledge"] == ["phase 3 notes"]


def test_adkar_prompt_shows_progress(registry):
    prompt = registry.get(MethodType.ADKAR).next_prompt(session_at(2, "{}")).prompt_text
    assert prompt.startswith("ADKAR Phase 3/5 - Knowledge: ")


def test_six_hats_order(registry, sample_council, sample_issue):
    method = registry.get(MethodType.SIX_THINKING_HATS)
    assert method.max_rounds == 6
    prompt = method.next_prompt(session_at(2, "{}")).prompt_text
    assert prompt.startswith("Round 3 of 6 - Black Hat (Caution perspective)")

    payload, results = walk(method, sample_council, sample_issue, lambda n: [f"hat {n}"])
    assert results[-1].summary_text == "Blue Hat insights:\nhat 6"
    assert list(json.loads(payload)["hats"])[0] == "White Hat"


@pytest.mark.parametrize(
    "text, verdict",
    [
        ("Overall: PROCEED WITH CONDITIONS (budget cap).", "PROCEED WITH CONDITIONS"),
        ("My recommendation is DO NOT PROCEED.", "DO NOT PROCEED"),
        ("PROCEED.", "PROCEED"),
        ("I would proceed cautiously.", None),
    ],
)
def test_extract_verdict(text, verdict):
    assert extract_verdict(text) == verdict


def test_cost_benefit_verdict(registry, sample_council, sample_issue):
    method = registry.get(MethodType.COST_BENEFIT_ANALYSIS)
    replies = {
        1: ["Licence fees", "Migration effort"],
        2: ["Faster deploys"],
        3: ["PROCEED WITH CONDITIONS: hire an SRE", "PROCEED WITH CONDITIONS", "DO NOT PROCEED"],
    }
    payload, results = walk(method, sample_council, sample_issue, replies.get)
    state = json.loads(payload)
    assert state["costs"].startswith("Cost Analysis:")
    assert state["benefits"] == "Benefit Analysis:\nFaster deploys"
    assert state["verdicts"] == {"PROCEED WITH CONDITIONS": 2, "DO NOT PROCEED": 1}
    assert state["verdict"] == "PROCEED WITH CONDITIONS"
    assert results[-1].summary_text.endswith("Recommendation: PROCEED WITH CONDITIONS")


def test_rapid_headings(registry, sample_council, sample_issue):
    method = registry.get(MethodType.RAPID)
    _, results = walk(method, sample_council, sample_issue, lambda n: ["ok"])
    assert [r.summary_text.splitlines()[0] for r in results] == [
        "RAPID R - Recommend:",
        "RAPID I - Input:",
        "RAPID A - Agree:",
        "RAPID D - Decide:",
    ]


# ─── Majority voting ─────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "text, vote",
    [
        ("I like it.\nVOTE: **Option B**.\nThanks", "Option B"),
        ("vote: [Option A]", "Option A"),
        ("Option C\nbecause it is cheaper", "Option C"),
        ("Die Straße ßß ist gut. VOTE: Alpha", "Alpha"),
        ("Größe zählt.\nvote: Übergang\nDanke", "Übergang"),
    ],
)
def test_extract_vote(text, vote):
    assert extract_vote(text) == vote


def test_tally_votes_is_case_insensitive_and_canonical():
    tally = tally_votes(["option a", "Option B", "OPTION A", ""], ["Option A", "Option B"])
    assert tally == [("Option A", 2), ("Option B", 1)]


def test_majority_voting_winner(sample_issue):
    method = MajorityVotingMethod(["Option A", "Option B"])
    council = make_council(sample_issue, method=MethodType.MAJORITY_VOTING, member_count=3)
    replies = {
        1: ["I favour A", "I favour B", "A for me"],
        2: ["VOTE: Option A", "vote: option a.", "VOTE: Option B"],
    }
    payload, results = walk(method, council, sample_issue, replies.get)
    state = json.loads(payload)
    assert state["tally"] == {"Option A": 2, "Option B": 1}
    assert state["winner"] == "Option A"
    assert results[-1].summary_text == "Vote Tally: Option A: 2 vote(s), Option B: 1 vote(s)\nWinner: Option A"


def test_majority_voting_prompt_lists_options(sample_issue):
    method = MajorityVotingMethod(["Option A", "Option B"])
    payload = method.initialize_state(make_council(sample_issue), sample_issue)
    prompt = method.next_prompt(session_at(1, payload)).prompt_text
    assert "VOTE: [your chosen option]" in prompt
    assert "The options under consideration are: Option A, Option B." in prompt


@pytest.mark.parametrize("votes", [["VOTE: A", "VOTE: B"], []])
def test_majority_voting_tie_or_no_votes(sample_issue, votes):
    method = MajorityVotingMethod()
    payload = method.initialize_state(make_council(sample_issue), sample_issue)
    result = method.aggregate_round(make_round(votes, round_number=2), payload)
    assert json.loads(result.updated_state_payload)["winner"] == NO_WINNER
    assert result.summary_text.endswith(f"Winner: {NO_WINNER}")


# ─── Matrix scoring methods ──────────────────────────────────────────────────

MATRIX = [
    MethodType.WEIGHTED_DELIBERATION,
    MethodType.AHP,
    MethodType.ELECTRE,
    MethodType.TOPSIS,
    MethodType.PROMETHEE,
    MethodType.GREY_THEORY,
]


@pytest.mark.parametrize("method_type", MATRIX)
def test_matrix_method_ranks_from_votes(registry, sample_council, sample_issue, method_type):
    method = registry.get(method_type)
    payload, results = walk(
        method, sample_council, sample_issue,
        lambda n: [SCORES_REPLY, SCORES_REPLY] if n == method.max_rounds else ["Discussing"],
    )
    state = json.loads(payload)
    result = state["result"]
    assert sorted(result["ranking"]) == sorted(BUILTIN_DEFAULTS.options)
    assert set(result["averageScores"]) == set(BUILTIN_DEFAULTS.options)
    assert not state["syntheticVotes"]
    assert len(state["votes"]) == 2
    assert len(state["discussions"]) == 3
    assert SYNTHETIC_NOTICE not in results[-1].summary_text


@pytest.mark.parametrize("method_type", MATRIX)
@pytest.mark.parametrize("replies", [[], ["I cannot score this."]])
def test_matrix_method_synthesizes_votes_when_none_parse(registry, sample_council, sample_issue,
                                                         method_type, replies):
    method = registry.get(method_type)
    payload = method.initialize_state(sample_council, sample_issue)
    session_round = make_round(replies, round_number=4)

    result = method.aggregate_round(session_round, payload)
    state = json.loads(result.updated_state_payload)
    assert result.summary_text.startswith(SYNTHETIC_NOTICE)
    assert state["syntheticVotes"] is True
    assert state["syntheticVoters"] == [f"synthetic-{str(session_round.id)[:8]}"]
    assert sorted(state["result"]["ranking"]) == sorted(BUILTIN_DEFAULTS.options)
    low, high = method.synthetic_range
    ballot = state["votes"][state["syntheticVoters"][0]]
    assert all(low <= v <= high for row in ballot.values() for v in row.values())

    # Same round, same state: same synthetic ballot.
    again = method.aggregate_round(session_round, payload)
    assert again.updated_state_payload == result.updated_state_payload


def test_ahp_leaves_blank_cells_out_but_others_impute(registry, sample_council, sample_issue):
    replies = ["Status Quo: Feasibility=8", "Incremental Change: Feasibility=2"]
    averages = {}
    for method_type in (MethodType.AHP, MethodType.TOPSIS):
        method = registry.get(method_type)
        payload = method.initialize_state(sample_council, sample_issue)
        result = method.aggregate_round(make_round(replies, round_number=4), payload)
        averages[method_type] = json.loads(result.updated_state_payload)["result"]["averageScores"]

    assert averages[MethodType.AHP]["Status Quo"]["Feasibility"] == pytest.approx(8.0)
    assert averages[MethodType.TOPSIS]["Status Quo"]["Feasibility"] == pytest.approx(6.5)
    # No voter scored Full Transformation at all.
    assert averages[MethodType.AHP]["Full Transformation"]["Feasibility"] == pytest.approx(5.0)


def test_matrix_prompts(registry, sample_council, sample_issue):
    topsis = registry.get(MethodType.TOPSIS)
    payload = topsis.initialize_state(sample_council, sample_issue)
    framing = topsis.next_prompt(session_at(0, payload)).prompt_text
    assert framing.startswith("TOPSIS MODERATOR ROUND")
    assert "Cost (25% | cost)" in framing
    assert "  1. Status Quo" in framing

    scoring = topsis.next_prompt(session_at(3, payload)).prompt_text
    assert "SCORES:\nStatus Quo: Feasibility=[0-10] | Cost=[0-10] | Impact=[0-10] | Risk=[0-10]" in scoring
    assert "Cost(25%,C)" in scoring

    ahp = registry.get(MethodType.AHP)
    ahp_scoring = ahp.next_prompt(session_at(3, ahp.initialize_state(sample_council, sample_issue))).prompt_text
    assert "Feasibility=[1-9]" in ahp_scoring

    wd = registry.get(MethodType.WEIGHTED_DELIBERATION)
    assert wd.next_prompt(session_at(0, "{}")).prompt_text.startswith("MODERATOR ROUND")


def test_matrix_discussion_headings(registry, sample_council, sample_issue):
    wd = registry.get(MethodType.WEIGHTED_DELIBERATION)
    payload = wd.initialize_state(sample_council, sample_issue)
    result = wd.aggregate_round(make_round(["Looks fine"], round_number=2), payload)
    assert result.summary_text == "Expert Discussion - Round 1:\n- Looks fine"

    grey = registry.get(MethodType.GREY_THEORY)
    result = grey.aggregate_round(make_round([], round_number=1), "{}")
    assert result.summary_text == f"Grey Theory Moderator Framing:\n{NO_CONTRIBUTIONS}"


def test_matrix_state_reseeds_unusable_options_and_criteria():
    method = TopsisMethod()
    state = method.parse_state(json.dumps({
        "options": ["Only one", "Only one"],
        "criteria": [{"name": "Speed", "weight": -1}],
        "votes": {"v1": {"Status Quo": {"Cost": "high", "Risk": 4}}, "v2": "junk"},
    }))
    assert state["options"] == BUILTIN_DEFAULTS.options
    assert [c["name"] for c in state["criteria"]] == [c.name for c in BUILTIN_DEFAULTS.criteria]
    assert state["votes"] == {"v1": {"Status Quo": {"Risk": 4}}}


def test_matrix_state_drops_bad_criteria_entries():
    method = TopsisMethod()
    state = method.parse_state(json.dumps({
        "options": ["A", "B"],
        "criteria": [
            {"name": "Speed", "weight": 2},
            {"name": "Speed", "weight": 3},
            {"name": "", "weight": 1},
            {"name": "Flag", "weight": True},
            {"name": "Cost", "weight": 1, "isBenefit": False},
        ],
    }))
    assert state["options"] == ["A", "B"]
    assert state["criteria"] == [
        {"name": "Speed", "weight": 2.0, "isBenefit": True},
        {"name": "Cost", "weight": 1.0, "isBenefit": False},
    ]


def test_matrix_method_custom_defaults(sample_council, sample_issue):
    method = TopsisMethod(MethodDefaults(options=["A", "B"], criteria=[CriterionConfig("Quality", 1.0)]))
    state = json.loads(method.initialize_state(sample_council, sample_issue))
    assert state["options"] == ["A", "B"]
    assert state["criteria"] == [{"name": "Quality", "weight": 1.0, "isBenefit": True}]
    assert state["topic"] == sample_issue.title


def test_matrix_method_unusable_defaults_fall_back_to_builtin(sample_council, sample_issue):
    method = TopsisMethod(MethodDefaults(
        options=["Only", "Only", "  "],
        criteria=[CriterionConfig("Cost", 0.0, False), CriterionConfig("Speed", 0.0)],
    ))
    payload = method.initialize_state(sample_council, sample_issue)
    state = json.loads(payload)
    assert state["options"] == BUILTIN_DEFAULTS.options
    assert [c["name"] for c in state["criteria"]] == [c.name for c in BUILTIN_DEFAULTS.criteria]

    result = method.aggregate_round(make_round(["No scores from me."], round_number=4), payload)
    ranking = json.loads(result.updated_state_payload)["result"]["ranking"]
    assert sorted(ranking) == sorted(BUILTIN_DEFAULTS.options)


def test_matrix_method_defaults_dedupe_criteria_and_keep_good_options(sample_council, sample_issue):
    method = TopsisMethod(MethodDefaults(
        options=["Keep", "Replace"],
        criteria=[CriterionConfig("Quality", 0.7), CriterionConfig("Quality", 0.3), CriterionConfig("Cost", 0.3, False)],
    ))
    state = json.loads(method.initialize_state(sample_council, sample_issue))
    assert state["options"] == ["Keep", "Replace"]
    assert state["criteria"] == [
        {"name": "Quality", "weight": 0.7, "isBenefit": True},
        {"name": "Cost", "weight": 0.3, "isBenefit": False},
    ]

    # Stale state with a single option reseeds from the configured options.
    reseeded = method.parse_state(json.dumps({"options": ["Keep"]}))
    assert reseeded["options"] == ["Keep", "Replace"]
