"""Delphi: anonymous expert assessment refined over successive rounds."""

from decision_council.methods.base import Phase, PhasedDiscussionMethod
from decision_council.models import MethodType

_REFINEMENT = Phase(
    label="Refinement",
    prompt=(
        "Round {round} - Refinement: Based on the group's previous responses on {topic}:\n\n"
        "{summary}\n\n"
        "Please refine your position. Do you agree or disagree? Why?"
    ),
    heading="Round {round} Summary:",
)


class DelphiMethod(PhasedDiscussionMethod):
    method_type = MethodType.DELPHI
    display_name = "Delphi"
    min_members = 2
    completion_reason = "Delphi consensus reached after 3 rounds."
    contribution_format = "Expert: {content}"
    contribution_separator = "\n\n"
    phases = (
        Phase(
            label="Initial Assessment",
            prompt=(
                "Round 1 - Initial Assessment: Please provide your expert opinion on: {topic}. "
                "Focus on key factors, risks, and recommendations."
            ),
            heading="Round {round} Summary:",
        ),
        _REFINEMENT,
        _REFINEMENT,
    )
