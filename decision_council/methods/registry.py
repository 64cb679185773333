"""Lookup of decision methods by MethodType."""

import logging

from config.config_loader import AppConfig
from decision_council.errors import UnknownMethodError
from decision_council.methods.adkar import AdkarMethod
from decision_council.methods.ahp import AhpMethod
from decision_council.methods.base import DecisionMethod
from decision_council.methods.brainstorming import BrainstormingMethod
from decision_council.methods.consensus import ConsensusMethod
from decision_council.methods.cost_benefit import CostBenefitMethod
from decision_council.methods.delphi import DelphiMethod
from decision_council.methods.electre import ElectreMethod
from decision_council.methods.grey_theory import GreyTheoryMethod
from decision_council.methods.majority_voting import MajorityVotingMethod
from decision_council.methods.ngt import NgtMethod
from decision_council.methods.ooda import OodaLoopMethod
from decision_council.methods.promethee import PrometheeMethod
from decision_council.methods.rapid import RapidMethod
from decision_council.methods.six_hats import SixThinkingHatsMethod
from decision_council.methods.topsis import TopsisMethod
from decision_council.methods.weighted_deliberation import WeightedDeliberationMethod
from decision_council.models import MethodType

logger = logging.getLogger(__name__)

MATRIX_METHODS = (
    WeightedDeliberationMethod,
    AhpMethod,
    ElectreMethod,
    TopsisMethod,
    PrometheeMethod,
    GreyTheoryMethod,
)

NARRATIVE_METHODS = (
    DelphiMethod,
    NgtMethod,
    BrainstormingMethod,
    ConsensusMethod,
    AdkarMethod,
    SixThinkingHatsMethod,
    CostBenefitMethod,
    RapidMethod,
    OodaLoopMethod,
)


class MethodRegistry:
    """Holds one instance per MethodType. Instances are stateless and shared across sessions."""

    def __init__(self, methods: list[DecisionMethod] | None = None) -> None:
        self._methods: dict[MethodType, DecisionMethod] = {}
        for method in methods or []:
            self.register(method)

    def register(self, method: DecisionMethod) -> None:
        if method.method_type in self._methods:
            logger.debug("Replacing registered method %s", method.method_type.value)
        self._methods[method.method_type] = method

    def get(self, method_type: MethodType | str) -> DecisionMethod:
        """Resolve by enum or by its string value.

        Raises:
            UnknownMethodError: If nothing is registered for the type.
        """
        try:
            key = MethodType(method_type)
        except ValueError:
            raise UnknownMethodError(f"Unknown decision method: {method_type!r}") from None
        try:
            return self._methods[key]
        except KeyError:
            raise UnknownMethodError(f"No decision method registered for {key.value!r}") from None

    def __contains__(self, method_type: object) -> bool:
        try:
            return MethodType(method_type) in self._methods
        except ValueError:
            return False

    def __iter__(self):
        return iter(self._methods.values())

    def __len__(self) -> int:
        return len(self._methods)


def build_registry(config: AppConfig | None = None) -> MethodRegistry:
    """Registry with every built-in method; matrix methods take their options and criteria
    from ``config`` when given."""
    registry = MethodRegistry()
    for cls in NARRATIVE_METHODS:
        registry.register(cls())
    for cls in MATRIX_METHODS:
        defaults = config.defaults_for(cls.method_type.value) if config else None
        registry.register(cls(defaults))
    options = config.method_defaults.options if config else []
    registry.register(MajorityVotingMethod(options))
    return registry
