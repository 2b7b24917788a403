from dataclasses import dataclass
from typing import Tuple

from core.enums import (
    CONSUMING_REACTIONS,
    PERSISTENT_STATUS_REACTIONS,
    PULSE_REACTIONS,
    STATUS_ELEMENTS,
    AuraPhase,
    ElementType,
    ReactionType,
)
from core.errors import InvalidStateError
from mechanics.reaction_rules import resolve


@dataclass(frozen=True)
class ElementalState:
    """单个实体的元素状态（附着 + 派生状态）"""
    aura: ElementType = ElementType.NONE
    status: ElementType = ElementType.NONE

    def __post_init__(self):
        if self.status not in STATUS_ELEMENTS:
            raise InvalidStateError(f"非法状态标记: {self.status.name}")
        if self.aura.is_status and self.aura != ElementType.NONE:
            raise InvalidStateError(f"状态标记不能作为附着: {self.aura.name}")

    @property
    def phase(self) -> AuraPhase:
        if self.aura == ElementType.NONE and self.status == ElementType.NONE:
            return AuraPhase.EMPTY
        if self.status == ElementType.NONE:
            return AuraPhase.IMBUED
        return AuraPhase.CHARGED

    def to_dict(self):
        return {
            "aura": self.aura.name,
            "status": self.status.name,
            "phase": self.phase.value,
        }


EMPTY_STATE = ElementalState()


def apply_reaction(state: ElementalState, incoming: ElementType) -> Tuple[ElementalState, ReactionType]:
    """
    施加元素后的状态迁移（纯函数）

    Returns:
        (新状态, 触发的反应)
    """
    reaction = resolve(state.aura, incoming, state.status)

    if reaction in CONSUMING_REACTIONS:
        return EMPTY_STATE, reaction
    if reaction in PERSISTENT_STATUS_REACTIONS:
        # 燃烧/绽放/激化都由草参与，草保留为附着
        return ElementalState(ElementType.DENDRO, PERSISTENT_STATUS_REACTIONS[reaction]), reaction
    if reaction in PULSE_REACTIONS:
        return state, reaction
    # 无反应：入射元素直接覆盖附着
    return ElementalState(incoming, ElementType.NONE), reaction
