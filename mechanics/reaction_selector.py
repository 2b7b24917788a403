"""
最优反应搜索
单步：遍历7种基础元素，挑选评分最高的入射元素
多步：在有界深度内逐层搜索评分总和最高的施加序列，相同状态合并
"""
import logging
from typing import Dict, Iterable, NamedTuple, Optional, Tuple

from core.enums import BASE_ELEMENTS, ElementType, ReactionType
from core.errors import InvalidElementError
from mechanics.elemental_state import ElementalState, apply_reaction
from mechanics.reaction_evaluator import ReactionEvaluator
from mechanics.reaction_rules import resolve

logger = logging.getLogger(__name__)

_DEFAULT_EVALUATOR = ReactionEvaluator()


class Selection(NamedTuple):
    incoming: ElementType
    reaction: ReactionType
    score: float

    def to_dict(self):
        return {"incoming": self.incoming.name, "reaction": self.reaction.value, "score": self.score}


class SequencePlan(NamedTuple):
    elements: Tuple[ElementType, ...]
    reactions: Tuple[ReactionType, ...]
    total_score: float

    def to_dict(self):
        return {
            "elements": [e.name for e in self.elements],
            "reactions": [r.value for r in self.reactions],
            "total_score": self.total_score,
        }


def select_best(state: ElementalState, evaluator: Optional[ReactionEvaluator] = None) -> Selection:
    """
    在当前状态下挑选最优入射元素

    严格大于才更新，同分时保留枚举顺序靠前的元素（火 -> 岩）。
    附着为空时所有候选都是无反应，结果为 (PYRO, NONE, 0.0)。
    """
    evaluator = evaluator or _DEFAULT_EVALUATOR

    best_incoming = ElementType.NONE
    best_reaction = ReactionType.NONE
    max_score = -1.0

    for candidate in BASE_ELEMENTS:
        reaction = resolve(state.aura, candidate, state.status)
        value = evaluator.score(reaction)
        if value > max_score:
            max_score = value
            best_reaction = reaction
            best_incoming = candidate

    logger.debug("select_best %s/%s -> %s %s (%.1f)",
                 state.aura.name, state.status.name, best_incoming.name, best_reaction.value, max_score)
    return Selection(best_incoming, best_reaction, max_score)


def find_optimal_sequence(state: ElementalState,
                          available: Iterable[ElementType] = BASE_ELEMENTS,
                          max_depth: int = 3,
                          evaluator: Optional[ReactionEvaluator] = None) -> SequencePlan:
    """
    逐层广度优先搜索评分总和最高的元素施加序列

    Args:
        state: 起始状态
        available: 可用元素（按给定顺序展开）
        max_depth: 序列最大长度
        evaluator: 评分器

    只有产生反应的步骤才会继续展开。每一层中相同状态只保留总分最高的部分序列，
    因此搜索量随深度线性增长。同分时先到者胜，更短的序列优先。
    """
    if max_depth < 0:
        raise ValueError(f"max_depth 不能为负: {max_depth}")

    evaluator = evaluator or _DEFAULT_EVALUATOR
    available = tuple(available)
    for element in available:
        if not element.is_base:
            raise InvalidElementError(f"只能搜索基础元素: {element.name}")

    best = SequencePlan((), (), 0.0)
    frontier: Dict[ElementalState, SequencePlan] = {state: best}
    expanded = 0

    for _ in range(max_depth):
        next_frontier: Dict[ElementalState, SequencePlan] = {}
        for current, plan in frontier.items():
            for element in available:
                next_state, reaction = apply_reaction(current, element)
                if reaction == ReactionType.NONE:
                    continue
                expanded += 1
                total = plan.total_score + evaluator.score(reaction)
                known = next_frontier.get(next_state)
                if known is None or total > known.total_score:
                    next_frontier[next_state] = SequencePlan(
                        plan.elements + (element,), plan.reactions + (reaction,), total)

        for plan in next_frontier.values():
            if plan.total_score > best.total_score:
                best = plan
        if not next_frontier:
            break
        frontier = next_frontier

    logger.debug("find_optimal_sequence 展开 %d 个节点, 最优 %s", expanded, best.to_dict())
    return best
