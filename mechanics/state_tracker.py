import logging
from typing import Callable, Dict, List, NamedTuple, Optional

from core.enums import ElementType, ReactionType
from core.errors import InvalidElementError, NotFoundError
from mechanics.elemental_state import EMPTY_STATE, ElementalState, apply_reaction
from mechanics.reaction_evaluator import ReactionEvaluator
from mechanics.reaction_selector import Selection, select_best
from simulation.event_system import EventBus, EventType


class ApplyResult(NamedTuple):
    before: ElementalState
    after: ElementalState
    reaction: ReactionType

    def to_dict(self):
        return {
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
            "reaction": self.reaction.value,
        }


class AutoReactResult(NamedTuple):
    selection: Selection
    applied: ApplyResult

    def to_dict(self):
        return {"selection": self.selection.to_dict(), "applied": self.applied.to_dict()}


class ElementalStateTracker:
    """
    按实体维护元素状态，是状态变更的唯一入口

    协作者全部通过构造参数注入:
        event_bus: 发布施加/反应/状态变化事件（特效协作者订阅 REACTION_TRIGGERED）
        statistics: ReactionStatistics，可选
        evaluator: 评分器，默认使用固定评分表
        clock: 返回当前tick的函数，用于事件与统计的时间戳
    """

    def __init__(self, event_bus: Optional[EventBus] = None, statistics=None,
                 evaluator: Optional[ReactionEvaluator] = None,
                 clock: Optional[Callable[[], int]] = None,
                 logger: Optional[logging.Logger] = None):
        self.event_bus = event_bus
        self.statistics = statistics
        self.evaluator = evaluator or ReactionEvaluator()
        self.clock = clock or (lambda: 0)
        self.logger = logger or logging.getLogger(__name__)
        self._states: Dict[str, ElementalState] = {}

    # --- 实体登记 ---

    def track(self, entity_id: str) -> ElementalState:
        """登记实体；已登记则保持原状态"""
        if entity_id not in self._states:
            self._states[entity_id] = EMPTY_STATE
            self.logger.debug("登记实体 %s", entity_id)
        return self._states[entity_id]

    def untrack(self, entity_id: str):
        self._require(entity_id)
        del self._states[entity_id]

    def is_tracked(self, entity_id: str) -> bool:
        return entity_id in self._states

    def entity_ids(self) -> List[str]:
        return list(self._states)

    def get_state(self, entity_id: str) -> ElementalState:
        return self._require(entity_id)

    def _require(self, entity_id: str) -> ElementalState:
        try:
            return self._states[entity_id]
        except KeyError:
            raise NotFoundError("实体", entity_id) from None

    # --- 状态变更 ---

    def apply_element(self, entity_id: str, incoming: ElementType, source: str = "manual") -> ApplyResult:
        """
        对实体施加元素并按反应结果更新状态

        Returns:
            ApplyResult(施加前状态, 施加后状态, 触发的反应)
        """
        before = self._require(entity_id)
        if incoming != ElementType.NONE and not incoming.is_base:
            raise InvalidElementError(f"状态标记不能作为施加元素: {incoming.name}")

        after, reaction = apply_reaction(before, incoming)
        self._states[entity_id] = after
        result = ApplyResult(before, after, reaction)

        value = self.evaluator.score(reaction)
        if reaction != ReactionType.NONE:
            self.logger.info(f"[{entity_id}] {before.aura.name} + {incoming.name} -> 【{reaction.value}】 (评分 {value:.1f})")
        else:
            self.logger.debug(f"[{entity_id}] 施加 {incoming.name} 附着")

        if self.statistics is not None:
            self.statistics.record_application(self.clock(), entity_id, incoming, reaction, value, source)

        self._publish_apply(entity_id, incoming, result, value)
        return result

    def select_best(self, entity_id: str) -> Selection:
        return select_best(self._require(entity_id), self.evaluator)

    def auto_react(self, entity_id: str) -> AutoReactResult:
        """挑选最优入射元素并立即施加"""
        selection = self.select_best(entity_id)
        self.logger.info(f"[{entity_id}] 最优选择: {selection.incoming.name} -> {selection.reaction.value} (评分 {selection.score:.1f})")
        self._emit(EventType.OPTIMAL_REACTION_SELECTED, entity=entity_id,
                   incoming=selection.incoming, reaction=selection.reaction, score=selection.score)
        applied = self.apply_element(entity_id, selection.incoming, source="optimal")
        return AutoReactResult(selection, applied)

    def clear_auras(self, entity_id: str) -> ElementalState:
        """无条件清空附着与状态，不计算反应"""
        before = self._require(entity_id)
        self._states[entity_id] = EMPTY_STATE
        if self.statistics is not None:
            self.statistics.record_clear(entity_id)
        self._emit(EventType.AURAS_CLEARED, entity=entity_id, before=before)
        if before != EMPTY_STATE:
            self._emit(EventType.AURA_CHANGED, entity=entity_id, before=before, after=EMPTY_STATE)
        return EMPTY_STATE

    # --- 事件 ---

    def _emit(self, event_type: EventType, **data):
        if self.event_bus is not None:
            self.event_bus.emit_simple(event_type, tick=self.clock(), **data)

    def _publish_apply(self, entity_id: str, incoming: ElementType, result: ApplyResult, value: float):
        self._emit(EventType.ELEMENT_APPLIED, entity=entity_id, incoming=incoming,
                   reaction=result.reaction, before=result.before, after=result.after)
        if result.reaction != ReactionType.NONE:
            self._emit(EventType.REACTION_TRIGGERED, entity=entity_id, incoming=incoming,
                       reaction=result.reaction, score=value)
        if result.before != result.after:
            self._emit(EventType.AURA_CHANGED, entity=entity_id,
                       before=result.before, after=result.after)
