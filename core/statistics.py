"""
反应统计分析系统
记录每次元素施加及其触发的反应，用于报告与面板绘图
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List
from collections import defaultdict
from core.enums import ElementType, ReactionType


@dataclass
class ApplicationRecord:
    """单次元素施加记录"""
    tick: int
    entity: str
    incoming: ElementType
    reaction: ReactionType
    score: float
    source: str = "manual"  # input / optimal / manual


@dataclass
class EntityStats:
    """实体统计数据"""
    name: str
    applications: int = 0
    total_score: float = 0.0
    reaction_count: Dict[ReactionType, int] = field(default_factory=dict)
    clears: int = 0


class ReactionStatistics:
    """反应统计收集器"""

    def __init__(self, tick_rate: int = 10):
        self.tick_rate = tick_rate  # 每秒tick数，用于换算时间
        self.records: List[ApplicationRecord] = []
        self.entity_stats: Dict[str, EntityStats] = {}
        self.duration = 0  # tick

    def _stats_for(self, entity: str) -> EntityStats:
        if entity not in self.entity_stats:
            self.entity_stats[entity] = EntityStats(name=entity)
        return self.entity_stats[entity]

    def record_application(self, tick: int, entity: str, incoming: ElementType,
                           reaction: ReactionType, score: float, source: str = "manual"):
        """记录一次元素施加"""
        self.records.append(ApplicationRecord(
            tick=tick,
            entity=entity,
            incoming=incoming,
            reaction=reaction,
            score=score,
            source=source,
        ))

        stats = self._stats_for(entity)
        stats.applications += 1
        stats.total_score += score
        if reaction != ReactionType.NONE:
            stats.reaction_count[reaction] = stats.reaction_count.get(reaction, 0) + 1

    def record_clear(self, entity: str):
        self._stats_for(entity).clears += 1

    def update_duration(self, tick: int):
        self.duration = max(self.duration, tick)

    def total_score(self) -> float:
        return sum(r.score for r in self.records)

    def get_reaction_summary(self) -> Dict[ReactionType, int]:
        """获取反应触发汇总（不含无反应）"""
        summary = defaultdict(int)
        for record in self.records:
            if record.reaction != ReactionType.NONE:
                summary[record.reaction] += 1
        return dict(summary)

    def get_entity_summary(self, entity: str) -> Dict[str, Any]:
        if entity not in self.entity_stats:
            return {}
        stats = self.entity_stats[entity]
        return {
            "name": stats.name,
            "applications": stats.applications,
            "total_score": stats.total_score,
            "reactions": {r.value: c for r, c in stats.reaction_count.items()},
            "clears": stats.clears,
        }

    def to_rows(self) -> List[Dict[str, Any]]:
        """扁平化记录，便于构造 DataFrame"""
        return [
            {
                "tick": r.tick,
                "time": r.tick / self.tick_rate,
                "entity": r.entity,
                "incoming": r.incoming.name,
                "reaction": r.reaction.value,
                "score": r.score,
                "source": r.source,
            }
            for r in self.records
        ]

    def generate_report(self) -> str:
        """生成文本格式的统计报告"""
        lines = []
        lines.append("=" * 60)
        lines.append("元素反应统计报告".center(60))
        lines.append("=" * 60)

        lines.append(f"\n模拟时长: {self.duration / self.tick_rate:.1f}秒 ({self.duration} ticks)")
        lines.append(f"元素施加次数: {len(self.records)}")
        lines.append(f"反应总评分: {self.total_score():.1f}")

        if self.entity_stats:
            lines.append("\n" + "-" * 60)
            lines.append("实体统计".center(60))
            lines.append("-" * 60)

        for stats in sorted(self.entity_stats.values(), key=lambda x: x.total_score, reverse=True):
            lines.append(f"\n【{stats.name}】")
            lines.append(f"  施加次数: {stats.applications}")
            lines.append(f"  总评分: {stats.total_score:.1f}")
            if stats.clears:
                lines.append(f"  清空次数: {stats.clears}")
            for reaction, count in sorted(stats.reaction_count.items(), key=lambda x: x[1], reverse=True):
                lines.append(f"    - {reaction.value}: {count}次")

        reaction_summary = self.get_reaction_summary()
        if reaction_summary:
            lines.append("\n" + "-" * 60)
            lines.append("元素反应统计".center(60))
            lines.append("-" * 60)
            for reaction_type, count in sorted(reaction_summary.items(), key=lambda x: x[1], reverse=True):
                lines.append(f"  {reaction_type.value}: {count}次")

        lines.append("\n" + "=" * 60)
        return "\n".join(lines)

    def reset(self):
        """重置所有统计数据"""
        self.records.clear()
        self.entity_stats.clear()
        self.duration = 0
