from typing import Dict, Mapping, Optional

from core.enums import ReactionType
from core.errors import ConfigError

# 反应收益评分（越高越优先）
REACTION_SCORES = {
    ReactionType.MELT: 9.0,
    ReactionType.VAPORIZE: 8.5,
    ReactionType.AGGRAVATE: 8.0,
    ReactionType.SPREAD: 8.0,
    ReactionType.FREEZE: 7.5,
    ReactionType.OVERLOAD: 7.0,
    ReactionType.ELECTRO_CHARGED: 6.5,
    ReactionType.SWIRL: 6.0,
    ReactionType.QUICKEN: 6.0,
    ReactionType.SUPERCONDUCT: 5.0,
    ReactionType.BURNING: 4.5,
    ReactionType.SHATTER: 4.0,
    ReactionType.CRYSTALLIZE: 3.0,
    ReactionType.NONE: 0.0,
}

# 表中未列出的反应（如绽放）
DEFAULT_SCORE = 1.0


def score(reaction: ReactionType) -> float:
    """固定评分表"""
    return REACTION_SCORES.get(reaction, DEFAULT_SCORE)


class ReactionEvaluator:
    """可替换评分表的评估器，用于加载配置中调校过的数值"""

    def __init__(self, scores: Optional[Mapping] = None, default_score: float = DEFAULT_SCORE):
        self.scores: Dict[ReactionType, float] = dict(REACTION_SCORES)
        if scores:
            for key, value in scores.items():
                try:
                    reaction = key if isinstance(key, ReactionType) else ReactionType(str(key).lower())
                    self.scores[reaction] = float(value)
                except (TypeError, ValueError):
                    raise ConfigError(f"非法反应评分: {key}={value!r}") from None
        # 无反应恒为0
        self.scores[ReactionType.NONE] = 0.0
        self.default_score = default_score

    def score(self, reaction: ReactionType) -> float:
        return self.scores.get(reaction, self.default_score)

    @classmethod
    def from_config(cls, config) -> "ReactionEvaluator":
        return cls(config.reaction_scores, config.default_reaction_score)
