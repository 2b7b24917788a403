from enum import Enum


class ElementType(Enum):
    NONE = 0
    PYRO = 1      # 火
    HYDRO = 2     # 水
    ANEMO = 3     # 风
    ELECTRO = 4   # 雷
    DENDRO = 5    # 草
    CRYO = 6      # 冰
    GEO = 7       # 岩

    # 派生状态标记（只能出现在 status 字段）
    QUICKEN = 8   # 激化
    BURNING = 9   # 燃烧
    BLOOM = 10    # 绽放

    @property
    def is_base(self) -> bool:
        return 1 <= self.value <= 7

    @property
    def is_status(self) -> bool:
        return self in STATUS_ELEMENTS

    @classmethod
    def parse(cls, raw) -> "ElementType":
        """按名称（大小写不敏感）或整数值解析元素"""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, int):
            return cls(raw)
        text = str(raw).strip()
        if text.isdigit():
            return cls(int(text))
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"未知元素: {raw}") from None


# 候选元素的枚举顺序决定了最优选择的平局裁定，必须保持升序
BASE_ELEMENTS = tuple(e for e in ElementType if e.is_base)
STATUS_ELEMENTS = frozenset({
    ElementType.NONE,
    ElementType.QUICKEN,
    ElementType.BURNING,
    ElementType.BLOOM,
})


class ReactionType(Enum):
    NONE = "none"
    OVERLOAD = "overload"                # 超载
    SHATTER = "shatter"                  # 碎冰
    SWIRL = "swirl"                      # 扩散
    SUPERCONDUCT = "superconduct"        # 超导
    ELECTRO_CHARGED = "electro_charged"  # 感电
    MELT = "melt"                        # 融化
    VAPORIZE = "vaporize"                # 蒸发
    FREEZE = "freeze"                    # 冻结
    CRYSTALLIZE = "crystallize"          # 结晶
    BURNING = "burning"                  # 燃烧
    BLOOM = "bloom"                      # 绽放
    QUICKEN = "quicken"                  # 原激化
    AGGRAVATE = "aggravate"              # 超激化
    SPREAD = "spread"                    # 蔓激化


# 消耗型反应：结算后清空附着与状态
CONSUMING_REACTIONS = frozenset({
    ReactionType.OVERLOAD,
    ReactionType.VAPORIZE,
    ReactionType.MELT,
    ReactionType.FREEZE,
    ReactionType.SUPERCONDUCT,
    ReactionType.ELECTRO_CHARGED,
    ReactionType.SWIRL,
    ReactionType.CRYSTALLIZE,
})

# 持续状态型反应 -> 留下的状态标记
PERSISTENT_STATUS_REACTIONS = {
    ReactionType.BURNING: ElementType.BURNING,
    ReactionType.BLOOM: ElementType.BLOOM,
    ReactionType.QUICKEN: ElementType.QUICKEN,
}

# 脉冲型反应：叠加在激化状态上，可重复触发，不改变状态
PULSE_REACTIONS = frozenset({
    ReactionType.AGGRAVATE,
    ReactionType.SPREAD,
})


class AuraPhase(Enum):
    EMPTY = "empty"       # 无附着
    IMBUED = "imbued"     # 仅有附着
    CHARGED = "charged"   # 附着 + 派生状态
