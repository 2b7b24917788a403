"""
元素反应规则表
(现有附着, 入射元素, 派生状态) -> 反应类型，纯函数，对全部枚举输入有定义
"""
from types import MappingProxyType
from typing import Dict, Tuple

from core.enums import BASE_ELEMENTS, ElementType, ReactionType

E = ElementType
R = ReactionType

# 行 = 现有附着，列 = 入射元素
_BASE_ROWS = {
    E.PYRO: {E.HYDRO: R.VAPORIZE, E.CRYO: R.MELT, E.ELECTRO: R.OVERLOAD, E.DENDRO: R.BURNING},
    E.HYDRO: {E.PYRO: R.VAPORIZE, E.CRYO: R.FREEZE, E.ELECTRO: R.ELECTRO_CHARGED, E.DENDRO: R.BLOOM},
    E.CRYO: {E.PYRO: R.MELT, E.HYDRO: R.FREEZE, E.ELECTRO: R.SUPERCONDUCT},
    E.ELECTRO: {E.PYRO: R.OVERLOAD, E.HYDRO: R.ELECTRO_CHARGED, E.CRYO: R.SUPERCONDUCT, E.DENDRO: R.QUICKEN},
    E.DENDRO: {E.PYRO: R.BURNING, E.HYDRO: R.BLOOM, E.ELECTRO: R.QUICKEN},
}

REACTION_TABLE = MappingProxyType({
    (current, incoming): reaction
    for current, row in _BASE_ROWS.items()
    for incoming, reaction in row.items()
})

# 风元素可扩散的附着
SWIRL_AURAS = frozenset({E.PYRO, E.HYDRO, E.ELECTRO, E.CRYO})
# 岩元素可结晶的附着（包括草）
CRYSTALLIZE_AURAS = frozenset({E.PYRO, E.HYDRO, E.ELECTRO, E.CRYO, E.DENDRO})


def resolve(current: ElementType, incoming: ElementType,
            status: ElementType = ElementType.NONE) -> ReactionType:
    """
    计算入射元素与现有附着/状态产生的反应

    优先级（先命中先返回）:
        1. 激化状态: 雷 -> 超激化, 草 -> 蔓激化
        2. 基础两两反应表
        3. 风 + 火/水/雷/冰 -> 扩散
        4. 岩 + 火/水/雷/冰/草 -> 结晶
        5. 其余 -> 无反应
    """
    if status == E.QUICKEN:
        if incoming == E.ELECTRO:
            return R.AGGRAVATE
        if incoming == E.DENDRO:
            return R.SPREAD

    reaction = REACTION_TABLE.get((current, incoming))
    if reaction is not None:
        return reaction

    if incoming == E.ANEMO and current in SWIRL_AURAS:
        return R.SWIRL
    if incoming == E.GEO and current in CRYSTALLIZE_AURAS:
        return R.CRYSTALLIZE

    return R.NONE


def reaction_matrix(status: ElementType = ElementType.NONE) -> Dict[Tuple[ElementType, ElementType], ReactionType]:
    """基础元素两两组合的完整反应矩阵（用于展示）"""
    return {
        (current, incoming): resolve(current, incoming, status)
        for current in BASE_ELEMENTS
        for incoming in BASE_ELEMENTS
    }
