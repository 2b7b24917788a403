"""
统一异常定义
核心纯函数对枚举输入总是有定义，这里的异常只用于调用方误用
"""


class ReactionLabError(Exception):
    """所有自定义异常的基类"""
    pass


class NotFoundError(ReactionLabError, KeyError):
    """未登记的实体 / 预设 / 机器"""

    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} 不存在: {key}")

    def __str__(self):
        # KeyError 默认会给消息加引号
        return self.args[0]


class InvalidStateError(ReactionLabError, ValueError):
    """元素状态违反不变量（status 只能是 NONE/QUICKEN/BURNING/BLOOM）"""
    pass


class InvalidElementError(ReactionLabError, ValueError):
    """派生状态标记不能作为施加元素"""
    pass


class ConfigError(ReactionLabError):
    """配置文件内容无法解析"""
    pass
