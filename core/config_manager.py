"""
统一配置管理系统
集中管理反应评分、流水线布局与日志等配置，支持从 JSON / YAML 加载
"""
import json
import yaml
from pathlib import Path
from typing import Dict, Any

from core.enums import ReactionType
from core.errors import ConfigError
from mechanics.reaction_evaluator import DEFAULT_SCORE, REACTION_SCORES, ReactionEvaluator


class ConfigManager:
    """单例配置管理器"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        # Tick系统配置
        self.tick_rate = 10  # 每秒tick数 (1 tick = 0.1s)

        # 反应评分（键为 ReactionType.value，便于序列化）
        self.reaction_scores = {
            reaction.value: value for reaction, value in REACTION_SCORES.items()
        }
        self.default_reaction_score = DEFAULT_SCORE

        # 多步最优序列搜索深度
        self.max_sequence_depth = 3
        self.max_sequence_depth_limit = 8  # 对外接口允许的最大搜索深度

        # 传送带布局
        self.belt_length = 12  # 工位数量，最后一个工位为终点
        self.machine_layout = {
            "input": 4,     # 1号机：等待玩家选择元素
            "optimal": 9,   # 2号机：自动施加最优元素
        }
        self.respawn_on_finish = False  # 到达终点后是否回到起点并清空附着
        self.input_delay_ticks = 5      # 1号机等待玩家选择的tick数

        # 日志配置
        self.log_level = "INFO"  # DEBUG, INFO, WARNING, ERROR

        # 功能开关
        self.enable_statistics = True
        self.enable_event_system = True
        self.event_history_size = 100

        self._initialized = True

    def load_from_dict(self, config_dict: Dict[str, Any]):
        """从字典加载配置，未知键忽略"""
        if not isinstance(config_dict, dict):
            raise ConfigError(f"配置内容必须是字典，实际为 {type(config_dict).__name__}")
        for key, value in config_dict.items():
            if not hasattr(self, key):
                continue
            if key == "reaction_scores":
                if not isinstance(value, dict):
                    raise ConfigError("reaction_scores 必须是字典")
                # 部分覆盖：未列出的反应沿用当前评分
                value = {**self.reaction_scores, **{str(k).lower(): v for k, v in value.items()}}
            setattr(self, key, value)

    def load_from_json(self, file_path: str):
        """从JSON文件加载配置"""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"配置文件不存在: {file_path}")

        with open(path, 'r', encoding='utf-8') as f:
            try:
                config_dict = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"JSON解析失败: {file_path}: {e}") from e
        self.load_from_dict(config_dict)

    def load_from_yaml(self, file_path: str):
        """从YAML文件加载配置"""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"配置文件不存在: {file_path}")

        with open(path, 'r', encoding='utf-8') as f:
            try:
                config_dict = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"YAML解析失败: {file_path}: {e}") from e
        self.load_from_dict(config_dict or {})

    def save_to_json(self, file_path: str):
        """保存配置到JSON文件"""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        """导出为字典"""
        return {
            key: value
            for key, value in self.__dict__.items()
            if not key.startswith('_')
        }

    def get_reaction_score(self, reaction: ReactionType) -> float:
        """按当前配置查询反应评分"""
        return ReactionEvaluator.from_config(self).score(reaction)

    def reset_to_defaults(self):
        """重置为默认配置"""
        self._initialized = False
        self.__init__()

    @classmethod
    def get_instance(cls) -> 'ConfigManager':
        """获取单例实例"""
        return cls()


# 提供全局访问点
def get_config() -> ConfigManager:
    """获取配置管理器实例"""
    return ConfigManager.get_instance()
