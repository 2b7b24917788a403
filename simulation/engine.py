import logging
import sys
from typing import Dict, Iterable, List, Optional

from core.config_manager import ConfigManager
from core.errors import NotFoundError
from core.statistics import ReactionStatistics
from entities.slime import Slime
from mechanics.reaction_evaluator import ReactionEvaluator
from mechanics.state_tracker import ElementalStateTracker
from simulation.event_system import EventBus, EventType
from simulation.machines import InputMachine, Machine, OptimalMachine

# 避免重复配置
_LOGGING_CONFIGURED = False


class ReactionEngine:
    """传送带流水线：按tick推进史莱姆，经过机器时施加元素"""

    def __init__(self, config: Optional[ConfigManager] = None):
        self.tick = 0        # 1 tick = 0.1s
        self.entities: List[Slime] = []

        self.config = config or ConfigManager.get_instance()
        self._setup_logging()

        self.statistics = ReactionStatistics(self.config.tick_rate) if self.config.enable_statistics else None
        self.event_bus = EventBus(max_history=self.config.event_history_size)
        if not self.config.enable_event_system:
            self.event_bus.disable()

        self.tracker = ElementalStateTracker(
            event_bus=self.event_bus,
            statistics=self.statistics,
            evaluator=ReactionEvaluator.from_config(self.config),
            clock=lambda: self.tick,
            logger=self.logger,
        )
        self.machines: Dict[int, Machine] = self._build_machines()

    def _setup_logging(self):
        global _LOGGING_CONFIGURED
        self.logger = logging.getLogger("ReactionLab")

        if not _LOGGING_CONFIGURED:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter('%(message)s'))  # 时间戳由 log() 自行添加
            self.logger.addHandler(handler)
            _LOGGING_CONFIGURED = True

        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR
        }
        self.logger.setLevel(level_map.get(str(self.config.log_level).upper(), logging.INFO))

    def _build_machines(self) -> Dict[int, Machine]:
        layout = self.config.machine_layout
        machines = {}
        if "input" in layout:
            machines[1] = InputMachine(1, int(layout["input"]), delay_ticks=self.config.input_delay_ticks)
        if "optimal" in layout:
            machines[2] = OptimalMachine(2, int(layout["optimal"]))
        occupied = {}
        for machine in machines.values():
            if not 0 < machine.position < self.config.belt_length:
                raise ValueError(f"{machine.name} 位置越界: {machine.position} (传送带长度 {self.config.belt_length})")
            if machine.position in occupied:
                raise ValueError(f"{machine.name} 与 {occupied[machine.position].name} 位于同一工位: {machine.position}")
            occupied[machine.position] = machine
        return machines

    def log(self, message: str, level: str = "INFO"):
        """
        统一日志接口
        Args:
            message: 日志内容
            level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
        """
        seconds = self.tick / self.config.tick_rate
        formatted_msg = f"[{int(seconds // 60):02}:{seconds % 60:04.1f}] {message}"
        self.logger.log(getattr(logging, level.upper(), logging.INFO), formatted_msg)

    # --- 机器 ---

    def machine_at(self, position: int) -> Optional[Machine]:
        for machine in self.machines.values():
            if machine.position == position:
                return machine
        return None

    def get_machine(self, machine_id: int) -> Machine:
        if machine_id not in self.machines:
            raise NotFoundError("机器", machine_id)
        return self.machines[machine_id]

    # --- 实体 ---

    def spawn(self, entity_id: str, name: Optional[str] = None,
              script: Optional[Iterable] = None) -> Slime:
        """在起点生成史莱姆并登记到 tracker"""
        slime = Slime(entity_id, name, script)
        self.entities.append(slime)
        self.tracker.track(entity_id)
        self.event_bus.emit_simple(EventType.ENTITY_SPAWNED, tick=self.tick, entity=entity_id)
        self.log(f"[{slime.name}] 生成于起点")
        return slime

    def get_entity(self, entity_id: str) -> Slime:
        for slime in self.entities:
            if slime.entity_id == entity_id:
                return slime
        raise NotFoundError("实体", entity_id)

    def respawn(self, entity_id: str) -> Slime:
        """回到起点并清空附着"""
        slime = self.get_entity(entity_id)
        slime.reset_position()
        self.tracker.clear_auras(entity_id)
        self.event_bus.emit_simple(EventType.ENTITY_SPAWNED, tick=self.tick, entity=entity_id, respawn=True)
        self.log(f"[{slime.name}] 重生 (第{slime.laps}次)")
        return slime

    def on_belt_end(self, slime: Slime):
        if self.config.respawn_on_finish:
            self.respawn(slime.entity_id)
        else:
            slime.finish()
            self.log(f"[{slime.name}] 到达传送带终点")

    def all_finished(self) -> bool:
        return all(slime.finished for slime in self.entities)

    # --- 主循环 ---

    def step(self):
        self.tick += 1
        if self.statistics is not None:
            self.statistics.update_duration(self.tick)
        self.event_bus.emit_simple(EventType.TICK_START, tick=self.tick)
        for slime in list(self.entities):
            slime.on_tick(self)
        self.event_bus.emit_simple(EventType.TICK_END, tick=self.tick)

    def run(self, max_seconds=30):
        max_ticks = int(max_seconds * self.config.tick_rate)
        self.log(f"=== 模拟开始 (时长: {max_seconds}s) ===")
        self.event_bus.emit_simple(EventType.SIMULATION_START, tick=self.tick)

        for _ in range(max_ticks):
            if self.entities and self.all_finished():
                break
            self.step()

        self.event_bus.emit_simple(EventType.SIMULATION_END, tick=self.tick)
        self.log("=== 模拟结束 ===")
