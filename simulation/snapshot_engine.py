"""
Snapshot Engine - 用于捕获流水线快照的引擎扩展
"""
from collections import defaultdict
from typing import List, Optional

from simulation.engine import ReactionEngine
from simulation.event_system import Event, EventType


class SnapshotEngine(ReactionEngine):
    """扩展ReactionEngine,逐tick记录实体位置与元素状态"""

    def __init__(self, config=None):
        super().__init__(config)
        self.history = []
        self.logs = []
        self.logs_by_tick = defaultdict(list)
        self.reactions_by_tick = defaultdict(list)
        self.event_bus.subscribe(EventType.REACTION_TRIGGERED, self._on_reaction)

    def _on_reaction(self, event: Event):
        self.reactions_by_tick[event.tick].append({
            "entity": event.get("entity"),
            "incoming": event.get("incoming").name,
            "reaction": event.get("reaction").value,
            "score": event.get("score"),
        })

    def log(self, message, level="INFO"):
        """同时写入日志与前端可用的日志列表"""
        super().log(message, level)
        seconds = self.tick / self.config.tick_rate
        timestamp = f"[{int(seconds // 60):02}:{seconds % 60:04.1f}]"

        log_type = "info"
        if "【" in message:
            log_type = "reaction"
        elif "选择" in message:
            log_type = "input"
        elif "进入" in message or "到达" in message:
            log_type = "machine"

        self.logs.append({"time": timestamp, "message": message, "type": log_type})
        self.logs_by_tick[self.tick].append(f"{timestamp} {message}")

    def capture_snapshot(self):
        """捕获当前流水线状态快照"""
        frame_data = {
            "time_str": f"{self.tick / self.config.tick_rate:.1f}s",
            "tick": self.tick,
            "reactions": list(self.reactions_by_tick.get(self.tick, [])),
            "entities": {}
        }
        for slime in self.entities:
            state = self.tracker.get_state(slime.entity_id)
            machine = self.machine_at(slime.position)
            frame_data["entities"][slime.entity_id] = {
                "name": slime.name,
                "position": slime.position,
                "machine": machine.name if machine and not slime.can_move else None,
                "can_move": slime.can_move,
                "finished": slime.finished,
                **state.to_dict(),
            }
        self.history.append(frame_data)

    def run_with_snapshots(self, max_seconds):
        """运行模拟并捕获快照"""
        max_ticks = int(max_seconds * self.config.tick_rate)
        self.event_bus.emit_simple(EventType.SIMULATION_START, tick=self.tick)
        self.capture_snapshot()
        for _ in range(max_ticks):
            if self.entities and self.all_finished():
                break
            self.step()
            self.capture_snapshot()
        self.event_bus.emit_simple(EventType.SIMULATION_END, tick=self.tick)

    def flat_logs(self) -> List[dict]:
        return [
            {"time": str(log["time"]), "message": str(log["message"]), "type": str(log["type"])}
            for log in self.logs
        ]

    def reaction_rows(self, entity_id: Optional[str] = None) -> List[dict]:
        rows = []
        for tick in sorted(self.reactions_by_tick):
            for item in self.reactions_by_tick[tick]:
                if entity_id is None or item["entity"] == entity_id:
                    rows.append({"tick": tick, "time": tick / self.config.tick_rate, **item})
        return rows
