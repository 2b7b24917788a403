from collections import deque
from typing import Iterable, Optional

from core.enums import ElementType
from simulation.event_system import EventType


class Slime:
    """传送带上的史莱姆，按工位前进，元素状态由引擎的 tracker 托管"""

    def __init__(self, entity_id: str, name: Optional[str] = None,
                 element_script: Optional[Iterable] = None):
        self.entity_id = entity_id
        self.name = name or entity_id
        self.script = deque(self._parse_script(element_script or []))

        self.position = 0
        self.can_move = True
        self.finished = False
        self.hold_ticks = 0   # 在机器内停留的剩余tick
        self.laps = 0         # 重生次数

    @staticmethod
    def _parse_script(script):
        # "skip" / None 表示在1号机不做选择直接放行
        parsed = []
        for entry in script:
            if entry is None or str(entry).strip().lower() in ("skip", "none", ""):
                parsed.append(None)
            else:
                parsed.append(ElementType.parse(entry))
        return parsed

    def next_choice(self) -> Optional[ElementType]:
        """取出下一次按钮选择，脚本耗尽时返回 None"""
        if not self.script:
            return None
        return self.script.popleft()

    def stop(self):
        self.can_move = False

    def resume(self):
        self.can_move = True
        self.hold_ticks = 0

    def finish(self):
        self.can_move = False
        self.finished = True

    def reset_position(self):
        self.position = 0
        self.can_move = True
        self.finished = False
        self.hold_ticks = 0
        self.laps += 1

    def on_tick(self, engine):
        if self.finished:
            return

        if not self.can_move:
            machine = engine.machine_at(self.position)
            if machine is not None:
                machine.on_hold(self, engine)
            return

        self.position += 1
        engine.event_bus.emit_simple(EventType.ENTITY_MOVED, tick=engine.tick,
                                     entity=self.entity_id, position=self.position)

        machine = engine.machine_at(self.position)
        if machine is not None:
            engine.event_bus.emit_simple(EventType.MACHINE_ENTERED, tick=engine.tick,
                                         entity=self.entity_id, machine_id=machine.machine_id)
            machine.on_enter(self, engine)

        if not self.finished and self.can_move and self.position >= engine.config.belt_length - 1:
            engine.on_belt_end(self)
