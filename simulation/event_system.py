"""
事件驱动系统
反应引擎通过事件总线把结果交给外部协作者（特效、提示、统计面板）
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from collections import defaultdict
from enum import Enum


class EventType(Enum):
    """事件类型枚举"""
    # 模拟生命周期
    SIMULATION_START = "simulation_start"
    SIMULATION_END = "simulation_end"
    TICK_START = "tick_start"
    TICK_END = "tick_end"

    # 实体
    ENTITY_SPAWNED = "entity_spawned"    # 史莱姆生成/重生
    ENTITY_MOVED = "entity_moved"        # 前进一个工位
    MACHINE_ENTERED = "machine_entered"  # 进入机器区域

    # 元素反应
    ELEMENT_APPLIED = "element_applied"                      # 施加元素
    REACTION_TRIGGERED = "reaction_triggered"                # 反应触发（特效播放点）
    AURA_CHANGED = "aura_changed"                            # 附着/状态变化
    OPTIMAL_REACTION_SELECTED = "optimal_reaction_selected"  # 自动选择最优反应
    AURAS_CLEARED = "auras_cleared"                          # 清空附着

    # 自定义事件
    CUSTOM = "custom"


@dataclass
class Event:
    """事件对象"""
    event_type: EventType
    data: Dict[str, Any]
    source: Optional[Any] = None
    target: Optional[Any] = None
    tick: int = 0
    cancelled: bool = False

    def cancel(self):
        """取消事件，后续监听器不再执行"""
        self.cancelled = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


class EventListener:
    """事件监听器"""

    def __init__(self, callback: Callable[[Event], None],
                 priority: int = 0, once: bool = False):
        """
        Args:
            callback: 回调函数
            priority: 优先级（数值越大越先执行）
            once: 是否只触发一次
        """
        self.callback = callback
        self.priority = priority
        self.once = once
        self.executed_count = 0

    def execute(self, event: Event):
        self.callback(event)
        self.executed_count += 1

    def should_remove(self) -> bool:
        return self.once and self.executed_count > 0


class EventBus:
    """事件总线"""

    def __init__(self, max_history: int = 100):
        self._listeners: Dict[EventType, List[EventListener]] = defaultdict(list)
        self._global_listeners: List[EventListener] = []
        self._event_history: List[Event] = []
        self._max_history = max_history
        self._enabled = True

    def subscribe(self, event_type: EventType,
                  callback: Callable[[Event], None],
                  priority: int = 0, once: bool = False) -> EventListener:
        """
        订阅事件

        Returns:
            EventListener: 监听器对象（可用于取消订阅）
        """
        listener = EventListener(callback, priority, once)
        self._listeners[event_type].append(listener)
        self._listeners[event_type].sort(key=lambda x: x.priority, reverse=True)
        return listener

    def subscribe_all(self, callback: Callable[[Event], None],
                      priority: int = 0) -> EventListener:
        """订阅所有事件（全局监听器）"""
        listener = EventListener(callback, priority)
        self._global_listeners.append(listener)
        self._global_listeners.sort(key=lambda x: x.priority, reverse=True)
        return listener

    def unsubscribe(self, event_type: EventType, listener: EventListener):
        if listener in self._listeners.get(event_type, []):
            self._listeners[event_type].remove(listener)

    def emit(self, event: Event):
        if not self._enabled:
            return

        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history.pop(0)

        for listener in list(self._global_listeners):
            if event.cancelled:
                break
            listener.execute(event)

        for listener in list(self._listeners.get(event.event_type, [])):
            if event.cancelled:
                break
            listener.execute(event)
            if listener.should_remove():
                self._listeners[event.event_type].remove(listener)

    def emit_simple(self, event_type: EventType, tick: int = 0, **kwargs) -> Event:
        """快捷方式：以关键字参数作为事件数据发布"""
        event = Event(event_type=event_type, data=kwargs, tick=tick)
        self.emit(event)
        return event

    def clear_listeners(self, event_type: Optional[EventType] = None):
        if event_type is None:
            self._listeners.clear()
            self._global_listeners.clear()
        elif event_type in self._listeners:
            self._listeners[event_type].clear()

    def get_listener_count(self, event_type: Optional[EventType] = None) -> int:
        if event_type is None:
            return sum(len(listeners) for listeners in self._listeners.values()) + len(self._global_listeners)
        return len(self._listeners.get(event_type, []))

    def get_event_history(self, event_type: Optional[EventType] = None,
                          limit: int = 10) -> List[Event]:
        """获取事件历史（最新的在前）"""
        if event_type is None:
            return self._event_history[-limit:][::-1]

        filtered = [e for e in self._event_history if e.event_type == event_type]
        return filtered[-limit:][::-1]

    def enable(self):
        self._enabled = True

    def disable(self):
        self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def reset(self):
        self.clear_listeners()
        self._event_history.clear()


def on_event(event_bus: EventBus, event_type: EventType, priority: int = 0):
    """
    事件监听装饰器

    Usage:
        @on_event(engine.event_bus, EventType.REACTION_TRIGGERED)
        def play_vfx(event):
            print(f"播放特效: {event.get('reaction').value}")
    """
    def decorator(func: Callable[[Event], None]):
        event_bus.subscribe(event_type, func, priority)
        return func
    return decorator
