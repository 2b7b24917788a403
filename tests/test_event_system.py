import unittest
from simulation.event_system import Event, EventBus, EventType, on_event


class TestEventBus(unittest.TestCase):
    def setUp(self):
        self.bus = EventBus(max_history=3)

    def test_priority_order(self):
        calls = []
        self.bus.subscribe(EventType.CUSTOM, lambda e: calls.append("low"), priority=0)
        self.bus.subscribe(EventType.CUSTOM, lambda e: calls.append("high"), priority=10)
        self.bus.emit_simple(EventType.CUSTOM)
        self.assertEqual(calls, ["high", "low"])

    def test_once_listener_removed(self):
        calls = []
        self.bus.subscribe(EventType.CUSTOM, lambda e: calls.append(1), once=True)
        self.bus.emit_simple(EventType.CUSTOM)
        self.bus.emit_simple(EventType.CUSTOM)
        self.assertEqual(calls, [1])
        self.assertEqual(self.bus.get_listener_count(EventType.CUSTOM), 0)

    def test_cancel_stops_propagation(self):
        calls = []
        self.bus.subscribe(EventType.CUSTOM, lambda e: e.cancel(), priority=5)
        self.bus.subscribe(EventType.CUSTOM, lambda e: calls.append(1))
        self.bus.emit(Event(EventType.CUSTOM, {}))
        self.assertEqual(calls, [])

    def test_global_listener_and_history(self):
        seen = []
        self.bus.subscribe_all(lambda e: seen.append(e.event_type))
        for _ in range(5):
            self.bus.emit_simple(EventType.TICK_START, tick=1)
        self.bus.emit_simple(EventType.REACTION_TRIGGERED, tick=2, reaction="melt")
        self.assertEqual(len(seen), 6)
        history = self.bus.get_event_history()
        self.assertEqual(len(history), 3)
        self.assertEqual(history[0].get("reaction"), "melt")
        self.assertEqual(history[0].tick, 2)

    def test_disable(self):
        calls = []
        self.bus.subscribe(EventType.CUSTOM, lambda e: calls.append(1))
        self.bus.disable()
        self.bus.emit_simple(EventType.CUSTOM)
        self.assertFalse(self.bus.is_enabled())
        self.assertEqual(calls, [])

    def test_decorator_and_unsubscribe(self):
        calls = []

        @on_event(self.bus, EventType.AURAS_CLEARED)
        def handler(event):
            calls.append(event.get("entity"))

        self.bus.emit_simple(EventType.AURAS_CLEARED, entity="slime")
        self.assertEqual(calls, ["slime"])

        listener = self.bus.subscribe(EventType.AURAS_CLEARED, handler)
        self.bus.unsubscribe(EventType.AURAS_CLEARED, listener)
        self.assertEqual(self.bus.get_listener_count(EventType.AURAS_CLEARED), 1)


if __name__ == '__main__':
    unittest.main()
