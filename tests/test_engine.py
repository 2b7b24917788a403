import unittest
from core.config_manager import ConfigManager, get_config
from core.enums import ElementType, ReactionType
from core.errors import ConfigError, NotFoundError
from mechanics.elemental_state import ElementalState
from simulation.engine import ReactionEngine
from simulation.event_system import EventType
from simulation.machines import InputMachine, OptimalMachine
from simulation.presets import PRESETS, get_preset, load_preset
from simulation.snapshot_engine import SnapshotEngine

E = ElementType
R = ReactionType


class TestReactionEngine(unittest.TestCase):
    def setUp(self):
        ConfigManager._instance = None
        self.config = get_config()
        self.config.log_level = "WARNING"
        self.sim = ReactionEngine(self.config)

    def tearDown(self):
        ConfigManager._instance = None

    def test_default_machines(self):
        self.assertIsInstance(self.sim.get_machine(1), InputMachine)
        self.assertIsInstance(self.sim.get_machine(2), OptimalMachine)
        self.assertIs(self.sim.machine_at(4), self.sim.get_machine(1))
        self.assertIsNone(self.sim.machine_at(5))
        with self.assertRaises(NotFoundError):
            self.sim.get_machine(3)

    def test_machine_outside_belt_rejected(self):
        self.config.machine_layout = {"input": 4, "optimal": 12}
        with self.assertRaises(ValueError):
            ReactionEngine(self.config)

    def test_machines_sharing_a_station_rejected(self):
        self.config.machine_layout = {"input": 6, "optimal": 6}
        with self.assertRaises(ValueError):
            ReactionEngine(self.config)

    def test_invalid_score_config_rejected(self):
        self.config.reaction_scores = {"ElectroCharged": 3.0}
        with self.assertRaises(ConfigError):
            ReactionEngine(self.config)

    def test_statistics_follow_tick_rate(self):
        self.config.tick_rate = 20
        sim = ReactionEngine(self.config)
        sim.spawn("slime", script=["pyro"])
        sim.run(max_seconds=5)
        rows = sim.statistics.to_rows()
        self.assertEqual([row["time"] for row in rows], [9 / 20, 14 / 20])
        self.assertIn("模拟时长: 0.7秒", sim.statistics.generate_report())

    def test_pyro_slime_melts_at_optimal_machine(self):
        self.sim.spawn("slime", "火史莱姆", ["pyro"])
        self.sim.run(max_seconds=5)

        slime = self.sim.get_entity("slime")
        self.assertTrue(slime.finished)
        self.assertEqual(slime.position, 9)
        self.assertEqual(self.sim.tick, 14)
        self.assertEqual(self.sim.tracker.get_state("slime"), ElementalState())

        records = self.sim.statistics.records
        self.assertEqual(len(records), 2)
        self.assertEqual((records[0].tick, records[0].incoming, records[0].reaction, records[0].source),
                         (9, E.PYRO, R.NONE, "input"))
        self.assertEqual((records[1].tick, records[1].incoming, records[1].reaction, records[1].source),
                         (14, E.CRYO, R.MELT, "optimal"))
        self.assertEqual(self.sim.statistics.total_score(), 9.0)

    def test_skipped_slime_has_no_reaction(self):
        self.sim.spawn("slime", script=["skip"])
        self.sim.run(max_seconds=5)
        self.assertTrue(self.sim.get_entity("slime").finished)
        self.assertEqual(self.sim.statistics.records, [])
        self.assertEqual(self.sim.tracker.get_state("slime"), ElementalState())

    def test_dendro_slime_ends_quickened(self):
        self.sim.spawn("slime", script=["dendro"])
        self.sim.run(max_seconds=5)
        self.assertEqual(self.sim.tracker.get_state("slime"), ElementalState(E.DENDRO, E.QUICKEN))

    def test_event_flow(self):
        self.sim.spawn("slime", script=["hydro"])
        self.sim.run(max_seconds=5)
        history = self.sim.event_bus.get_event_history(EventType.REACTION_TRIGGERED)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].get("reaction"), R.VAPORIZE)
        self.assertEqual(history[0].get("incoming"), E.PYRO)
        entered = self.sim.event_bus.get_event_history(EventType.MACHINE_ENTERED)
        self.assertEqual([e.get("machine_id") for e in reversed(entered)], [1, 2])

    def test_respawn_clears_auras(self):
        self.sim.spawn("slime", script=["pyro"])
        self.sim.tracker.apply_element("slime", E.DENDRO)
        slime = self.sim.respawn("slime")
        self.assertEqual(slime.laps, 1)
        self.assertEqual(slime.position, 0)
        self.assertEqual(self.sim.tracker.get_state("slime"), ElementalState())

    def test_unknown_entity(self):
        with self.assertRaises(NotFoundError):
            self.sim.get_entity("ghost")

    def test_statistics_disabled(self):
        self.config.enable_statistics = False
        sim = ReactionEngine(self.config)
        sim.spawn("slime", script=["pyro"])
        sim.run(max_seconds=5)
        self.assertIsNone(sim.statistics)
        self.assertEqual(sim.tracker.get_state("slime"), ElementalState())


class TestSnapshotEngine(unittest.TestCase):
    def setUp(self):
        ConfigManager._instance = None
        get_config().log_level = "WARNING"
        self.sim = SnapshotEngine()

    def tearDown(self):
        ConfigManager._instance = None

    def test_history_and_reaction_rows(self):
        load_preset(self.sim, "多史莱姆混合")
        self.sim.run_with_snapshots(5)

        self.assertEqual(self.sim.history[0]["tick"], 0)
        last = self.sim.history[-1]["entities"]
        self.assertEqual(set(last), {"slime-hydro", "slime-electro", "slime-empty"})
        self.assertTrue(all(ent["finished"] for ent in last.values()))

        rows = self.sim.reaction_rows()
        self.assertEqual({r["entity"]: r["reaction"] for r in rows},
                         {"slime-hydro": "vaporize", "slime-electro": "overload"})
        self.assertEqual(self.sim.reaction_rows("slime-empty"), [])
        self.assertTrue(any(log["type"] == "reaction" for log in self.sim.flat_logs()))


class TestPresets(unittest.TestCase):
    def test_presets_have_slimes(self):
        for name, preset in PRESETS.items():
            self.assertTrue(preset["slimes"], name)

    def test_unknown_preset(self):
        with self.assertRaises(NotFoundError):
            get_preset("不存在")


if __name__ == '__main__':
    unittest.main()
