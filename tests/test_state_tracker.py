import unittest
from unittest.mock import MagicMock
from core.enums import AuraPhase, CONSUMING_REACTIONS, ElementType, ReactionType
from core.errors import InvalidElementError, InvalidStateError, NotFoundError
from core.statistics import ReactionStatistics
from mechanics.elemental_state import ElementalState, apply_reaction
from mechanics.state_tracker import ElementalStateTracker
from simulation.event_system import EventBus, EventType

E = ElementType
R = ReactionType


class TestElementalState(unittest.TestCase):
    def test_phases(self):
        self.assertEqual(ElementalState().phase, AuraPhase.EMPTY)
        self.assertEqual(ElementalState(E.PYRO).phase, AuraPhase.IMBUED)
        self.assertEqual(ElementalState(E.DENDRO, E.QUICKEN).phase, AuraPhase.CHARGED)

    def test_status_must_be_status_marker(self):
        with self.assertRaises(InvalidStateError):
            ElementalState(E.PYRO, E.HYDRO)
        with self.assertRaises(InvalidStateError):
            ElementalState(E.BLOOM, E.NONE)

    def test_consuming_reactions_clear_state(self):
        cases = [
            (E.PYRO, E.ELECTRO), (E.PYRO, E.HYDRO), (E.PYRO, E.CRYO), (E.HYDRO, E.CRYO),
            (E.CRYO, E.ELECTRO), (E.HYDRO, E.ELECTRO), (E.PYRO, E.ANEMO), (E.DENDRO, E.GEO),
        ]
        seen = set()
        for aura, incoming in cases:
            new_state, reaction = apply_reaction(ElementalState(aura), incoming)
            seen.add(reaction)
            self.assertEqual(new_state, ElementalState())
        self.assertEqual(seen, set(CONSUMING_REACTIONS))

    def test_persistent_reactions_leave_status(self):
        self.assertEqual(apply_reaction(ElementalState(E.DENDRO), E.PYRO),
                         (ElementalState(E.DENDRO, E.BURNING), R.BURNING))
        self.assertEqual(apply_reaction(ElementalState(E.HYDRO), E.DENDRO),
                         (ElementalState(E.DENDRO, E.BLOOM), R.BLOOM))
        self.assertEqual(apply_reaction(ElementalState(E.ELECTRO), E.DENDRO),
                         (ElementalState(E.DENDRO, E.QUICKEN), R.QUICKEN))

    def test_no_reaction_overwrites_aura(self):
        new_state, reaction = apply_reaction(ElementalState(E.DENDRO, E.BURNING), E.ANEMO)
        self.assertEqual(reaction, R.NONE)
        self.assertEqual(new_state, ElementalState(E.ANEMO))


class TestElementalStateTracker(unittest.TestCase):
    def setUp(self):
        self.event_bus = EventBus()
        self.statistics = ReactionStatistics()
        self.tracker = ElementalStateTracker(event_bus=self.event_bus, statistics=self.statistics)
        self.tracker.track("slime")

    def test_initial_state(self):
        self.assertEqual(self.tracker.get_state("slime"), ElementalState())

    def test_scenario_apply_to_empty(self):
        result = self.tracker.apply_element("slime", E.PYRO)
        self.assertEqual(result.reaction, R.NONE)
        self.assertEqual(result.before, ElementalState())
        self.assertEqual(result.after, ElementalState(E.PYRO))

    def test_scenario_vaporize(self):
        self.tracker.apply_element("slime", E.PYRO)
        result = self.tracker.apply_element("slime", E.HYDRO)
        self.assertEqual(result.reaction, R.VAPORIZE)
        self.assertEqual(self.tracker.get_state("slime"), ElementalState())

    def test_scenario_quicken_then_aggravate(self):
        self.tracker.apply_element("slime", E.DENDRO)
        result = self.tracker.apply_element("slime", E.ELECTRO)
        self.assertEqual(result.reaction, R.QUICKEN)
        self.assertEqual(result.after, ElementalState(E.DENDRO, E.QUICKEN))

        result = self.tracker.apply_element("slime", E.ELECTRO)
        self.assertEqual(result.reaction, R.AGGRAVATE)
        self.assertEqual(result.after, ElementalState(E.DENDRO, E.QUICKEN))
        self.assertEqual(result.before, result.after)

    def test_scenario_clear_then_select(self):
        self.tracker.apply_element("slime", E.DENDRO)
        self.tracker.apply_element("slime", E.PYRO)
        self.assertEqual(self.tracker.get_state("slime"), ElementalState(E.DENDRO, E.BURNING))

        self.tracker.clear_auras("slime")
        self.assertEqual(self.tracker.get_state("slime"), ElementalState())
        self.assertEqual(self.tracker.select_best("slime"), (E.PYRO, R.NONE, 0.0))

    def test_auto_react(self):
        self.tracker.apply_element("slime", E.PYRO)
        result = self.tracker.auto_react("slime")
        self.assertEqual(result.selection, (E.CRYO, R.MELT, 9.0))
        self.assertEqual(result.applied.reaction, R.MELT)
        self.assertEqual(self.tracker.get_state("slime"), ElementalState())

    def test_unknown_entity(self):
        with self.assertRaises(NotFoundError):
            self.tracker.apply_element("ghost", E.PYRO)
        with self.assertRaises(NotFoundError):
            self.tracker.select_best("ghost")
        with self.assertRaises(NotFoundError):
            self.tracker.clear_auras("ghost")
        with self.assertRaises(KeyError):
            self.tracker.untrack("ghost")

    def test_track_is_idempotent(self):
        self.tracker.apply_element("slime", E.CRYO)
        self.tracker.track("slime")
        self.assertEqual(self.tracker.get_state("slime"), ElementalState(E.CRYO))

    def test_untrack(self):
        self.tracker.untrack("slime")
        self.assertFalse(self.tracker.is_tracked("slime"))
        self.assertEqual(self.tracker.entity_ids(), [])

    def test_status_marker_rejected_as_incoming(self):
        with self.assertRaises(InvalidElementError):
            self.tracker.apply_element("slime", E.QUICKEN)
        self.assertEqual(self.tracker.get_state("slime"), ElementalState())

    def test_entities_are_independent(self):
        self.tracker.track("other")
        self.tracker.apply_element("slime", E.PYRO)
        self.assertEqual(self.tracker.get_state("other"), ElementalState())

    def test_events_published(self):
        vfx = MagicMock()
        self.event_bus.subscribe(EventType.REACTION_TRIGGERED, vfx)
        self.tracker.apply_element("slime", E.PYRO)
        vfx.assert_not_called()

        self.tracker.apply_element("slime", E.ELECTRO)
        vfx.assert_called_once()
        event = vfx.call_args[0][0]
        self.assertEqual(event.get("reaction"), R.OVERLOAD)
        self.assertEqual(event.get("entity"), "slime")

        changes = self.event_bus.get_event_history(EventType.AURA_CHANGED)
        self.assertEqual(len(changes), 2)
        self.assertEqual(changes[0].get("after"), ElementalState())

    def test_statistics_recorded(self):
        self.tracker.apply_element("slime", E.PYRO)
        self.tracker.auto_react("slime")
        self.assertEqual(len(self.statistics.records), 2)
        self.assertEqual(self.statistics.records[1].source, "optimal")
        self.assertEqual(self.statistics.get_reaction_summary(), {R.MELT: 1})
        self.assertAlmostEqual(self.statistics.total_score(), 9.0)


if __name__ == '__main__':
    unittest.main()
