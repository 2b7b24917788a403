import sys
import os
import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import List, Optional

# Add project root to path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from core.config_manager import get_config
from core.enums import BASE_ELEMENTS, ElementType, ReactionType
from core.errors import NotFoundError
from mechanics.elemental_state import ElementalState
from mechanics.reaction_evaluator import ReactionEvaluator
from mechanics.reaction_rules import reaction_matrix, resolve
from mechanics.reaction_selector import find_optimal_sequence
from mechanics.state_tracker import ElementalStateTracker
from simulation.event_system import EventBus
from simulation.presets import PRESETS, get_preset
from simulation.snapshot_engine import SnapshotEngine

app = FastAPI(title="Slime Reaction Lab API")

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Shared tracker for the playground endpoints ---
event_bus = EventBus()
tracker = ElementalStateTracker(event_bus=event_bus,
                                evaluator=ReactionEvaluator.from_config(get_config()))


def parse_element(raw) -> ElementType:
    try:
        return ElementType.parse(raw)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def require_entity(entity_id: str) -> ElementalState:
    try:
        return tracker.get_state(entity_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


class EntityCreate(BaseModel):
    entity_id: str


class ApplyRequest(BaseModel):
    element: str


class SequenceRequest(BaseModel):
    aura: str = "none"
    status: str = "none"
    available: Optional[List[str]] = None
    max_depth: Optional[int] = None


class SlimeConfig(BaseModel):
    id: str
    name: Optional[str] = None
    script: List[str] = []


class SimulationRequest(BaseModel):
    duration: float = 20.0
    preset: Optional[str] = None
    slimes: Optional[List[SlimeConfig]] = None


# --- Reaction rules ---

@app.get("/elements")
async def get_elements():
    return {
        "base": [e.name for e in BASE_ELEMENTS],
        "status": [ElementType.QUICKEN.name, ElementType.BURNING.name, ElementType.BLOOM.name],
    }


@app.get("/reactions/table")
async def get_reaction_table(status: str = "none"):
    matrix = reaction_matrix(parse_element(status))
    return [
        {"current": current.name, "incoming": incoming.name, "reaction": reaction.value}
        for (current, incoming), reaction in matrix.items()
    ]


@app.get("/reactions/resolve")
async def resolve_reaction(current: str, incoming: str, status: str = "none"):
    reaction = resolve(parse_element(current), parse_element(incoming), parse_element(status))
    return {"reaction": reaction.value, "score": tracker.evaluator.score(reaction)}


@app.get("/reactions/scores")
async def get_reaction_scores():
    return {r.value: tracker.evaluator.score(r) for r in ReactionType}


@app.post("/reactions/sequence")
async def optimal_sequence(request: SequenceRequest):
    limit = get_config().max_sequence_depth_limit
    if request.max_depth is not None and request.max_depth > limit:
        raise HTTPException(status_code=422, detail=f"max_depth 超过上限 {limit}")
    try:
        state = ElementalState(parse_element(request.aura), parse_element(request.status))
        available = [parse_element(e) for e in request.available] if request.available else BASE_ELEMENTS
        depth = request.max_depth if request.max_depth is not None else get_config().max_sequence_depth
        plan = find_optimal_sequence(state, available, depth, tracker.evaluator)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return plan.to_dict()


# --- Tracked entities ---

@app.post("/entities")
async def create_entity(data: EntityCreate):
    return {"entity_id": data.entity_id, **tracker.track(data.entity_id).to_dict()}


@app.get("/entities")
async def list_entities():
    return [{"entity_id": eid, **tracker.get_state(eid).to_dict()} for eid in tracker.entity_ids()]


@app.get("/entities/{entity_id}")
async def get_entity(entity_id: str):
    return {"entity_id": entity_id, **require_entity(entity_id).to_dict()}


@app.delete("/entities/{entity_id}")
async def delete_entity(entity_id: str):
    require_entity(entity_id)
    tracker.untrack(entity_id)
    return {"success": True}


@app.post("/entities/{entity_id}/apply")
async def apply_element(entity_id: str, data: ApplyRequest):
    require_entity(entity_id)
    try:
        result = tracker.apply_element(entity_id, parse_element(data.element))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return result.to_dict()


@app.get("/entities/{entity_id}/best")
async def best_reaction(entity_id: str):
    require_entity(entity_id)
    return tracker.select_best(entity_id).to_dict()


@app.post("/entities/{entity_id}/auto-react")
async def auto_react(entity_id: str):
    require_entity(entity_id)
    return tracker.auto_react(entity_id).to_dict()


@app.post("/entities/{entity_id}/clear")
async def clear_auras(entity_id: str):
    require_entity(entity_id)
    return {"entity_id": entity_id, **tracker.clear_auras(entity_id).to_dict()}


# --- Conveyor simulation ---

@app.get("/presets")
async def get_presets():
    return {name: {"description": p["description"], "slimes": p["slimes"]} for name, p in PRESETS.items()}


@app.post("/simulate")
async def run_simulation(request: SimulationRequest):
    if request.preset is not None:
        try:
            slimes = get_preset(request.preset)["slimes"]
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
    elif request.slimes:
        slimes = [{"id": s.id, "name": s.name, "script": s.script} for s in request.slimes]
    else:
        raise HTTPException(status_code=422, detail="需要提供 preset 或 slimes")

    sim = SnapshotEngine()
    try:
        for item in slimes:
            sim.spawn(item["id"], item.get("name"), item.get("script", []))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    sim.run_with_snapshots(request.duration)

    return {
        "history": sim.history,
        "logs": sim.flat_logs(),
        "reactions": sim.reaction_rows(),
        "final_states": {
            s.entity_id: sim.tracker.get_state(s.entity_id).to_dict() for s in sim.entities
        },
        "statistics": {
            eid: sim.statistics.get_entity_summary(eid) for eid in sim.statistics.entity_stats
        } if sim.statistics is not None else None,
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
