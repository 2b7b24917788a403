from simulation.engine import ReactionEngine
from simulation.presets import PRESETS, load_preset


def main():
    sim = ReactionEngine()

    preset_name = "多史莱姆混合"
    preset = PRESETS[preset_name]

    print(f"==================================================")
    print(f"       {preset_name}")
    print(f"       {preset['description']}")
    print(f"==================================================")

    slimes = load_preset(sim, preset_name)
    for slime in slimes:
        print(f"[{slime.name}] 就绪, 脚本长度: {len(slime.script)}")

    sim.run(max_seconds=30)

    print(f"\n====== 最终状态 ======")
    for slime in slimes:
        state = sim.tracker.get_state(slime.entity_id)
        print(f"{slime.name}: 附着={state.aura.name} 状态={state.status.name} ({state.phase.value})")
    if sim.statistics is not None:
        print("\n" + sim.statistics.generate_report())


if __name__ == "__main__":
    main()
