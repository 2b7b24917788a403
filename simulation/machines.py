"""
传送带上的机器区域
1号机（输入）：停下史莱姆，等待按钮选择元素后放行
2号机（最优）：永久停下史莱姆，自动施加评分最高的元素
"""
from core.enums import ElementType


class Machine:
    """机器基类"""
    kind = "machine"

    def __init__(self, machine_id: int, name: str, position: int):
        self.machine_id = machine_id
        self.name = name
        self.position = position

    def on_enter(self, slime, engine):
        """史莱姆进入机器区域时触发"""
        pass

    def on_hold(self, slime, engine):
        """史莱姆停在机器内时每tick触发"""
        pass

    def to_dict(self):
        return {"machine_id": self.machine_id, "name": self.name, "kind": self.kind, "position": self.position}


class InputMachine(Machine):
    kind = "input"

    def __init__(self, machine_id: int, position: int, delay_ticks: int = 5):
        super().__init__(machine_id, "元素施加机", position)
        self.delay_ticks = delay_ticks

    def on_enter(self, slime, engine):
        slime.stop()
        slime.hold_ticks = self.delay_ticks
        engine.log(f"[{slime.name}] 进入{self.name}，等待选择元素")
        if self.delay_ticks <= 0:
            self.on_hold(slime, engine)

    def on_hold(self, slime, engine):
        slime.hold_ticks -= 1
        if slime.hold_ticks > 0:
            return

        choice = slime.next_choice()
        if choice is None:
            engine.log(f"[{slime.name}] 未选择元素，直接放行")
        else:
            result = engine.tracker.apply_element(slime.entity_id, choice, source="input")
            engine.log(f"[{slime.name}] 选择 {choice.name}: {result.before.aura.name} -> "
                       f"{result.after.aura.name}/{result.after.status.name} ({result.reaction.value})")
        slime.resume()


class OptimalMachine(Machine):
    kind = "optimal"

    def __init__(self, machine_id: int, position: int):
        super().__init__(machine_id, "最优反应机", position)

    def on_enter(self, slime, engine):
        slime.finish()
        state = engine.tracker.get_state(slime.entity_id)
        if state.aura == ElementType.NONE:
            engine.log(f"[{slime.name}] 到达{self.name}时没有附着，不触发反应")
        else:
            result = engine.tracker.auto_react(slime.entity_id)
            engine.log(f"[{slime.name}] {self.name}施加 {result.selection.incoming.name} -> "
                       f"【{result.selection.reaction.value}】 (评分 {result.selection.score:.1f})")

        if engine.config.respawn_on_finish:
            engine.respawn(slime.entity_id)
