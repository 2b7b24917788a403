import streamlit as st
import pandas as pd
import sys
import os
import time
import plotly.express as px

# ==========================================
# 0. 路径与导入配置
# ==========================================
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from core.config_manager import get_config
from core.enums import BASE_ELEMENTS, ElementType
from mechanics.reaction_evaluator import ReactionEvaluator
from mechanics.reaction_rules import reaction_matrix
from mechanics.reaction_selector import find_optimal_sequence
from mechanics.state_tracker import ElementalStateTracker
from simulation.presets import PRESETS
from simulation.snapshot_engine import SnapshotEngine

# ==========================================
# 1. 样式与辅助函数
# ==========================================
ELEMENT_COLORS = {
    "NONE": "#636e72",
    "PYRO": "#e17055",
    "HYDRO": "#0984e3",
    "ANEMO": "#55efc4",
    "ELECTRO": "#6c5ce7",
    "DENDRO": "#00b894",
    "CRYO": "#74b9ff",
    "GEO": "#fdcb6e",
}

STATUS_ICONS = {"NONE": "", "QUICKEN": "⚡🌿", "BURNING": "🔥", "BLOOM": "🌸"}


def parse_script_input(text):
    return [line.strip() for line in text.split('\n') if line.strip()]


def build_matrix_frame(status: ElementType) -> pd.DataFrame:
    evaluator = ReactionEvaluator.from_config(get_config())
    rows = []
    for (current, incoming), reaction in reaction_matrix(status).items():
        rows.append({
            "现有附着": current.name,
            "入射元素": incoming.name,
            "反应": reaction.value,
            "评分": evaluator.score(reaction),
        })
    return pd.DataFrame(rows)


def render_state(name, state_dict):
    color = ELEMENT_COLORS.get(state_dict["aura"], "#636e72")
    icon = STATUS_ICONS.get(state_dict["status"], "")
    st.markdown(
        f"<div style='border-left:6px solid {color};padding-left:8px'>"
        f"<b>{name}</b><br/>附着: {state_dict['aura']} {icon}<br/>阶段: {state_dict['phase']}</div>",
        unsafe_allow_html=True,
    )


# ==========================================
# 2. 界面配置
# ==========================================
st.set_page_config(page_title="史莱姆元素反应实验室", layout="wide")

st.sidebar.title("⚙️ 模拟设置")
sim_duration = st.sidebar.slider("时长", 5, 60, 20)
preset_options = ["自定义"] + list(PRESETS.keys())
selected_preset = st.sidebar.selectbox("📥 加载预设", preset_options)

st.title("🧪 史莱姆元素反应流水线")

tab_table, tab_play, tab_sim = st.tabs(["📋 反应表", "🎮 手动实验", "🏭 流水线模拟"])

# --- Tab 1: 反应表热力图 ---
with tab_table:
    status_name = st.radio("派生状态", ["NONE", "QUICKEN", "BURNING", "BLOOM"], horizontal=True)
    df_matrix = build_matrix_frame(ElementType[status_name])
    pivot = df_matrix.pivot(index="现有附着", columns="入射元素", values="评分")
    labels = df_matrix.pivot(index="现有附着", columns="入射元素", values="反应")
    order = [e.name for e in BASE_ELEMENTS]
    pivot = pivot.reindex(index=order, columns=order)
    labels = labels.reindex(index=order, columns=order)
    fig = px.imshow(pivot, color_continuous_scale="YlOrRd", aspect="auto", title="反应评分矩阵")
    fig.update_traces(text=labels.values, texttemplate="%{text}")
    st.plotly_chart(fig, use_container_width=True)

# --- Tab 2: 手动实验 ---
with tab_play:
    if 'tracker' not in st.session_state:
        st.session_state['tracker'] = ElementalStateTracker(evaluator=ReactionEvaluator.from_config(get_config()))
        st.session_state['tracker'].track("slime")
        st.session_state['play_log'] = []
    tracker = st.session_state['tracker']

    cols = st.columns(len(BASE_ELEMENTS) + 2)
    for i, element in enumerate(BASE_ELEMENTS):
        if cols[i].button(element.name, key=f"btn_{element.name}"):
            result = tracker.apply_element("slime", element)
            st.session_state['play_log'].append(f"{element.name}: {result.reaction.value}")
    if cols[-2].button("🤖 最优"):
        result = tracker.auto_react("slime")
        st.session_state['play_log'].append(
            f"最优 {result.selection.incoming.name}: {result.selection.reaction.value} ({result.selection.score})")
    if cols[-1].button("🧹 清空"):
        tracker.clear_auras("slime")
        st.session_state['play_log'].append("清空附着")

    state = tracker.get_state("slime")
    render_state("史莱姆", state.to_dict())

    best = tracker.select_best("slime")
    st.caption(f"当前最优: {best.incoming.name} -> {best.reaction.value} (评分 {best.score})")
    plan = find_optimal_sequence(state, max_depth=get_config().max_sequence_depth, evaluator=tracker.evaluator)
    if plan.elements:
        st.caption("最优序列: " + " → ".join(e.name for e in plan.elements) + f" (总评分 {plan.total_score})")

    with st.expander("操作记录"):
        for line in reversed(st.session_state['play_log']):
            st.write(line)

# --- Tab 3: 流水线模拟 ---
with tab_sim:
    if selected_preset != "自定义":
        preset_data = PRESETS[selected_preset]
        st.info(f"**当前预设**: {selected_preset}\n\n{preset_data['description']}")
        slime_defs = preset_data['slimes']
    else:
        cols = st.columns(3)
        slime_defs = []
        for i in range(3):
            with cols[i]:
                script = st.text_area(f"史莱姆 {i+1} 脚本", value="pyro" if i == 0 else "", height=100, key=f"s_{i}")
                if script.strip():
                    slime_defs.append({"id": f"slime-{i+1}", "name": f"史莱姆{i+1}",
                                        "script": parse_script_input(script)})

    if st.button("🚀 运行流水线", type="primary", use_container_width=True):
        sim = SnapshotEngine()
        for item in slime_defs:
            sim.spawn(item["id"], item.get("name"), item.get("script", []))
        sim.run_with_snapshots(sim_duration)
        st.session_state['data'] = {
            'history': sim.history,
            'logs': sim.logs_by_tick,
            'reactions': pd.DataFrame(sim.reaction_rows()),
            'report': sim.statistics.generate_report() if sim.statistics else "",
            'belt_length': sim.config.belt_length,
        }

    if 'data' in st.session_state:
        data = st.session_state['data']
        history = data['history']

        is_playing = st.toggle("自动播放", value=False)
        if not is_playing:
            render_frames = [st.slider("时间轴", 0, len(history) - 1, 0)]
        else:
            render_frames = range(len(history))

        monitor = st.empty()
        for f_idx in render_frames:
            frame = history[f_idx]
            with monitor.container():
                st.markdown(f"### ⏱️ `{frame['time_str']}`")
                ent_cols = st.columns(max(1, len(frame['entities'])))
                for i, (eid, ent) in enumerate(frame['entities'].items()):
                    with ent_cols[i]:
                        render_state(ent['name'], ent)
                        st.progress(min(1.0, ent['position'] / max(1, data['belt_length'] - 1)))
                        if ent['machine']:
                            st.caption(f"🏭 {ent['machine']}")
                for item in frame['reactions']:
                    st.success(f"💥 {item['entity']}: {item['reaction']} (+{item['score']})")
                for line in data['logs'].get(frame['tick'], []):
                    st.text(line)
            if is_playing:
                time.sleep(0.1)

        df = data['reactions']
        if not df.empty:
            st.plotly_chart(px.bar(df, x="entity", y="score", color="reaction", title="反应评分"),
                            use_container_width=True)
        with st.expander("📊 统计报告"):
            st.text(data['report'])
