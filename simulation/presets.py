from core.errors import NotFoundError

# 每个史莱姆的脚本：依次在1号机上选择的元素（"skip" 表示不选择直接放行）
PRESETS = {
    "火附着 -> 最优融化": {
        "description": "1号机施加火元素，2号机在水/冰/雷中挑出评分最高的冰，触发融化。",
        "slimes": [
            {"id": "slime-1", "name": "火史莱姆", "script": ["pyro"]},
        ],
    },
    "草雷激化流": {
        "description": "草附着进入2号机后触发原激化，留下激化状态。",
        "slimes": [
            {"id": "slime-1", "name": "草史莱姆", "script": ["dendro"]},
        ],
    },
    "多史莱姆混合": {
        "description": "三只史莱姆分别携带水、雷与空附着，对比2号机的最优选择。",
        "slimes": [
            {"id": "slime-hydro", "name": "水史莱姆", "script": ["hydro"]},
            {"id": "slime-electro", "name": "雷史莱姆", "script": ["electro"]},
            {"id": "slime-empty", "name": "空史莱姆", "script": ["skip"]},
        ],
    },
}


def get_preset(name: str) -> dict:
    if name not in PRESETS:
        raise NotFoundError("预设", name)
    return PRESETS[name]


def load_preset(engine, name: str):
    """把预设中的史莱姆生成到引擎"""
    preset = get_preset(name)
    return [
        engine.spawn(item["id"], item.get("name"), item.get("script", []))
        for item in preset["slimes"]
    ]
