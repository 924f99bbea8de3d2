"""Simple bilingual strings for game messages."""
from __future__ import annotations

from typing import Dict, List

LANG_ZH: Dict[str, str] = {
    "player_red": "红方",
    "player_blue": "蓝方",
    "side_top": "上",
    "side_bottom": "下",
    "side_left": "左",
    "side_right": "右",
    "rule_degenerate": "镜子的两个端点不能相同",
    "rule_not_adjacent": "镜子必须连接棋盘上相邻的两个格点",
    "rule_base_occupied": "不能在基地的格点上放镜子",
    "rule_open_edge": "不能封住基地的开口",
    "rule_overlap": "镜子与已有镜子重叠",
    "rule_crossing": "镜子与已有镜子相交",
    "rule_enclosure": "不能把基地四面封死",
    "reason_defense": "挡住对方的激光",
    "reason_attack": "打开射向对方基地的通路",
    "reason_exposure": "让自己的基地暴露",
    "reason_center": "靠近中心",
    "reason_near_own_base": "靠近己方基地",
    "reason_pressure": "逼近对方基地",
    "reason_diagonal": "斜向镜子",
    "reason_connection": "与己方镜子相连",
    "base_placed": "{player}基地放在 ({x}, {y})，开口朝{side}",
    "base_rejected": "这里不能放基地",
    "mirror_placed": "{player}放置镜子 ({x1}, {y1})-({x2}, {y2})",
    "mirror_rejected": "不能放置：{reason}",
    "pass": "{player}无处可放，跳过",
    "winner": "{player}获胜！",
    "undo_done": "已悔棋",
    "nothing_to_undo": "没有可以悔的棋",
    "new_game_started": "新开局",
    "turn_label": "轮到{player}",
    "move_hint": "({x1}, {y1})-({x2}, {y2}) 得分 {score:.0f}：{reasons}",
}

LANG_EN: Dict[str, str] = {
    "player_red": "Red",
    "player_blue": "Blue",
    "side_top": "top",
    "side_bottom": "bottom",
    "side_left": "left",
    "side_right": "right",
    "rule_degenerate": "A mirror needs two different endpoints",
    "rule_not_adjacent": "A mirror must join two neighbouring points on the board",
    "rule_base_occupied": "Mirrors cannot touch a base corner",
    "rule_open_edge": "A base's open side cannot be covered",
    "rule_overlap": "The mirror overlaps an existing mirror",
    "rule_crossing": "The mirror crosses an existing mirror",
    "rule_enclosure": "A base cannot be closed on all four sides",
    "reason_defense": "blocks the opponent's laser",
    "reason_attack": "opens a shot at the opponent's base",
    "reason_exposure": "exposes our own base",
    "reason_center": "close to the centre",
    "reason_near_own_base": "near our base",
    "reason_pressure": "presses the opponent's base",
    "reason_diagonal": "diagonal mirror",
    "reason_connection": "connects to our mirrors",
    "base_placed": "{player} base at ({x}, {y}), open to the {side}",
    "base_rejected": "A base cannot go there",
    "mirror_placed": "{player} mirror ({x1}, {y1})-({x2}, {y2})",
    "mirror_rejected": "Cannot place: {reason}",
    "pass": "{player} has no legal mirror and passes",
    "winner": "{player} wins!",
    "undo_done": "Move taken back",
    "nothing_to_undo": "Nothing to undo",
    "new_game_started": "New game started",
    "turn_label": "{player} to move",
    "move_hint": "({x1}, {y1})-({x2}, {y2}) score {score:.0f}: {reasons}",
}


_LANG_MAP: Dict[str, Dict[str, str]] = {"zh": LANG_ZH, "en": LANG_EN}


def t(key: str, lang: str) -> str:
    """Translate a key for the provided language or raise when missing."""

    if lang not in _LANG_MAP:
        raise ValueError(f"Unsupported language '{lang}'")
    table = _LANG_MAP[lang]
    if key not in table:
        raise ValueError(f"Missing translation for key '{key}'")
    return table[key]


def available_langs() -> List[str]:
    return list(_LANG_MAP.keys())
