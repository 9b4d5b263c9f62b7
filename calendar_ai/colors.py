from __future__ import annotations

from typing import Any, Dict, List, Optional

from .config import DEFAULT_COLOR

# 색상 팔레트: 순서가 곧 동점 처리 우선순위
EVENT_COLORS: Dict[str, Dict[str, Any]] = {
    "yellow": {"name": "Yellow", "concepts": ["Energy", "Joy", "Warmth"]},
    "orange": {"name": "Orange", "concepts": ["Creativity", "Enthusiasm", "Excitement"]},
    "blue": {"name": "Blue", "concepts": ["Calm", "Patience", "Security"]},
    "purple": {"name": "Purple", "concepts": ["Ambition", "Wisdom", "Power"]},
    "green": {"name": "Green", "concepts": ["Growth", "Healing", "Balance"]},
    "red": {"name": "Red", "concepts": ["Action", "Attention", "Determination"]},
    "black": {"name": "Black", "concepts": ["Formality", "Mystery", "Sophistication"]},
    "pink": {"name": "Pink", "concepts": ["Kindness", "Sensitivity", "Optimism"]},
}

COLOR_KEYWORDS: Dict[str, List[str]] = {
    "yellow": ["energy", "joy", "warm", "happy", "fun", "party", "celebration", "birthday"],
    "orange": ["creative", "enthusiasm", "excitement", "innovation", "brainstorm", "workshop", "meeting"],
    "blue": ["calm", "patience", "security", "meeting", "appointment", "consultation", "therapy"],
    "purple": ["ambition", "wisdom", "power", "leadership", "strategy", "planning", "executive"],
    "green": ["growth", "healing", "balance", "health", "wellness", "exercise", "nature", "outdoor"],
    "red": ["action", "attention", "determination", "urgent", "deadline", "important", "critical"],
    "black": ["formality", "mystery", "sophistication", "formal", "business", "interview", "presentation"],
    "pink": ["kindness", "sensitivity", "optimism", "romantic", "date", "love", "care", "support"],
}


def is_event_color(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in EVENT_COLORS


def normalize_color(value: Any) -> Optional[str]:
    """Return the palette key for ``value`` or None when it is not a palette color."""
    if not is_event_color(value):
        return None
    return value.strip().lower()


def get_event_color_name(color: str) -> str:
    entry = EVENT_COLORS.get(color) or EVENT_COLORS[DEFAULT_COLOR]
    return entry["name"]


def get_event_color_concepts(color: str) -> List[str]:
    entry = EVENT_COLORS.get(color) or EVENT_COLORS[DEFAULT_COLOR]
    return list(entry["concepts"])


def list_event_colors() -> List[Dict[str, Any]]:
    return [{
        "color": key,
        "name": value["name"],
        "concepts": list(value["concepts"]),
    } for key, value in EVENT_COLORS.items()]


def suggest_event_color(title: str, description: Optional[str] = None) -> str:
    text = f"{title or ''} {description or ''}".lower()

    scores: Dict[str, int] = {color: 0 for color in EVENT_COLORS}
    for color, keywords in COLOR_KEYWORDS.items():
        for keyword in keywords:
            if keyword in text:
                scores[color] += 1

    best = max(scores.values())
    if best == 0:
        return DEFAULT_COLOR
    for color in EVENT_COLORS:
        if scores[color] == best:
            return color
    return DEFAULT_COLOR
