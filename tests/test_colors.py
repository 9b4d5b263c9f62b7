from __future__ import annotations

from calendar_ai.colors import (
    get_event_color_concepts,
    get_event_color_name,
    list_event_colors,
    normalize_color,
    suggest_event_color,
)


def test_palette_order_and_shape():
    colors = list_event_colors()
    assert [c["color"] for c in colors] == [
        "yellow", "orange", "blue", "purple", "green", "red", "black", "pink",
    ]
    assert all(len(c["concepts"]) == 3 for c in colors)


def test_normalize_color():
    assert normalize_color(" Green ") == "green"
    assert normalize_color("teal") is None
    assert normalize_color(None) is None


def test_name_and_concepts_fall_back_to_blue():
    assert get_event_color_name("red") == "Red"
    assert get_event_color_concepts("nope") == ["Calm", "Patience", "Security"]


def test_suggest_event_color():
    assert suggest_event_color("Birthday party") == "yellow"
    assert suggest_event_color("Morning exercise", "outdoor wellness") == "green"
    assert suggest_event_color("Project deadline") == "red"
    assert suggest_event_color("zzz") == "blue"


def test_suggest_event_color_ties_use_palette_order():
    # "meeting" scores orange and blue once each
    assert suggest_event_color("meeting") == "orange"
