import pytest

from win_overlay.overlay.state import OverlayState, merge_partial


def test_defaults_match_documented_values():
    assert OverlayState().to_dict() == {
        "maxWin": 10,
        "current": 0,
        "theme": "theme-default",
        "font": "'Kanit', sans-serif",
        "fontUrl": "",
        "showBg": True,
        "strokeWidth": 2,
        "strokeColor": "#000000",
    }


def test_merge_replaces_only_mentioned_fields():
    base = OverlayState()
    merged = merge_partial(base, {"current": 7, "theme": "theme-neon"})
    assert merged.current == 7
    assert merged.theme == "theme-neon"
    assert merged.to_dict() == {**base.to_dict(), "current": 7, "theme": "theme-neon"}


@pytest.mark.parametrize("partial", [
    {"maxWin": "20"},
    {"maxWin": True},
    {"current": 1.5},
    {"current": None},
    {"showBg": "false"},
    {"showBg": 0},
    {"strokeWidth": "4"},
    {"strokeWidth": float("nan")},
    {"strokeWidth": float("inf")},
    {"theme": ""},
    {"theme": 3},
    {"font": ""},
    {"fontUrl": None},
    {"strokeColor": 123},
])
def test_wrong_typed_fields_are_ignored(partial):
    base = OverlayState(current=4)
    assert merge_partial(base, partial) == base


def test_unknown_keys_are_ignored():
    base = OverlayState()
    assert merge_partial(base, {"nope": 1, "max_win": 99}) == base


@pytest.mark.parametrize("value,expected", [(0, 1), (-5, 1), (1, 1), (99, 99)])
def test_max_win_is_clamped(value, expected):
    assert merge_partial(OverlayState(), {"maxWin": value}).max_win == expected


@pytest.mark.parametrize("value,expected", [(-1, 0), (0, 0), (6.5, 6.5), (12, 12), (40, 12)])
def test_stroke_width_is_clamped(value, expected):
    assert merge_partial(OverlayState(), {"strokeWidth": value}).stroke_width == expected


def test_direct_construction_is_clamped_too():
    state = OverlayState(max_win=0, stroke_width=100)
    assert state.max_win == 1
    assert state.stroke_width == 12


def test_current_may_exceed_max_win():
    state = merge_partial(OverlayState(), {"maxWin": 3, "current": 9})
    assert (state.current, state.max_win) == (9, 3)


def test_font_url_may_be_emptied():
    state = merge_partial(OverlayState(font_url="https://x/font.css"), {"fontUrl": ""})
    assert state.font_url == ""


@pytest.mark.parametrize("partial,field,expected", [
    ({"current": 5.0}, "current", 5),
    ({"maxWin": 3.0}, "maxWin", 3),
    ({"maxWin": 0.0}, "maxWin", 1),
])
def test_integral_floats_are_accepted_as_ints(partial, field, expected):
    merged = merge_partial(OverlayState(current=4), partial).to_dict()
    assert merged[field] == expected
    assert type(merged[field]) is int
