from stormimpact.aggregate import aggregate_economy, aggregate_health
from stormimpact.dsa import merge_sort
from stormimpact.models import EconomicImpact, HealthImpact
from conftest import make_event


def test_health_example():
    events = [
        make_event("Tornado", fatalities=5, injuries=10),
        make_event("Flood", fatalities=0, injuries=50),
        make_event("Tornado", fatalities=1, injuries=0),
    ]
    out = aggregate_health(events)
    assert out == [
        HealthImpact("Flood", fatalities=0, injuries=50),
        HealthImpact("Tornado", fatalities=6, injuries=10),
    ]
    assert [r.total for r in out] == [50, 16]


def test_health_excludes_types_without_casualties():
    events = [make_event("HAIL"), make_event("HEAT", fatalities=2)]
    assert [r.event_type for r in aggregate_health(events)] == ["HEAT"]


def test_empty_input_gives_empty_result():
    assert aggregate_health([]) == []
    assert aggregate_economy([]) == []


def test_top5_truncation():
    events = [make_event(f"T{i}", injuries=i * 10) for i in range(1, 9)]
    out = aggregate_health(events)
    assert [r.event_type for r in out] == ["T8", "T7", "T6", "T5", "T4"]


def test_top_n_none_returns_full_ranking():
    events = [make_event(f"T{i}", injuries=i) for i in range(1, 9)]
    assert len(aggregate_health(events, top_n=None)) == 8


def test_ties_keep_first_seen_order():
    events = [
        make_event("B", fatalities=3),
        make_event("A", injuries=3),
        make_event("C", injuries=5),
        make_event("D", fatalities=1, injuries=2),
    ]
    assert [r.event_type for r in aggregate_health(events)] == ["C", "B", "A", "D"]


def test_economy_sums_and_ranking():
    events = [
        make_event("FLOOD", prop_dmg=2e9, crop_dmg=1e6),
        make_event("HAIL", prop_dmg=1e6, crop_dmg=3e9),
        make_event("FLOOD", prop_dmg=1e9),
        make_event("WIND"),
    ]
    out = aggregate_economy(events)
    assert out == [
        EconomicImpact("FLOOD", property_damage=3e9, crop_damage=1e6),
        EconomicImpact("HAIL", property_damage=1e6, crop_damage=3e9),
    ]


def test_economy_sums_do_not_depend_on_row_order():
    events = [
        make_event("A", prop_dmg=1.0), make_event("B", crop_dmg=4.0),
        make_event("A", crop_dmg=2.0), make_event("B", prop_dmg=1.0),
    ]
    forward = {r.event_type: r.total for r in aggregate_economy(events)}
    backward = {r.event_type: r.total for r in aggregate_economy(events[::-1])}
    assert forward == backward == {"A": 3.0, "B": 5.0}


def test_economy_ties_keep_first_seen_order():
    events = [make_event("Y", prop_dmg=10.0), make_event("X", crop_dmg=10.0)]
    assert [r.event_type for r in aggregate_economy(events)] == ["Y", "X"]
    assert [r.event_type for r in aggregate_economy(events[::-1])] == ["X", "Y"]


def test_merge_sort_is_stable_descending():
    items = [("a", 1), ("b", 2), ("c", 1), ("d", 2), ("e", 3)]
    out = merge_sort(items, key=lambda t: t[1], reverse=True)
    assert [name for name, _ in out] == ["e", "b", "d", "a", "c"]
    assert merge_sort(items, key=lambda t: t[1]) == sorted(items, key=lambda t: t[1])
