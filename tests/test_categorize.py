#!/usr/bin/env python3
"""
Tests for categorization, section grouping, search and progress stats.
"""

import pytest

from langxml.categorize import categorize, group_by_section, progress_stats, search
from langxml.config import CATCH_ALL, DEFAULT_CATEGORY_RULES, rule
from langxml.records import EDITED, SAVED, UNCHANGED, Record, accept, update


def _record(key, section="Keys", original=None):
    return Record(
        id=f"{section}|{key}",
        key=key,
        original=original if original is not None else key,
        section=section,
        kind="Record",
        field="Value",
    )


@pytest.fixture
def records():
    return [
        _record("ScreenSpaceToolTipPower_Value", "ScreenSpaceToolTips"),
        _record("GameTip_1", "GameTip", "Remember to breathe."),
        _record("ItemWrench_Value", "Things", "Wrench"),
        _record("UI_Back_Value", "Interface", "Back"),
        _record("Jump_Value", "Keys", "Jump"),
    ]


def test_default_rules_partition_every_record(records):
    buckets = categorize(records, DEFAULT_CATEGORY_RULES)

    assert list(buckets) == [r.name for r in DEFAULT_CATEGORY_RULES]
    assert [r.key for r in buckets["tooltips"]] == ["ScreenSpaceToolTipPower_Value"]
    assert [r.key for r in buckets["tips"]] == ["GameTip_1"]
    assert [r.key for r in buckets["things"]] == ["ItemWrench_Value"]
    assert [r.key for r in buckets["ui"]] == ["UI_Back_Value"]
    assert [r.key for r in buckets["other"]] == ["Jump_Value"]
    assert buckets["help"] == []
    assert sum(len(b) for b in buckets.values()) == len(records)


def test_first_matching_rule_wins():
    rules = (rule("first", r"^Game"), rule("second", r"Tip"), CATCH_ALL)
    buckets = categorize([_record("GameTip_1")], rules)

    assert len(buckets["first"]) == 1
    assert buckets["second"] == []


def test_without_catch_all_unmatched_records_are_dropped(records):
    buckets = categorize(records, (rule("tips", r"^GameTip"),))
    assert list(buckets) == ["tips"]
    assert [r.key for r in buckets["tips"]] == ["GameTip_1"]


def test_categorize_keeps_input_order():
    recs = [_record("GameTip_2"), _record("GameTip_10"), _record("GameTip_1")]
    buckets = categorize(recs, (rule("tips", r"^GameTip"),))
    assert [r.key for r in buckets["tips"]] == ["GameTip_2", "GameTip_10", "GameTip_1"]


def test_group_by_section(records):
    groups = group_by_section(records)
    assert list(groups) == ["ScreenSpaceToolTips", "GameTip", "Things", "Interface", "Keys"]
    assert [r.key for r in groups["Things"]] == ["ItemWrench_Value"]


def test_group_by_section_matches_parsed_sections(document):
    groups = group_by_section(document.records)
    assert list(groups) == document.sections()
    assert all(r.section == name for name, recs in groups.items() for r in recs)


def test_search_matches_key_original_and_committed(records):
    saved = accept(update(records[4], "Saltar"))
    pool = records[:4] + [saved]

    assert [r.key for r in search(pool, "wrench")] == ["ItemWrench_Value"]
    assert [r.key for r in search(pool, "BREATHE")] == ["GameTip_1"]
    assert [r.key for r in search(pool, "saltar")] == ["Jump_Value"]


def test_search_ignores_draft_text(records):
    pool = [update(records[4], "Saltar")]
    assert search(pool, "saltar") == []


@pytest.mark.parametrize("term", ["", "a", "ab"])
def test_short_search_terms_return_everything(records, term):
    assert search(records, term) == records


def test_progress_stats(records):
    records[0] = accept(update(records[0], "Energia"))
    records[1] = update(records[1], "Respire.")

    stats = progress_stats(records)

    assert stats["total"] == 5
    assert stats["saved"] == 1
    assert stats["percent"] == 20
    assert stats["by_status"] == {UNCHANGED: 3, EDITED: 1, SAVED: 1}


def test_progress_stats_empty():
    assert progress_stats([])["percent"] == 0
