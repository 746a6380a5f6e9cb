from datetime import datetime, timedelta, timezone

import pytest

from crud.search_crud import SortKey, build_search_plan, paginate, parse_tag_list
from schemas.search_schema import SearchParams

NOW = datetime(2026, 1, 31, tzinfo=timezone.utc)


def test_defaults_only_filter_on_visibility():
    plan = build_search_plan(SearchParams(), now=NOW)
    assert plan.filter.visibility == "PUBLIC"
    assert plan.filter.text is None
    assert plan.filter.tags == ()
    assert plan.filter.created_after is None
    assert plan.offset == 0
    assert plan.limit == 12


@pytest.mark.parametrize("date_range,days", [("week", 7), ("month", 30), ("year", 365)])
def test_date_range_lower_bound(date_range, days):
    plan = build_search_plan(SearchParams(date_range=date_range), now=NOW)
    assert plan.filter.created_after == NOW - timedelta(days=days)


def test_orderings():
    assert build_search_plan(SearchParams(sort_by="date")).ordering == (SortKey("created_at"),)
    assert build_search_plan(SearchParams(sort_by="popularity")).ordering == (SortKey("downloads"),)
    assert build_search_plan(SearchParams()).ordering == (SortKey("downloads"), SortKey("created_at"))


def test_offset_from_page():
    plan = build_search_plan(SearchParams(page=3, limit=10))
    assert plan.offset == 20
    assert plan.limit == 10


def test_text_category_and_tags_carry_through():
    plan = build_search_plan(SearchParams(q="robot", category="games", tags=["webxr", "unity"]))
    assert plan.filter.text == "robot"
    assert plan.filter.category == "games"
    assert plan.filter.tags == ("webxr", "unity")


def test_parse_tag_list_strips_and_drops_empty():
    assert parse_tag_list(" a, b ,,c ") == ["a", "b", "c"]
    assert parse_tag_list(None) == []


def test_paginate_flags():
    p = paginate(page=2, limit=12, total=15)
    assert p.total_pages == 2
    assert p.has_next_page is False
    assert p.has_prev_page is True
    assert paginate(page=1, limit=12, total=0).total_pages == 0
