"""Tests for selector parsing and matching."""

from escapade.engine.selectors import Selector, parse_selector
from escapade.engine.world import GameObject

POLE = GameObject("pole", "Pole", attributes=frozenset({"long", "wooden"}))


def test_plain_token_is_id_selector():
    assert parse_selector("pole") == Selector(object_id="pole")


def test_marked_token_is_attribute_selector():
    selector = parse_selector("@long")
    assert selector == Selector(attribute="long")
    assert selector.is_attribute


def test_id_selector_matches_only_that_id():
    assert Selector.by_id("pole").matches(POLE)
    assert not Selector.by_id("rope").matches(POLE)


def test_attribute_selector_matches_membership():
    assert Selector.by_attribute("wooden").matches(POLE)
    assert not Selector.by_attribute("shiny").matches(POLE)


def test_empty_selector_never_matches():
    assert not Selector().matches(POLE)


def test_str_round_trips_command_syntax():
    assert str(parse_selector("@long")) == "@long"
    assert str(parse_selector("pole")) == "pole"
