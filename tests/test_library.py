"""Tests for library order, draws, shuffles and mills."""

import random

import pytest

from commander_table.cards.models import Card
from commander_table.game.state import CardInstance, GameState, Player, Zone
from commander_table.game.zones import (
    InvalidActionError,
    bottom_cards,
    draw_card,
    draw_cards,
    mill,
    move_bottom_cards_to_zone,
    move_to_library_bottom,
    move_to_library_position,
    move_to_library_top,
    move_top_cards_to_zone,
    shuffle_library,
    shuffle_subset,
    top_cards,
)


def make_instance(name: str, zone: Zone = Zone.LIBRARY, owner: str = "p1") -> CardInstance:
    return CardInstance(id=name, card=Card(name=name), owner_id=owner, zone=zone)


def make_state(library: list[str], owner: str = "p1", extra: tuple[CardInstance, ...] = ()) -> GameState:
    """A two-player game; ``library`` is listed bottom first."""
    players = (Player(id="p1", name="Alice"), Player(id="p2", name="Bob"))
    instances = tuple(make_instance(name, owner=owner) for name in library) + extra
    return GameState(players=players, instances=instances)


def library_ids(state: GameState, player_id: str = "p1") -> list[str]:
    return [c.id for c in state.library_of(player_id)]


class TestDraw:
    def test_draws_top_card(self):
        state = draw_card(make_state(["a", "b", "c"]), "p1")
        assert library_ids(state) == ["a", "b"]
        assert [c.id for c in state.cards_in_zone("p1", Zone.HAND)] == ["c"]

    def test_empty_library_loses(self):
        state = make_state([])
        after = draw_card(state, "p1")
        assert after.find_player("p1").has_lost
        assert after.instances == state.instances

    def test_draw_cards(self):
        state = draw_cards(make_state(["a", "b", "c"]), "p1", 2)
        assert library_ids(state) == ["a"]
        assert not state.find_player("p1").has_lost

    def test_draw_cards_past_empty_loses(self):
        state = draw_cards(make_state(["a"]), "p1", 3)
        assert state.card_count("p1", Zone.HAND) == 1
        assert state.find_player("p1").has_lost

    def test_negative_count_rejected(self):
        with pytest.raises(InvalidActionError):
            draw_cards(make_state(["a"]), "p1", -1)

    def test_libraries_are_per_player(self):
        theirs = (make_instance("x", owner="p2"),)
        state = draw_card(make_state(["a", "b"], extra=theirs), "p2")
        assert library_ids(state) == ["a", "b"]
        assert state.find_card("x").zone == Zone.HAND


class TestShuffle:
    def test_preserves_contents(self):
        names = [f"c{i}" for i in range(30)]
        state = shuffle_library(make_state(names), "p1", random.Random(7))
        assert sorted(library_ids(state)) == sorted(names)

    def test_leaves_other_player_alone(self):
        theirs = tuple(make_instance(n, owner="p2") for n in ("x", "y", "z"))
        state = shuffle_library(make_state(["a", "b", "c"], extra=theirs), "p1", random.Random(1))
        assert library_ids(state, "p2") == ["x", "y", "z"]

    def test_subset_from_top(self):
        names = [f"c{i}" for i in range(10)]
        state = shuffle_subset(make_state(names), "p1", 3, rng=random.Random(3))
        library = library_ids(state)
        assert library[:7] == names[:7]
        assert sorted(library[7:]) == names[7:]

    def test_subset_from_bottom(self):
        names = [f"c{i}" for i in range(10)]
        state = shuffle_subset(make_state(names), "p1", 4, from_top=False, rng=random.Random(3))
        library = library_ids(state)
        assert library[4:] == names[4:]
        assert sorted(library[:4]) == names[:4]

    def test_subset_of_one_is_noop(self):
        state = make_state(["a", "b"])
        assert shuffle_subset(state, "p1", 1) == state


class TestLibraryPosition:
    def test_top_then_draw_round_trip(self):
        bolt = make_instance("bolt", Zone.HAND)
        state = move_to_library_top(make_state(["a", "b", "c"], extra=(bolt,)), "bolt")
        state = draw_card(state, "p1")
        assert state.find_card("bolt").zone == Zone.HAND

    def test_bottom(self):
        bolt = make_instance("bolt", Zone.GRAVEYARD)
        state = move_to_library_bottom(make_state(["a", "b"], extra=(bolt,)), "bolt")
        assert library_ids(state) == ["bolt", "a", "b"]

    def test_position_from_top(self):
        bolt = make_instance("bolt", Zone.HAND)
        state = move_to_library_position(make_state(["a", "b", "c"], extra=(bolt,)), "bolt", 2)
        assert library_ids(state) == ["a", "b", "bolt", "c"]

    def test_position_from_bottom(self):
        bolt = make_instance("bolt", Zone.HAND)
        state = move_to_library_position(make_state(["a", "b", "c"], extra=(bolt,)), "bolt", 2, from_bottom=True)
        assert library_ids(state) == ["a", "bolt", "b", "c"]

    def test_position_clamped(self):
        bolt = make_instance("bolt", Zone.HAND)
        state = move_to_library_position(make_state(["a"], extra=(bolt,)), "bolt", 50)
        assert library_ids(state) == ["bolt", "a"]

    def test_reorders_within_library(self):
        state = move_to_library_top(make_state(["a", "b", "c"]), "a")
        assert library_ids(state) == ["b", "c", "a"]

    def test_goes_to_owners_library(self):
        stolen = CardInstance(id="ring", card=Card(name="Sol Ring"), owner_id="p2",
                              controller_id="p1", zone=Zone.BATTLEFIELD)
        state = move_to_library_top(make_state(["a"], extra=(stolen,)), "ring")
        assert library_ids(state, "p2") == ["ring"]
        assert state.find_card("ring").controller_id == "p2"


class TestPeekAndMove:
    def test_top_and_bottom_cards(self):
        state = make_state(["a", "b", "c", "d"])
        assert [c.id for c in top_cards(state, "p1", 2)] == ["c", "d"]
        assert [c.id for c in bottom_cards(state, "p1", 2)] == ["a", "b"]
        assert [c.id for c in top_cards(state, "p1", 10)] == ["a", "b", "c", "d"]
        assert top_cards(state, "p1", 0) == []

    def test_move_top_and_bottom(self):
        state = move_top_cards_to_zone(make_state(["a", "b", "c", "d"]), "p1", 1, Zone.EXILE)
        state = move_bottom_cards_to_zone(state, "p1", 2, Zone.HAND)
        assert library_ids(state) == ["c"]
        assert state.find_card("d").zone == Zone.EXILE


class TestMill:
    def test_mill(self):
        state = mill(make_state(["a", "b", "c"]), "p1", 2)
        assert library_ids(state) == ["a"]
        assert state.card_count("p1", Zone.GRAVEYARD) == 2
        assert not state.find_player("p1").has_lost

    def test_mill_exact_library_does_not_lose(self):
        state = mill(make_state(["a", "b"]), "p1", 2)
        assert not state.find_player("p1").has_lost

    def test_overmill_loses(self):
        state = mill(make_state(["a", "b"]), "p1", 5)
        assert state.card_count("p1", Zone.LIBRARY) == 0
        assert state.card_count("p1", Zone.GRAVEYARD) == 2
        assert state.find_player("p1").has_lost

    def test_mill_empty_library_does_not_lose(self):
        state = mill(make_state([]), "p1", 3)
        assert not state.find_player("p1").has_lost

    def test_negative_rejected(self):
        with pytest.raises(InvalidActionError):
            mill(make_state(["a"]), "p1", -1)
