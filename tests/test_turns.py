"""Tests for the turn and phase sequence."""

from commander_table.cards.models import Card
from commander_table.game.state import PHASE_ORDER, CardInstance, GameState, Phase, Player, Zone
from commander_table.game.turns import advance_phase, next_phase, pass_turn, untap_all


def make_state(players: int = 3, **kwargs) -> GameState:
    seats = tuple(Player(id=f"p{i + 1}", name=f"Player {i + 1}") for i in range(players))
    return GameState(players=seats, **kwargs)


def make_permanent(name: str, controller: str = "p1", **kwargs) -> CardInstance:
    return CardInstance(card=Card(name=name), owner_id=controller, zone=Zone.BATTLEFIELD, **kwargs)


class TestPhaseOrder:
    def test_twelve_phases(self):
        assert len(PHASE_ORDER) == 12
        assert PHASE_ORDER[0] == Phase.UNTAP
        assert PHASE_ORDER[-1] == Phase.CLEANUP

    def test_next_phase_wraps(self):
        assert next_phase(Phase.MAIN_1) == Phase.COMBAT_BEGIN
        assert next_phase(Phase.CLEANUP) == Phase.UNTAP


class TestAdvancePhase:
    def test_mid_turn_step(self):
        state = advance_phase(make_state())
        assert state.phase == Phase.UPKEEP
        assert state.turn_number == 1
        assert state.active_player_index == 0

    def test_full_cycle_starts_next_turn(self):
        state = make_state()
        for _ in range(12):
            state = advance_phase(state)
        assert state.phase == Phase.UNTAP
        assert state.turn_number == 2
        assert state.active_player_index == 1

    def test_active_player_wraps(self):
        state = make_state(active_player_index=2, phase=Phase.CLEANUP)
        state = advance_phase(state)
        assert state.active_player_index == 0
        assert state.active_player.id == "p1"

    def test_stale_index_past_the_end(self):
        state = make_state(active_player_index=7, phase=Phase.CLEANUP)
        assert state.active_player.id == "p3"
        state = advance_phase(state)
        assert state.active_player_index == 0
        assert state.active_player.id == "p1"

    def test_negative_index(self):
        state = pass_turn(make_state(active_player_index=-1))
        assert state.active_player.id == "p2"

    def test_no_players(self):
        state = advance_phase(GameState(phase=Phase.CLEANUP))
        assert state.active_player_index == 0
        assert state.turn_number == 2
        assert state.active_player is None

    def test_input_state_unchanged(self):
        state = make_state()
        advance_phase(state)
        assert state.phase == Phase.UNTAP


class TestPassTurn:
    def test_from_mid_turn(self):
        state = pass_turn(make_state(phase=Phase.COMBAT_DAMAGE))
        assert state.phase == Phase.UNTAP
        assert state.turn_number == 2
        assert state.active_player_index == 1

    def test_from_untap_skips_whole_turn(self):
        state = pass_turn(make_state())
        assert state.phase == Phase.UNTAP
        assert state.turn_number == 2


class TestUntapAll:
    def test_untaps_only_that_players_permanents(self):
        mine = make_permanent("Forest", tapped=True)
        theirs = make_permanent("Island", controller="p2", tapped=True)
        state = untap_all(make_state(instances=(mine, theirs)), "p1")
        assert not state.find_card(mine.id).tapped
        assert state.find_card(theirs.id).tapped

    def test_respects_doesnt_untap(self):
        frozen = make_permanent("Mana Vault", tapped=True, doesnt_untap=True)
        state = untap_all(make_state(instances=(frozen,)), "p1")
        assert state.find_card(frozen.id).tapped

    def test_uses_controller(self):
        stolen = make_permanent("Sol Ring", controller="p1", tapped=True).model_copy(update={"controller_id": "p2"})
        state = untap_all(make_state(instances=(stolen,)), "p2")
        assert not state.find_card(stolen.id).tapped

    def test_ignores_other_zones(self):
        in_graveyard = CardInstance(card=Card(name="Forest"), owner_id="p1", zone=Zone.GRAVEYARD, tapped=True)
        state = untap_all(make_state(instances=(in_graveyard,)), "p1")
        assert state.find_card(in_graveyard.id).tapped
