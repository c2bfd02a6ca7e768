"""
Tests for game state primitives.

Tests:
- Drawing, playing, passing, discarding
- Hand limit truncation
- The card partition across zones
- Snapshot serialization
"""

from ..engine_core.action import Action
from ..engine_core.cards import Position
from ..engine_core.snapshot import snapshot
from ..engine_core.state import (
    GameState,
    Side,
    check_win,
    discard,
    draw,
    excess_cards,
    play,
    record_pass,
    truncate_hand,
)


class TestSide:

    def test_opponent(self):
        assert Side.PLAYER.opponent == Side.AI
        assert Side.AI.opponent == Side.PLAYER


class TestDraw:

    def test_draw_takes_front_card(self, cards):
        first, second = cards.gravity(), cards.wiggle()
        state = GameState(deck=(first, second))

        new_state, card = draw(state, Side.AI)

        assert card == first
        assert new_state.ai_hand == (first,)
        assert new_state.deck == (second,)
        assert new_state.stats.ai.draws == 1

    def test_empty_deck_is_not_an_error(self):
        state = GameState()
        new_state, card = draw(state, Side.PLAYER)
        assert card is None
        assert new_state is state


class TestPlay:

    def test_play_to_each_end(self, cards):
        left, right, middle = cards.gravity(), cards.gravity(), cards.gravity()
        state = GameState(player_hand=(left, right), chain=(middle,))

        state, ok = play(state, left.card_id, Position.LEFT, Side.PLAYER)
        assert ok
        state, ok = play(state, right.card_id, Position.RIGHT, Side.PLAYER)
        assert ok

        assert state.chain == (left, middle, right)
        assert state.player_hand == ()
        assert state.stats.player.plays == 2

    def test_play_resets_pass_counter(self, cards):
        ball = cards.gravity()
        state = GameState(ai_hand=(ball,), consecutive_passes=1)
        new_state, ok = play(state, ball.card_id, Position.RIGHT, Side.AI)
        assert ok
        assert new_state.consecutive_passes == 0

    def test_card_not_in_hand(self, cards):
        ball = cards.gravity()
        state = GameState(ai_hand=(ball,))
        new_state, ok = play(state, ball.card_id, Position.RIGHT, Side.PLAYER)
        assert not ok
        assert new_state is state


class TestPasses:

    def test_second_pass_deadlocks(self):
        state, deadlocked = record_pass(GameState(), Side.PLAYER)
        assert not deadlocked
        assert state.consecutive_passes == 1

        state, deadlocked = record_pass(state, Side.AI)
        assert deadlocked
        assert state.stats.player.passes == 1
        assert state.stats.ai.passes == 1


class TestWin:

    def test_empty_hand_wins(self, cards):
        state = GameState(player_hand=(), ai_hand=(cards.gravity(),))
        assert check_win(state, Side.PLAYER)
        assert not check_win(state, Side.AI)


class TestDiscard:

    def test_discard_moves_cards_to_pile(self, cards):
        a, b, c = cards.many(3)
        state = GameState(player_hand=(a, b, c))

        new_state, ok = discard(state, Side.PLAYER, [c.card_id, a.card_id])

        assert ok
        assert new_state.player_hand == (b,)
        assert set(new_state.discard_pile) == {a, c}

    def test_duplicate_ids_rejected(self, cards):
        a, b = cards.many(2)
        state = GameState(player_hand=(a, b))
        new_state, ok = discard(state, Side.PLAYER, [a.card_id, a.card_id])
        assert not ok
        assert new_state is state

    def test_card_not_held_rejected(self, cards):
        a, b = cards.many(2)
        state = GameState(player_hand=(a,), ai_hand=(b,))
        new_state, ok = discard(state, Side.PLAYER, [b.card_id])
        assert not ok
        assert new_state is state


class TestHandLimit:

    def test_excess_cards(self, cards):
        state = GameState(ai_hand=cards.many(9))
        assert excess_cards(state, Side.AI) == 2
        assert excess_cards(state, Side.PLAYER) == 0

    def test_truncate_drops_oldest(self, cards):
        hand = cards.many(9)
        state = truncate_hand(GameState(ai_hand=hand), Side.AI)
        assert state.ai_hand == hand[2:]
        assert state.discard_pile == hand[:2]

    def test_truncate_within_limit_is_noop(self, cards):
        state = GameState(ai_hand=cards.many(7))
        assert truncate_hand(state, Side.AI) is state


class TestPartition:

    def test_dealt_game_holds_every_card_once(self, dealt_game):
        ids = [c.card_id for c in dealt_game.all_cards()]
        assert len(ids) == 54
        assert len(set(ids)) == 54


class TestSnapshot:

    def test_ai_hand_hidden_by_default(self, dealt_game):
        view = snapshot(dealt_game)
        assert view["ai_hand"] is None
        assert view["ai_hand_size"] == 5
        assert len(view["player_hand"]) == 5
        assert view["deck_size"] == 44
        assert view["phase"] == "awaiting_human_play"

    def test_reveal_ai_hand(self, dealt_game):
        view = snapshot(dealt_game, reveal_ai_hand=True)
        assert [c["card_id"] for c in view["ai_hand"]] == [c.card_id for c in dealt_game.ai_hand]

    def test_history_serialized(self):
        state = GameState(history=(Action.play(Side.PLAYER, "g_1", Position.LEFT),))
        view = snapshot(state)
        assert view["history"][0]["type"] == "play"
        assert view["history"][0]["position"] == "left"
