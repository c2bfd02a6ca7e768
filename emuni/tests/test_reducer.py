"""
Tests for the reducer (turn controller).

Tests:
- Dealing
- Play legality and rejections
- Turn order, draw phase and phases
- UNIFY offers for both sides
- Hand limit
- Win and deadlock
- Chaos resolution hook
"""

import pytest

from ..bots import FirstLegalPolicy
from ..engine_core.action import Action, ActionType, ErrorCode, PlayOutcome
from ..engine_core.cards import Position, build_deck
from ..engine_core.chaos import ChaosResolution, ChaosResolver
from ..engine_core.reducer import (
    Reducer,
    ai_turn,
    attempt_play,
    discard_cards,
    new_game,
    pass_turn,
    resolve_unify,
)
from ..engine_core.state import GameResult, GameState, Side, TurnPhase
from ..exceptions import InvalidDeckError


class AlwaysUnifyPolicy(FirstLegalPolicy):
    """First legal move, always takes the UNIFY draw."""

    def accept_unify(self, hand):
        return True


class LockLeftResolver(ChaosResolver):
    """Test resolver that locks the left end."""

    def resolve(self, state, card, position):
        return ChaosResolution(
            state=state._copy_with(locked_end=Position.LEFT),
            implemented=True,
            description="Left end locked",
        )


class TestNewGame:

    def test_deal(self, dealt_game):
        assert len(dealt_game.player_hand) == 5
        assert len(dealt_game.ai_hand) == 5
        assert dealt_game.deck_size == 44
        assert dealt_game.chain == ()
        assert dealt_game.current_player == Side.PLAYER
        assert dealt_game.phase == TurnPhase.AWAITING_HUMAN_PLAY
        assert dealt_game.turn_count == 1

    def test_deal_follows_deck_order(self):
        deck = build_deck()
        state = new_game(deck)
        assert state.player_hand == deck[:5]
        assert state.ai_hand == deck[5:10]
        assert state.deck == deck[10:]

    def test_wrong_size_rejected(self):
        with pytest.raises(InvalidDeckError):
            new_game(build_deck()[:53])

    def test_duplicate_ids_rejected(self):
        deck = build_deck()
        with pytest.raises(InvalidDeckError):
            new_game(deck[:53] + deck[:1])


class TestPlay:
    """Tests for the human's card plays."""

    def test_illegal_end_rejected_other_end_accepted(self, cards, reducer):
        """A Gravity card cannot go next to the Force end but can go next to the Gravity end."""
        ball, spare = cards.gravity(2), cards.wiggle()
        state = GameState(
            chain=(cards.gravity(), cards.wiggle(), cards.force()),
            player_hand=(ball, spare),
            deck=cards.many(3),
        )

        result = reducer.apply(state, Action.play(Side.PLAYER, ball.card_id, Position.RIGHT))
        assert not result.success
        assert result.error_code == ErrorCode.ILLEGAL_MOVE
        assert result.outcome == PlayOutcome.ILLEGAL
        assert result.new_state is None

        result = reducer.apply(state, Action.play(Side.PLAYER, ball.card_id, Position.LEFT))
        assert result.success
        assert result.outcome == PlayOutcome.PLAYED
        assert result.new_state.chain[0] == ball
        assert result.new_state.player_hand == (spare,)

    def test_play_without_end_rejected(self, cards, reducer):
        ball = cards.gravity()
        state = GameState(player_hand=(ball, cards.gravity()))
        action = Action(action_type=ActionType.PLAY, side=Side.PLAYER, card_id=ball.card_id)

        result = reducer.apply(state, action)

        assert result.error_code == ErrorCode.ILLEGAL_MOVE
        assert result.outcome == PlayOutcome.ILLEGAL
        assert result.new_state is None

    def test_attempt_play_leaves_state_on_rejection(self, cards):
        ball = cards.gravity()
        state = GameState(chain=(cards.force(),), player_hand=(ball, cards.gravity()))
        new_state, outcome = attempt_play(state, ball.card_id, Position.RIGHT)
        assert outcome == PlayOutcome.ILLEGAL
        assert new_state is state

    def test_card_not_in_hand(self, dealt_game, reducer):
        ai_card = dealt_game.ai_hand[0]
        result = reducer.apply(dealt_game, Action.play(Side.PLAYER, ai_card.card_id, Position.LEFT))
        assert result.error_code == ErrorCode.CARD_NOT_IN_HAND
        assert result.outcome == PlayOutcome.ILLEGAL

    def test_play_recorded_in_history(self, dealt_game, reducer):
        action = Action.play(Side.PLAYER, dealt_game.player_hand[0].card_id, Position.RIGHT)
        result = reducer.apply(dealt_game, action)
        assert result.new_state.history == (action,)

    def test_partition_kept_after_play(self, dealt_game, reducer):
        action = Action.play(Side.PLAYER, dealt_game.player_hand[0].card_id, Position.RIGHT)
        state = reducer.apply(dealt_game, action).new_state
        ids = [c.card_id for c in state.all_cards()]
        assert len(ids) == 54
        assert len(set(ids)) == 54


class TestTurnFlow:

    def test_no_draw_on_first_turn_then_incoming_side_draws(self, dealt_game, reducer):
        assert len(dealt_game.player_hand) == 5

        result = reducer.apply(dealt_game, Action.pass_turn(Side.PLAYER))
        state = result.new_state

        assert state.current_player == Side.AI
        assert state.phase == TurnPhase.EXECUTING_AI_TURN
        assert state.turn_count == 2
        assert len(state.ai_hand) == 6
        assert len(state.player_hand) == 5
        assert state.deck_size == 43
        assert "AI drew a card" in result.state_changes

    def test_empty_deck_handoff(self, cards, reducer):
        state = GameState(player_hand=cards.many(2), ai_hand=cards.many(2))
        result = reducer.apply(state, Action.pass_turn(Side.PLAYER))
        assert result.success
        assert "Deck is empty - no draw" in result.state_changes
        assert len(result.new_state.ai_hand) == 2

    def test_out_of_turn(self, dealt_game, reducer):
        result = reducer.apply(dealt_game, Action.pass_turn(Side.AI))
        assert result.error_code == ErrorCode.OUT_OF_TURN

        result = reducer.apply(dealt_game, Action.ai_turn())
        assert result.error_code == ErrorCode.OUT_OF_TURN

    def test_player_locked_out_during_ai_turn(self, dealt_game, reducer):
        state = reducer.apply(dealt_game, Action.pass_turn(Side.PLAYER)).new_state
        card_id = state.player_hand[0].card_id

        result = reducer.apply(state, Action.play(Side.PLAYER, card_id, Position.LEFT))

        assert result.error_code == ErrorCode.OUT_OF_TURN
        assert state.phase == TurnPhase.EXECUTING_AI_TURN

    def test_wrong_phase(self, dealt_game, reducer):
        result = reducer.apply(dealt_game, Action.resolve_unify(Side.PLAYER, True))
        assert result.error_code == ErrorCode.WRONG_PHASE

        pending = dealt_game._copy_with(phase=TurnPhase.RESOLVING_UNIFY)
        card_id = pending.player_hand[0].card_id
        result = reducer.apply(pending, Action.play(Side.PLAYER, card_id, Position.LEFT))
        assert result.error_code == ErrorCode.WRONG_PHASE

    def test_ai_turn_hands_back_to_player(self, dealt_game, reducer):
        state = reducer.apply(dealt_game, Action.pass_turn(Side.PLAYER)).new_state
        result = reducer.apply(state, Action.ai_turn())

        assert result.success
        # Empty chain: the first AI card is always playable
        assert result.new_state.chain == (state.ai_hand[0],)
        assert result.new_state.current_player == Side.PLAYER
        assert result.new_state.phase == TurnPhase.AWAITING_HUMAN_PLAY
        assert len(result.new_state.player_hand) == 6
        assert result.new_state.history[-1] == Action.ai_turn()

    def test_ai_without_moves_passes(self, cards, first_policy):
        state = GameState(
            chain=(cards.gravity(),),
            ai_hand=(cards.force(),),
            player_hand=(cards.gravity(),),
            current_player=Side.AI,
            phase=TurnPhase.EXECUTING_AI_TURN,
        )
        new_state = ai_turn(state, first_policy)
        assert new_state.consecutive_passes == 1
        assert new_state.current_player == Side.PLAYER


class TestUnify:
    """UNIFY offers and resolution."""

    def _offer(self, cards, deck_size=3):
        ball = cards.gravity()
        state = GameState(
            chain=(cards.wiggle(),),
            player_hand=(ball, cards.gravity()),
            ai_hand=cards.many(2),
            deck=cards.many(deck_size, "wiggle"),
        )
        return state, ball

    def test_offer_pauses_for_the_player(self, cards, reducer):
        state, ball = self._offer(cards)
        result = reducer.apply(state, Action.play(Side.PLAYER, ball.card_id, Position.RIGHT))

        assert result.outcome == PlayOutcome.PLAYED_AND_UNIFY_OFFERED
        assert result.new_state.phase == TurnPhase.RESOLVING_UNIFY
        assert result.new_state.current_player == Side.PLAYER
        assert "UNIFY bonus offered" in result.state_changes

    def test_accept_draws_two(self, cards, first_policy):
        state, ball = self._offer(cards)
        state, outcome = attempt_play(state, ball.card_id, Position.RIGHT, policy=first_policy)
        assert outcome == PlayOutcome.PLAYED_AND_UNIFY_OFFERED

        state = resolve_unify(state, True, first_policy)

        assert len(state.player_hand) == 3
        assert len(state.ai_hand) == 3  # handoff draw
        assert state.deck_size == 0
        assert state.stats.player.unify_accepted == 1
        assert state.phase == TurnPhase.EXECUTING_AI_TURN

    def test_decline_draws_nothing(self, cards, first_policy):
        state, ball = self._offer(cards)
        state, _ = attempt_play(state, ball.card_id, Position.RIGHT, policy=first_policy)

        state = resolve_unify(state, False, first_policy)

        assert len(state.player_hand) == 1
        assert state.deck_size == 2
        assert state.stats.player.unify_declined == 1

    def test_accept_with_short_deck(self, cards, reducer):
        state, ball = self._offer(cards, deck_size=1)
        state = reducer.apply(state, Action.play(Side.PLAYER, ball.card_id, Position.RIGHT)).new_state

        result = reducer.apply(state, Action.resolve_unify(Side.PLAYER, True))

        assert "Player accepted UNIFY and drew 1 card(s)" in result.state_changes
        assert "Deck is empty - no draw" in result.state_changes
        assert len(result.new_state.player_hand) == 2

    def test_ai_accepts_with_small_hand(self, cards, first_policy):
        first, second = cards.gravity(), cards.gravity()
        state = GameState(
            chain=(cards.wiggle(),),
            ai_hand=(first, second),
            player_hand=(cards.gravity(),),
            deck=cards.many(3),
            current_player=Side.AI,
            phase=TurnPhase.EXECUTING_AI_TURN,
        )

        new_state = ai_turn(state, first_policy)

        assert new_state.chain[0] == first
        assert new_state.stats.ai.unify_accepted == 1
        assert len(new_state.ai_hand) == 3
        assert len(new_state.player_hand) == 2
        assert new_state.phase == TurnPhase.AWAITING_HUMAN_PLAY

    @pytest.mark.parametrize("hand_size, accepted", [(4, True), (5, False)])
    def test_ai_decides_on_hand_before_the_play(self, cards, first_policy, hand_size, accepted):
        """Five cards before the play means no bonus, even though four remain after it."""
        state = GameState(
            chain=(cards.wiggle(),),
            ai_hand=cards.many(hand_size),
            player_hand=(cards.gravity(),),
            deck=cards.many(3),
            current_player=Side.AI,
            phase=TurnPhase.EXECUTING_AI_TURN,
        )

        new_state = ai_turn(state, first_policy)

        assert new_state.stats.ai.unify_accepted == int(accepted)
        assert new_state.stats.ai.unify_declined == int(not accepted)
        assert len(new_state.ai_hand) == hand_size - 1 + (2 if accepted else 0)

    def test_ai_declines_with_large_hand(self, cards, first_policy):
        state = GameState(
            chain=(cards.wiggle(),),
            ai_hand=cards.many(6),
            player_hand=(cards.gravity(),),
            deck=cards.many(3),
            current_player=Side.AI,
            phase=TurnPhase.EXECUTING_AI_TURN,
        )

        new_state = ai_turn(state, first_policy)

        assert new_state.stats.ai.unify_declined == 1
        assert len(new_state.ai_hand) == 5


class TestHandLimit:

    def test_player_over_limit_must_discard(self, cards, reducer):
        ball = cards.gravity()
        state = GameState(
            chain=(cards.wiggle(),),
            player_hand=(ball,) + cards.many(6, "wiggle"),
            ai_hand=cards.many(2),
            deck=cards.many(3),
        )
        state = reducer.apply(state, Action.play(Side.PLAYER, ball.card_id, Position.RIGHT)).new_state
        result = reducer.apply(state, Action.resolve_unify(Side.PLAYER, True))

        assert result.outcome == PlayOutcome.DISCARD_REQUIRED
        state = result.new_state
        assert len(state.player_hand) == 8
        assert state.phase == TurnPhase.AWAITING_DISCARD
        assert state.discards_required == 1
        assert state.current_player == Side.PLAYER

    def test_discard_validation_and_handoff(self, cards, reducer):
        hand = cards.many(8, "wiggle")
        state = GameState(
            player_hand=hand,
            ai_hand=cards.many(2),
            deck=cards.many(2),
            phase=TurnPhase.AWAITING_DISCARD,
            discards_required=1,
        )

        wrong_count = reducer.apply(state, Action.discard(Side.PLAYER, [hand[0].card_id, hand[1].card_id]))
        assert wrong_count.error_code == ErrorCode.INVALID_DISCARD

        not_held = reducer.apply(state, Action.discard(Side.PLAYER, [state.ai_hand[0].card_id]))
        assert not_held.error_code == ErrorCode.INVALID_DISCARD

        result = reducer.apply(state, Action.discard(Side.PLAYER, [hand[3].card_id]))
        assert result.success
        new_state = result.new_state
        assert len(new_state.player_hand) == 7
        assert new_state.discard_pile == (hand[3],)
        assert new_state.discards_required == 0
        assert new_state.current_player == Side.AI
        assert len(new_state.ai_hand) == 3

    def test_discard_cards_helper(self, cards):
        hand = cards.many(8)
        state = GameState(player_hand=hand, phase=TurnPhase.AWAITING_DISCARD, discards_required=1)
        assert discard_cards(state, [hand[0].card_id]).player_hand == hand[1:]
        assert discard_cards(state, []) is state

    def test_ai_truncates_oldest(self, cards):
        ball = cards.gravity()
        rest = cards.many(6, "wiggle")
        top = cards.many(2)
        state = GameState(
            chain=(cards.wiggle(),),
            ai_hand=(ball,) + rest,
            player_hand=(cards.gravity(),),
            deck=top + cards.many(1),
            current_player=Side.AI,
            phase=TurnPhase.EXECUTING_AI_TURN,
        )

        new_state = ai_turn(state, AlwaysUnifyPolicy())

        assert new_state.ai_hand == rest[1:] + top
        assert new_state.discard_pile == (rest[0],)
        assert new_state.current_player == Side.PLAYER


class TestGameEnd:

    def test_last_card_wins(self, cards, reducer):
        ball = cards.gravity()
        state = GameState(chain=(cards.gravity(),), player_hand=(ball,), deck=cards.many(2))

        result = reducer.apply(state, Action.play(Side.PLAYER, ball.card_id, Position.RIGHT))

        assert result.outcome == PlayOutcome.HAND_EMPTY_WIN
        assert result.new_state.phase == TurnPhase.GAME_ENDED
        assert result.new_state.winner == Side.PLAYER
        assert result.new_state.result == GameResult.WIN
        # No handoff draw after a win
        assert result.new_state.deck_size == 2

    def test_playing_out_the_starting_hand_wins(self, full_deck, reducer):
        """Dealt 5/5 from a full deck, the player plays all five starting cards and wins."""
        wiggles = [c for c in full_deck if c.is_wiggle][:5]
        balls = [c for c in full_deck if c.is_gravity][:5]
        rest = [c for c in full_deck if c not in wiggles and c not in balls]
        state = new_game(tuple(wiggles + balls + rest))
        assert state.deck_size == 44
        assert state.player_hand == tuple(wiggles)

        # Set the draw pile aside so handoffs add nothing to the hand
        state = state._copy_with(deck=(), discard_pile=state.deck)

        for card in wiggles:
            result = reducer.apply(state, Action.play(Side.PLAYER, card.card_id, Position.RIGHT))
            assert result.success
            state = result.new_state
            if state.is_over:
                break
            state = reducer.apply(state, Action.ai_turn()).new_state

        assert result.outcome == PlayOutcome.HAND_EMPTY_WIN
        assert state.player_hand == ()
        assert state.winner == Side.PLAYER
        assert state.result == GameResult.WIN
        assert len(state.chain) == 9

    def test_win_beats_unify_offer(self, cards, reducer):
        ball = cards.gravity()
        state = GameState(chain=(cards.wiggle(),), player_hand=(ball,), deck=cards.many(2))
        result = reducer.apply(state, Action.play(Side.PLAYER, ball.card_id, Position.RIGHT))
        assert result.outcome == PlayOutcome.HAND_EMPTY_WIN

    def test_ai_wins(self, cards, first_policy):
        state = GameState(
            ai_hand=(cards.wiggle(),),
            player_hand=(cards.gravity(),),
            current_player=Side.AI,
            phase=TurnPhase.EXECUTING_AI_TURN,
        )
        new_state = ai_turn(state, first_policy)
        assert new_state.winner == Side.AI

    def test_two_passes_deadlock(self, dealt_game, first_policy):
        state, deadlocked = pass_turn(dealt_game, policy=first_policy)
        assert not deadlocked
        state, deadlocked = pass_turn(state, policy=first_policy)
        assert deadlocked
        assert state.phase == TurnPhase.GAME_ENDED
        assert state.result == GameResult.DEADLOCK
        assert state.winner is None

    def test_play_between_passes_resets(self, cards, reducer):
        ai_card = cards.gravity()
        state = GameState(
            player_hand=cards.many(2),
            ai_hand=(ai_card, cards.gravity()),
            deck=cards.many(3),
        )
        state = reducer.apply(state, Action.pass_turn(Side.PLAYER)).new_state
        state = reducer.apply(state, Action.play(Side.AI, ai_card.card_id, Position.RIGHT)).new_state
        assert state.consecutive_passes == 0

        result = reducer.apply(state, Action.pass_turn(Side.PLAYER))
        assert not result.deadlocked
        assert result.new_state.consecutive_passes == 1

    def test_no_actions_after_game_over(self, dealt_game, reducer):
        over = dealt_game._copy_with(phase=TurnPhase.GAME_ENDED, result=GameResult.DEADLOCK)
        result = reducer.apply(over, Action.pass_turn(Side.PLAYER))
        assert result.error_code == ErrorCode.GAME_OVER


class TestChaos:

    def test_default_resolver_reports_unimplemented(self, cards, reducer):
        squish = cards.chaos()
        state = GameState(chain=(cards.gravity(),), player_hand=(squish, cards.gravity()))

        result = reducer.apply(state, Action.play(Side.PLAYER, squish.card_id, Position.RIGHT))

        assert result.success
        assert result.outcome == PlayOutcome.PLAYED
        assert result.new_state.chain[-1] == squish
        assert "Squish! effect not implemented" in result.state_changes

    def test_custom_resolver_locks_end(self, cards, first_policy):
        squish = cards.chaos()
        state = GameState(chain=(cards.gravity(),), player_hand=(squish, cards.gravity()))
        reducer = Reducer(policy=first_policy, chaos_resolver=LockLeftResolver())

        result = reducer.apply(state, Action.play(Side.PLAYER, squish.card_id, Position.RIGHT))

        assert "Left end locked" in result.state_changes
        assert result.new_state.locked_end == Position.LEFT

    def test_locked_end_rejects_plays(self, cards, reducer):
        wave = cards.wiggle()
        state = GameState(
            chain=(cards.gravity(),),
            player_hand=(wave, cards.wiggle()),
            locked_end=Position.LEFT,
        )
        result = reducer.apply(state, Action.play(Side.PLAYER, wave.card_id, Position.LEFT))
        assert result.error_code == ErrorCode.ILLEGAL_MOVE

        result = reducer.apply(state, Action.play(Side.PLAYER, wave.card_id, Position.RIGHT))
        assert result.success
