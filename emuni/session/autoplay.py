"""
Autoplay - Play whole games with a bot in the human's seat.

Used for simulations (win rates, deadlock rates, UNIFY usage) and for
testing the turn controller end to end. The bot in the human seat goes
through exactly the same actions a human would submit.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

from ..bots import BotPolicy
from ..engine_core.action import Action
from ..engine_core.cards import build_deck, shuffle_deck
from ..engine_core.reducer import Reducer, new_game
from ..engine_core.state import GameResult, GameState, Side, TurnPhase

logger = logging.getLogger(__name__)

# Games always terminate (finite deck, shrinking hands, deadlock on two
# passes); this bound only catches engine bugs.
MAX_ACTIONS = 2000


def _human_action(state: GameState, policy: BotPolicy) -> Action:
    """What a bot sitting in the human's seat does in the current phase."""
    if state.phase == TurnPhase.RESOLVING_UNIFY:
        return Action.resolve_unify(Side.PLAYER, policy.accept_unify(state.player_hand))

    if state.phase == TurnPhase.AWAITING_DISCARD:
        oldest = [c.card_id for c in state.player_hand[:state.discards_required]]
        return Action.discard(Side.PLAYER, oldest)

    decision = policy.select_move(state.player_hand, state.chain, state.locked_end)
    if decision is None:
        return Action.pass_turn(Side.PLAYER)
    return Action.play(Side.PLAYER, decision.move.card.card_id, decision.move.position)


def play_game(state: GameState, player_policy: BotPolicy, reducer: Reducer) -> GameState:
    """
    Play a dealt game to the end.

    Raises:
        RuntimeError: if an action is rejected or the game does not finish
    """
    for _ in range(MAX_ACTIONS):
        if state.is_over:
            return state

        if state.phase == TurnPhase.EXECUTING_AI_TURN:
            action = Action.ai_turn()
        else:
            action = _human_action(state, player_policy)

        result = reducer.apply(state, action)
        if not result.success:
            raise RuntimeError(f"Autoplay action rejected: {result.error}")
        state = result.new_state

    raise RuntimeError(f"Game did not finish within {MAX_ACTIONS} actions")


@dataclass
class SimulationSummary:
    """Aggregate results over many games."""
    games: int = 0
    player_wins: int = 0
    ai_wins: int = 0
    deadlocks: int = 0
    total_turns: int = 0
    unify_accepted: int = 0
    unify_declined: int = 0
    final_states: list[GameState] = field(default_factory=list, repr=False)

    @property
    def average_turns(self) -> float:
        return self.total_turns / self.games if self.games else 0.0

    def record(self, state: GameState) -> None:
        self.games += 1
        self.total_turns += state.turn_count
        if state.result == GameResult.DEADLOCK:
            self.deadlocks += 1
        elif state.winner == Side.PLAYER:
            self.player_wins += 1
        elif state.winner == Side.AI:
            self.ai_wins += 1
        for stats in (state.stats.player, state.stats.ai):
            self.unify_accepted += stats.unify_accepted
            self.unify_declined += stats.unify_declined
        self.final_states.append(state)


def simulate(
    games: int,
    player_policy_factory,
    ai_policy_factory,
    seed: int = 0,
) -> SimulationSummary:
    """
    Play a series of games, game i dealt with seed + i.

    Factories take a seed and return a BotPolicy, so every game is
    reproducible on its own.
    """
    summary = SimulationSummary()
    for i in range(games):
        game_seed = seed + i
        state = new_game(shuffle_deck(build_deck(), seed=game_seed))
        reducer = Reducer(policy=ai_policy_factory(game_seed))
        final = play_game(state, player_policy_factory(game_seed), reducer)
        logger.debug("Game %d (seed %d): %s", i, game_seed, final.result)
        summary.record(final)
    return summary
