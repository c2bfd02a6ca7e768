"""
Tests for cards and the deck builder.
"""

from ..engine_core.cards import (
    Card,
    CardType,
    ChaosType,
    ForceColor,
    build_deck,
    deck_composition,
    shuffle_deck,
)


class TestDeckComposition:
    """The deck is a fixed 54-card set."""

    def test_deck_has_54_unique_cards(self, full_deck):
        assert len(full_deck) == 54
        assert len({c.card_id for c in full_deck}) == 54

    def test_type_counts(self, full_deck):
        counts = deck_composition(full_deck)
        assert counts["gravity"] == 18
        assert counts["force"] == 12
        assert counts["wiggle"] == 18
        assert counts["chaos"] == 6

    def test_subcategories_are_uniform(self, full_deck):
        """Each variant, color and chaos kind appears equally often."""
        counts = deck_composition(full_deck)
        for variant in (1, 2, 3):
            assert counts[f"gravity:{variant}"] == 6
            assert counts[f"wiggle:{variant}"] == 6
        for color in ForceColor:
            assert counts[f"force:{color.value}"] == 3
        for chaos_type in ChaosType:
            assert counts[f"chaos:{chaos_type.value}"] == 2

    def test_only_matching_attribute_is_set(self, full_deck):
        for card in full_deck:
            if card.card_type in (CardType.GRAVITY, CardType.WIGGLE):
                assert card.variant in (1, 2, 3)
                assert card.color is None and card.chaos_type is None
            elif card.card_type == CardType.FORCE:
                assert card.color is not None
                assert card.variant is None and card.chaos_type is None
            else:
                assert card.chaos_type is not None
                assert card.variant is None and card.color is None


class TestShuffle:

    def test_same_seed_same_order(self, full_deck):
        assert shuffle_deck(full_deck, seed=5) == shuffle_deck(full_deck, seed=5)

    def test_shuffle_is_permutation(self, full_deck):
        shuffled = shuffle_deck(full_deck, seed=5)
        assert sorted(c.card_id for c in shuffled) == sorted(c.card_id for c in full_deck)

    def test_shuffle_leaves_input_alone(self):
        deck = build_deck()
        shuffle_deck(deck, seed=1)
        assert deck == build_deck()


class TestCard:

    def test_identity_is_card_id(self):
        """Two cards with the same id are the same card."""
        assert Card.gravity("x", 1) == Card.gravity("x", 2)
        assert Card.gravity("x", 1) != Card.gravity("y", 1)
        assert len({Card.wiggle("x", 1), Card.wiggle("x", 1)}) == 1

    def test_display_names(self):
        assert Card.gravity("a", 2).name == "Ball-2"
        assert Card.wiggle("b", 3).name == "Wave-3"
        assert Card.force("c", ForceColor.RED).name == "Red Force"
        assert Card.chaos("d", ChaosType.GAUGE_BREAK).name == "Gauge-Break!"

    def test_type_predicates(self, cards):
        assert cards.gravity().is_gravity
        assert cards.force().is_force
        assert cards.wiggle().is_wiggle
        assert cards.chaos().is_chaos
        assert not cards.wiggle().is_gravity
