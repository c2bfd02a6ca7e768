"""
Rule constants.

Every number the rules depend on lives here so the engine, the bots and the
presentation layers agree on them.
"""

STARTING_HAND = 5
HAND_LIMIT = 7
UNIFY_DRAW = 2
MAX_CONSECUTIVE_FORCES = 2
DEADLOCK_PASSES = 2
DECK_SIZE = 54

# AI collaborator contract: accept UNIFY only while the hand is small.
AI_UNIFY_THRESHOLD = 5
