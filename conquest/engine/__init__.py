"""
Territory Conquest Game Engine
Rules core without web framework: phases, combat, cards, reinforcements, automated players.
"""

DICE_SIDES = 6

STARTING_TROOPS = 3
MIN_REINFORCEMENTS = 3
TERRITORIES_PER_REINFORCEMENT = 3

CARD_TYPES = ("INFANTRY", "CAVALRY", "ARTILLERY")
WILD = "WILD"
WILDCARD_COUNT = 2
TRADE_IN_BONUS = 5
TERRITORY_CARD_BONUS = 2

AI_MAX_ATTACK_ATTEMPTS = 10
