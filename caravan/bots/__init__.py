"""
Bots module - Automa AI implementations.

Provides:
- BotPolicy: Interface for bot decision-making
- GreedyPolicy / choose_action: the fixed-priority automa
- RandomPolicy, FirstLegalPolicy: baselines over the generated actions
"""

from .policy import BotPolicy, BotDecision, RandomPolicy, FirstLegalPolicy
from .greedy import GreedyPolicy, choose_action

POLICIES = {
    "greedy": GreedyPolicy,
    "random": RandomPolicy,
    "first_legal": FirstLegalPolicy,
}

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "FirstLegalPolicy",
    "GreedyPolicy",
    "choose_action",
    "POLICIES",
]
