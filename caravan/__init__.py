"""
Caravan - Crystal-Trading Card Game Engine

A deterministic rules engine for a caravan crystal-trading card game
with automa opponents. The engine provides:
- Seeded game creation
- Action validation and application
- Legal action generation
- Bot policies for automa play
- A session layer and HTTP API on top
"""

__version__ = "1.0.0"
