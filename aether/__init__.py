"""
Aether Cycles - Tarot circle incremental game engine.

Cards placed in a circle produce resources every in-game hour. The
engine provides:
- The tarot catalog and its marks
- Synergy detection and sync scoring
- The effect registry and the hourly cycle pipeline
- Player commands, multi-step choices and save codes
- A game loop with real-time timers and an HTTP API
"""

__version__ = "0.1.0"
