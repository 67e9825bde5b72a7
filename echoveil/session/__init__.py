"""Play-screen controllers."""

from .combat_controller import CombatActionType, CombatPhase, CombatTurnController
from .game_session import GameSession
from .status_monitor import AIStatusMonitor

__all__ = [
    "GameSession",
    "CombatTurnController",
    "CombatActionType",
    "CombatPhase",
    "AIStatusMonitor",
]
