# matrix_system/__init__.py
"""
Matrix System - 2x2 matrix placement and cycling engine.
"""

# Engine
from matrix_system.engine import MatrixEngine

# Services
from matrix_system.services.matrix_store import MatrixStore
from matrix_system.services.placement_service import PlacementService, Placement
from matrix_system.services.cycle_service import CycleService, CycleResult
from matrix_system.services.stats_service import StatsService, MatrixStats

# Configuration
from matrix_system.config.stages import Stage, STAGES, getStageByLevel, getNextStage
from matrix_system.config.placement import PlacementPolicy, EarningsFormula

# Errors
from matrix_system.errors import MatrixError, MemberNotFoundError, MatrixOwnerNotFoundError, MatrixFullError

# Utilities
from matrix_system.utils.time_machine import TimeMachine

# Events
from matrix_system.events.event_bus import EventBus, MatrixEvents

__all__ = [
    # Engine
    'MatrixEngine',

    # Services
    'MatrixStore',
    'PlacementService',
    'Placement',
    'CycleService',
    'CycleResult',
    'StatsService',
    'MatrixStats',

    # Config
    'Stage',
    'STAGES',
    'getStageByLevel',
    'getNextStage',
    'PlacementPolicy',
    'EarningsFormula',

    # Errors
    'MatrixError',
    'MemberNotFoundError',
    'MatrixOwnerNotFoundError',
    'MatrixFullError',

    # Utils
    'TimeMachine',

    # Events
    'EventBus',
    'MatrixEvents',
]
