"""Workflow Engine - Stage transitions, history and navigation guard"""
from .stage_engine import StageEngine, get_next_possible_stages
from .history_writer import HistoryWriter
from .route_guard import RouteGuard, RouteDecision, get_route_guard

__all__ = [
    "StageEngine",
    "get_next_possible_stages",
    "HistoryWriter",
    "RouteGuard",
    "RouteDecision",
    "get_route_guard",
]
