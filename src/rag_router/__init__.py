"""Intent-routed chat agent package."""

from .config import AppSettings, RouterConfig
from .types import IntentMode, RouteDecision, RouteKind

__all__ = ["AppSettings", "IntentMode", "RouteDecision", "RouteKind", "RouterConfig"]
