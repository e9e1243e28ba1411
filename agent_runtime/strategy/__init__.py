"""Execution strategies."""

from typing import Optional

from agent_runtime.exceptions import ConfigError
from agent_runtime.hooks import HookRegistry
from agent_runtime.strategy.base import Strategy
from agent_runtime.strategy.react import ReActStrategy

STRATEGIES = {
    ReActStrategy.name: ReActStrategy,
}


def create_strategy(name: str, hooks: Optional[HookRegistry] = None) -> Strategy:
    """Instantiate the strategy registered under ``name``."""
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise ConfigError(
            f"Unknown strategy '{name}'. Available: {sorted(STRATEGIES)}"
        ) from None
    return strategy_cls(hooks=hooks)


__all__ = ["Strategy", "ReActStrategy", "STRATEGIES", "create_strategy"]
