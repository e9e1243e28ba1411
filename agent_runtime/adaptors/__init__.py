"""Model adaptors for agent-runtime.

This module provides implementations of ModelAdaptor for various LLM providers.
"""

from agent_runtime.adaptors.anthropic import AnthropicAdaptor
from agent_runtime.adaptors.openai import OpenAIAdaptor

__all__ = ["AnthropicAdaptor", "OpenAIAdaptor"]
