"""Tool contract, registry and built-in tools."""

from agent_runtime.tools.base import Tool, ToolInput, ToolOutput, ToolRegistry
from agent_runtime.tools.builtin import CalculatorTool, StringTool
from agent_runtime.tools.filesystem import FileEntry, FileSystemBackend, FileSystemTool, LocalBackend
from agent_runtime.tools.http import ConfiguredHttpTool, HttpTool

__all__ = [
    "Tool",
    "ToolInput",
    "ToolOutput",
    "ToolRegistry",
    "CalculatorTool",
    "StringTool",
    "HttpTool",
    "ConfiguredHttpTool",
    "FileEntry",
    "FileSystemBackend",
    "FileSystemTool",
    "LocalBackend",
]
