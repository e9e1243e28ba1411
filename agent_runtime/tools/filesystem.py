"""Filesystem tool over a pluggable storage backend.

The local backend can be sandboxed to a base directory: every path is
resolved (symlinks and ``..`` included) before use and anything that lands
outside the base directory is refused. A read-only backend refuses writes and
deletes before touching storage.
"""

import asyncio
import shutil
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import Field

from agent_runtime.exceptions import ToolFilesystemError, ToolInvalidInput, ToolPermissionDenied
from agent_runtime.tools.base import Tool, ToolInput, ToolOutput


@dataclass
class FileEntry:
    name: str
    path: str
    is_directory: bool
    size: Optional[int] = None
    modified: Optional[float] = None


class FileSystemBackend(ABC):
    backend_type: str

    @abstractmethod
    async def read(self, path: str) -> str: ...

    @abstractmethod
    async def write(self, path: str, content: str) -> None: ...

    @abstractmethod
    async def list(self, path: str) -> list[FileEntry]: ...

    @abstractmethod
    async def delete(self, path: str) -> None: ...

    @abstractmethod
    async def exists(self, path: str) -> bool: ...

    @property
    @abstractmethod
    def read_only(self) -> bool: ...


class LocalBackend(FileSystemBackend):
    """Local disk, optionally sandboxed to ``base_dir``."""

    backend_type = "local"

    def __init__(self, base_dir: Optional[Union[str, Path]] = None, read_only: bool = False):
        self.base_dir = Path(base_dir).resolve() if base_dir is not None else None
        self._read_only = read_only

    @property
    def read_only(self) -> bool:
        return self._read_only

    def resolve_path(self, path: str) -> Path:
        """Map a tool path to a real path, enforcing the sandbox."""
        if self.base_dir is None:
            return Path(path)

        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.base_dir / candidate
        resolved = candidate.resolve()
        if not resolved.is_relative_to(self.base_dir):
            raise ToolPermissionDenied(f"Path outside allowed directory: {path}")
        return resolved

    def _ensure_writable(self, operation: str) -> None:
        if self._read_only:
            raise ToolPermissionDenied(
                f"{operation} operation not allowed on read-only filesystem"
            )

    async def read(self, path: str) -> str:
        resolved = self.resolve_path(path)
        try:
            return await asyncio.to_thread(resolved.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ToolFilesystemError(f"Read error: {e}") from e

    async def write(self, path: str, content: str) -> None:
        self._ensure_writable("Write")
        resolved = self.resolve_path(path)

        def _write() -> None:
            resolved.parent.mkdir(parents=True, exist_ok=True)
            resolved.write_text(content, encoding="utf-8")

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise ToolFilesystemError(f"Write error: {e}") from e

    async def list(self, path: str) -> list[FileEntry]:
        resolved = self.resolve_path(path)
        if not resolved.is_dir():
            raise ToolInvalidInput(f"Path is not a directory: {path}")

        def _scan() -> list[FileEntry]:
            entries = []
            for child in sorted(resolved.iterdir()):
                stat = child.stat()
                is_dir = child.is_dir()
                entries.append(
                    FileEntry(
                        name=child.name,
                        path=str(child),
                        is_directory=is_dir,
                        size=None if is_dir else stat.st_size,
                        modified=stat.st_mtime,
                    )
                )
            return entries

        try:
            return await asyncio.to_thread(_scan)
        except OSError as e:
            raise ToolFilesystemError(f"List error: {e}") from e

    async def delete(self, path: str) -> None:
        self._ensure_writable("Delete")
        resolved = self.resolve_path(path)
        if self.base_dir is not None and resolved == self.base_dir:
            raise ToolPermissionDenied("Refusing to delete the sandbox root")

        def _delete() -> None:
            if resolved.is_dir() and not resolved.is_symlink():
                shutil.rmtree(resolved)
            else:
                resolved.unlink()

        try:
            await asyncio.to_thread(_delete)
        except OSError as e:
            raise ToolFilesystemError(f"Delete error: {e}") from e

    async def exists(self, path: str) -> bool:
        return self.resolve_path(path).exists()


class FileSystemInput(ToolInput):
    operation: Literal["read", "write", "list", "delete"] = Field(
        ..., description="Operation to perform"
    )
    path: str = Field(..., description="File or directory path")
    content: Optional[str] = Field(None, description="Content to write (for write operation)")


class FileSystemTool(Tool):
    description = "Perform filesystem operations (read, write, list, delete)"
    input_model = FileSystemInput

    def __init__(self, backend: Optional[FileSystemBackend] = None, name: str = "filesystem"):
        self.name = name
        self.backend = backend or LocalBackend()

    @classmethod
    def local(
        cls,
        base_dir: Optional[Union[str, Path]] = None,
        read_only: bool = False,
        name: str = "filesystem",
    ) -> "FileSystemTool":
        return cls(LocalBackend(base_dir, read_only), name=name)

    async def run(self, input: FileSystemInput) -> ToolOutput:
        path = input.path
        metadata = {
            "operation": input.operation,
            "path": path,
            "backend": self.backend.backend_type,
        }

        if input.operation == "read":
            content = await self.backend.read(path)
            return ToolOutput.ok(content, metadata={**metadata, "size": len(content)})

        if input.operation == "write":
            if input.content is None:
                raise ToolInvalidInput("Missing content for write")
            await self.backend.write(path, input.content)
            size = len(input.content.encode("utf-8"))
            return ToolOutput.ok(
                f"Successfully wrote {size} bytes to {path}",
                metadata={**metadata, "size": size},
            )

        if input.operation == "list":
            entries = await self.backend.list(path)
            names = [f"{e.name}/" if e.is_directory else e.name for e in entries]
            return ToolOutput.ok(
                "\n".join(names),
                metadata={
                    **metadata,
                    "count": len(entries),
                    "entries": [asdict(e) for e in entries],
                },
            )

        await self.backend.delete(path)
        return ToolOutput.ok(f"Successfully deleted {path}", metadata=metadata)
