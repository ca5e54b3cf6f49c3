"""
Atomic file writer for generated modules.

Ensures that file writes are atomic to prevent half-written modules
from interrupted operations.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import OutputValidationError
from ..log import get_logger

logger = get_logger("writer")

_QUOTES = "\"'`"


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def __init__(self, validate_typescript: Callable[[str], None] | None = None, atomic: bool = True):
        """Initialize the atomic writer.

        Args:
            validate_typescript: Optional validation function for TypeScript code
            atomic: Write through a temp file + rename (plain write otherwise)
        """
        self._validate_typescript = validate_typescript or self._default_validate_typescript
        self.atomic = atomic

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            OutputValidationError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        if validate:
            self.validate(content, path.name)

        if not self.atomic:
            path.write_text(content, encoding="utf-8")
            return

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def write_all(self, files: dict[Path, str], validate: bool = True) -> None:
        """Validate every file first, then write them all (nothing is written if one is invalid)."""
        if validate:
            for path, content in files.items():
                self.validate(content, path.name)
        for path, content in files.items():
            self.write(path, content, validate=False)
            logger.info("Wrote %s", path)

    def validate(self, content: str, label: str = "module") -> None:
        try:
            self._validate_typescript(content)
        except OutputValidationError as e:
            raise OutputValidationError(f"{label}: {e}") from e

    def _default_validate_typescript(self, content: str) -> None:
        """Default TypeScript validation.

        Args:
            content: TypeScript code to validate

        Raises:
            OutputValidationError: If validation fails
        """
        if not content.strip():
            raise OutputValidationError("Generated module is empty")

        # Check for balanced braces outside strings and comments (simple heuristic)
        open_braces, close_braces = _count_braces(content)
        if open_braces != close_braces:
            raise OutputValidationError(f"Generated code has unbalanced braces: {open_braces} open, {close_braces} close")


def _count_braces(content: str) -> tuple[int, int]:
    """Count { and } that are not inside string literals or comments."""
    open_braces = close_braces = 0
    i = 0
    length = len(content)
    while i < length:
        char = content[i]
        if char in _QUOTES:
            i += 1
            while i < length and content[i] != char:
                i += 2 if content[i] == "\\" else 1
        elif content.startswith("//", i):
            newline = content.find("\n", i)
            i = length if newline < 0 else newline
        elif content.startswith("/*", i):
            end = content.find("*/", i + 2)
            i = length if end < 0 else end + 1
        elif char == "{":
            open_braces += 1
        elif char == "}":
            close_braces += 1
        i += 1
    return open_braces, close_braces
