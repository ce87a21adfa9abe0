"""
File operation utilities

This module handles reading line-oriented source files and writing output files.
"""
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

import aiofiles
import aiofiles.os


logger = logging.getLogger(__name__)


def read_source_lines(file_path: Path) -> list[str] | None:
    """
    Read a UTF-8 source file as a list of stripped lines

    Blank lines are kept so callers can report 1-based line numbers.

    Args:
        file_path: Path to the source file

    Returns:
        Stripped lines, or None if the file does not exist

    Raises:
        OSError: If the file exists but can't be read
    """
    if not file_path.exists():
        return None

    content = file_path.read_text(encoding="utf-8-sig")
    return [line.strip() for line in content.splitlines()]


def iter_entries(lines: Iterable[str]) -> Iterator[str]:
    """Yield non-blank lines that are not `#` comments"""
    for line in lines:
        if line and not line.startswith("#"):
            yield line


async def write_text_files(contents: dict[Path, str]) -> list[Path]:
    """
    Write several files as one set

    Every file is staged as a sibling `.tmp` before any destination is
    replaced, so a write error leaves all previous files in place.

    Args:
        contents: Destination path -> text

    Returns:
        The destination paths
    """
    staged: list[tuple[Path, Path]] = []
    try:
        for file_path, content in contents.items():
            file_path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = file_path.with_name(f"{file_path.name}.tmp")
            staged.append((temp_file, file_path))
            async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
                await f.write(content)
            logger.debug(f"Staged {len(content)} characters for {file_path}")

        for temp_file, file_path in staged:
            await aiofiles.os.replace(temp_file, file_path)
    except OSError:
        for temp_file, _ in staged:
            cleanup_temp_file(temp_file)
        raise

    return [file_path for _, file_path in staged]


def cleanup_temp_file(file_path: Path) -> bool:
    """
    Safely delete a temporary file

    Args:
        file_path: Path to file to delete

    Returns:
        True if deleted successfully, False otherwise
    """
    if not file_path or not file_path.exists():
        return False

    try:
        file_path.unlink()
        logger.debug(f"Cleaned up temporary file: {file_path}")
        return True
    except (OSError, PermissionError) as e:
        logger.warning(f"Failed to delete temporary file {file_path}: {e}")
        return False
