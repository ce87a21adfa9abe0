"""
Alias Service

Maps channel names found in subscriptions to canonical channel names.
"""
import logging
from pathlib import Path

from iptv_aggregator.utils.file_operations import iter_entries, read_source_lines


logger = logging.getLogger(__name__)


class AliasTable:
    """
    Ordered alias -> canonical name table.

    Fuzzy resolution walks the pairs in insertion order and the first
    containment hit wins, so the order of the source file decides ties.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[str, str]] = []
        self._positions: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def add(self, alias: str, canonical_name: str) -> None:
        """Register an alias; a repeated alias keeps its slot and takes the new name"""
        key = alias.lower()
        position = self._positions.get(key)
        if position is None:
            self._positions[key] = len(self._entries)
            self._entries.append((key, canonical_name))
        else:
            self._entries[position] = (key, canonical_name)

    def resolve(self, name: str) -> str:
        """
        Resolve a channel name to its canonical name

        Args:
            name: Channel name as seen in a subscription

        Returns:
            Canonical name from an exact or containment match, else `name` unchanged
        """
        lower_name = name.lower()

        position = self._positions.get(lower_name)
        if position is not None:
            return self._entries[position][1]

        for alias, canonical_name in self._entries:
            if alias in lower_name or lower_name in alias:
                return canonical_name

        return name

    @classmethod
    def from_lines(cls, lines: list[str]) -> "AliasTable":
        """Build a table from `canonical,alias1,alias2,...` lines"""
        table = cls()
        for line in iter_entries(lines):
            parts = [part.strip() for part in line.split(",")]
            if len(parts) < 2:
                logger.warning(f"Alias line has no aliases, skipping: {line}")
                continue

            canonical_name = parts[0]
            aliases = [alias for alias in parts[1:] if alias]
            if not canonical_name or not aliases:
                logger.warning(f"Alias line has an empty name or alias list, skipping: {line}")
                continue

            for alias in aliases:
                table.add(alias, canonical_name)

        return table


def load_aliases(alias_file: Path) -> AliasTable:
    """
    Load alias rules from file

    A missing file disables aliasing for the run.
    """
    lines = read_source_lines(alias_file)
    if lines is None:
        logger.info(f"Alias file not found, skipping: {alias_file}")
        return AliasTable()

    table = AliasTable.from_lines(lines)
    logger.info(f"Loaded {len(table)} alias rules from {alias_file}")
    return table
