"""
Parsers for container environment lists.
"""
from typing import Dict, Iterable, Optional
from ..errors import MalformedInput


class EnvParser:
    """
    Parser for the KEY=VALUE environment list of an inspected container.
    """
    @staticmethod
    def parse_entries(entries: Optional[Iterable[str]], container_id: str = "") -> Dict[str, str]:
        """
        Builds a mapping from environment entries.

        Each entry is split on its first '='; the value keeps any further
        '=' characters. A later entry with the same key wins.

        Args:
            entries (Iterable[str]): Entries such as 'PATH=/usr/bin'. None is treated as empty.
            container_id (str): Used in error messages only.

        Returns:
            Dict[str, str]: Dictionary of environment variables.

        Raises:
            MalformedInput: If an entry contains no '='.
        """
        env = {}
        for entry in entries or ():
            if '=' not in entry:
                where = f" of container {container_id}" if container_id else ""
                raise MalformedInput(f"environment entry{where} has no '=': {entry!r}")
            key, value = entry.split('=', 1)
            env[key] = value
        return env
