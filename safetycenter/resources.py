"""
Resource tables used to resolve ``@string/<name>`` references.

The parser only needs ``get_identifier``; anything exposing that method
(an Android ``Resources`` wrapper, a test double) can be passed in.
"""

import json
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Tuple

from .models import ID_NULL


class ResourceTable(Protocol):
    """Read-only lookup of resource identifiers."""

    def get_identifier(self, name: str, def_type: Optional[str],
                       def_package: Optional[str]) -> int:
        """Return the identifier for ``name`` or ``ID_NULL`` when it does not exist.

        ``name`` may be ``type/entry`` or fully qualified as
        ``package:type/entry``; ``def_type`` and ``def_package`` fill in the
        missing parts.
        """
        ...


def split_resource_name(name: str, def_type: Optional[str] = None,
                        def_package: Optional[str] = None
                        ) -> Tuple[Optional[str], Optional[str], str]:
    """Split a resource name into (package, type, entry)."""
    package, type_, entry = def_package, def_type, name
    if ':' in entry:
        package, entry = entry.split(':', 1)
    if '/' in entry:
        type_, entry = entry.split('/', 1)
    return package, type_, entry


class MappingResourceTable:
    """In-memory resource table keyed by package, then ``type/entry``.

    Example:
        MappingResourceTable({"com.example": {"string/g_title": 42}})
    """

    def __init__(self, entries: Mapping[str, Mapping[str, int]]):
        self._entries: Dict[str, Dict[str, int]] = {
            package: dict(table) for package, table in entries.items()
        }

    def get_identifier(self, name: str, def_type: Optional[str],
                       def_package: Optional[str]) -> int:
        package, type_, entry = split_resource_name(name, def_type, def_package)
        if package is None or type_ is None or not entry:
            return ID_NULL
        return self._entries.get(package, {}).get(f"{type_}/{entry}", ID_NULL)

    @property
    def packages(self) -> list:
        return sorted(self._entries)


def load_resource_table(filepath: str) -> MappingResourceTable:
    """Load a MappingResourceTable from a JSON file.

    The file maps package names to ``{"type/entry": id}`` objects. Ids must
    be positive integers.
    """
    data = json.loads(Path(filepath).read_text(encoding='utf-8'))
    if not isinstance(data, dict):
        raise ValueError("Resource table must be a JSON object keyed by package name")
    for package, table in data.items():
        if not isinstance(table, dict):
            raise ValueError(f"Resources for package '{package}' must be a JSON object")
        for key, value in table.items():
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"Invalid resource id for '{package}:{key}': {value!r}")
    return MappingResourceTable(data)
