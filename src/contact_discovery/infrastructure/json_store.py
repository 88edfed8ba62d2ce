"""Native contact store backed by a JSON export of an address book."""

import json
from pathlib import Path
from typing import Any


def load_contact_records(path: Path) -> list[dict[str, Any]]:
    """Load and validate the export. Accepts a list or {"contacts": [...]}."""
    raw = path.read_text(encoding="utf-8")
    data = json.loads(raw)
    if isinstance(data, dict):
        data = data.get("contacts")
    if not isinstance(data, list):
        raise ValueError("Contacts file must be a list or have a 'contacts' list")
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise ValueError(f"Contact #{index} must be an object")
        if not str(record.get("id") or "").strip():
            raise ValueError(f"Contact #{index} must have 'id'")
    return data


class JsonContactStore:
    """Serves contacts from a file. permission mimics the OS status string."""

    def __init__(self, path: Path, permission: str = "granted") -> None:
        self._path = Path(path)
        self._permission = permission

    async def request_permissions(self) -> str:
        return self._permission

    async def get_permissions(self) -> str:
        return self._permission

    async def get_contacts(self) -> list[dict[str, Any]]:
        return load_contact_records(self._path)
