"""Read-only procedure catalog loaded once at startup."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from eligibility_service.models.schema import ProcedureDescriptor
from eligibility_service.utils.errors import ConfigurationError

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "dental_cdt_codes.json"


class ProcedureCatalog:
    """Ordered, immutable list of CDT procedure descriptors.

    Catalog order is part of the report contract: every report lists
    procedures in exactly this order.
    """

    def __init__(self, entries: Iterable[ProcedureDescriptor]) -> None:
        self._entries: Tuple[ProcedureDescriptor, ...] = tuple(entries)
        self._by_code: Dict[str, ProcedureDescriptor] = {}
        for entry in self._entries:
            if entry.code in self._by_code:
                raise ConfigurationError(f"duplicate procedure code in catalog: {entry.code}")
            self._by_code[entry.code] = entry

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "ProcedureCatalog":
        try:
            return cls(
                ProcedureDescriptor(
                    code=record["code"],
                    description=record.get("description", ""),
                    category=record.get("category", ""),
                )
                for record in records
            )
        except (KeyError, TypeError, AttributeError, PydanticValidationError) as exc:
            raise ConfigurationError(f"malformed procedure catalog entry: {exc}") from exc

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ProcedureCatalog":
        """Load a catalog from JSON.

        Accepts a bare list of ``{code, description, category}`` records or the
        ``{"success": ..., "data": {"procedures": [...]}}`` envelope.
        """
        catalog_path = Path(path)
        try:
            payload = json.loads(catalog_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigurationError(f"procedure catalog not found: {catalog_path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"procedure catalog unreadable: {catalog_path}: {exc}") from exc

        records = _extract_records(payload)
        if records is None:
            raise ConfigurationError(f"procedure catalog has no procedures list: {catalog_path}")
        return cls.from_records(records)

    def __iter__(self) -> Iterator[ProcedureDescriptor]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    @property
    def entries(self) -> Tuple[ProcedureDescriptor, ...]:
        return self._entries

    def codes(self) -> List[str]:
        return [entry.code for entry in self._entries]

    def get(self, code: str) -> Optional[ProcedureDescriptor]:
        return self._by_code.get(code)

    def head(self, limit: int) -> Tuple[ProcedureDescriptor, ...]:
        """First ``limit`` entries in catalog order."""
        return self._entries[: max(limit, 0)]


def _extract_records(payload: Any) -> Optional[List[Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        data = payload.get("data", payload)
        if isinstance(data, dict) and isinstance(data.get("procedures"), list):
            return data["procedures"]
    return None


def load_default_catalog() -> ProcedureCatalog:
    """Load the bundled CDT catalog."""
    return ProcedureCatalog.from_file(DEFAULT_CATALOG_PATH)


def load_catalog(path: Optional[str] = None) -> ProcedureCatalog:
    """Load the configured catalog, or the bundled one when no path is set."""
    if path:
        return ProcedureCatalog.from_file(path)
    return load_default_catalog()
