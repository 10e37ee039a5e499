"""Repository for livestock thermal scan records."""

from __future__ import annotations

from typing import Any

from infrastructure.database.ops.thermal_records import ThermalRecordOperations


class ThermalRecordRepository:
    def __init__(self, backend: ThermalRecordOperations) -> None:
        self._backend = backend

    def create(self, record: dict[str, Any]) -> dict[str, Any]:
        return self._backend.insert_thermal_record(record)

    def search(
        self,
        *,
        search: str | None = None,
        month: int | None = None,
        year: int | None = None,
        limit: int = 500,
    ) -> list[dict[str, Any]]:
        return self._backend.list_thermal_records(search=search, month=month, year=year, limit=limit)
