"""GridStatus API endpoints and schema mappings for ERCOT prices."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class GridStatusEndpoints:
    """GridStatus dataset identifiers used for ERCOT settlement point prices."""

    base_url: str = "https://api.gridstatus.io/v1"
    query_path: str = "/datasets/{dataset}/query"

    # Key data products
    day_ahead_hourly: str = "ercot_spp_day_ahead_hourly"
    real_time_5_minute: str = "ercot_spp_real_time_5_minute"

    # Friendly aliases -> canonical GridStatus dataset slugs
    dataset_aliases: Dict[str, str] = field(default_factory=lambda: {
        "ercot_day_ahead_hourly": "ercot_spp_day_ahead_hourly",
        "ercot_spp_real_time_5_minute": "ercot_lmp_by_settlement_point",
    })

    def resolve_dataset(self, dataset: str) -> str:
        return self.dataset_aliases.get(dataset, dataset)

    def query_url(self, dataset: str) -> str:
        path = self.query_path.format(dataset=self.resolve_dataset(dataset))
        return f"{self.base_url.rstrip('/')}{path}"


@dataclass
class GridStatusSchemaMapping:
    """Raw GridStatus field names mapped onto PricePoint fields."""

    price_schema: Dict[str, str] = field(default_factory=lambda: {
        "interval_start_local": "timestamp",
        "interval_start_utc": "timestamp_utc",
        "location": "settlement_point",
        "spp": "price",
    })
