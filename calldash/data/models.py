import re
from datetime import datetime
from typing import Any, List, Optional

import pandas as pd
from pydantic import BaseModel, Field, model_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class ChartDatum(BaseModel):
    """One call-duration bucket. `value` mirrors `count` for the chart layer."""

    name: str
    count: int = Field(default=0, ge=0)
    value: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _mirror_count(self):
        self.value = self.count
        return self

    def set_count(self, count: int) -> None:
        self.count = count
        self.value = count


class SadPathDatum(BaseModel):
    issue: str
    value: int
    fill: str


class HostilityDatum(BaseModel):
    label: str
    value: int
    color: str


ChartDataset = List[ChartDatum]


class PersistedRecord(BaseModel):
    """Stored form of a saved dataset: `{email, data, updated_at}` in the document store."""

    key: str
    dataset: List[ChartDatum]
    saved_at: datetime

    def to_document(self) -> dict:
        return {
            "email": self.key,
            "data": dataset_to_payload(self.dataset),
            "updated_at": self.saved_at.isoformat(),
        }

    @classmethod
    def from_document(cls, document: Any) -> "PersistedRecord":
        """Raises ValueError when the document is not a saved chart."""
        if not isinstance(document, dict):
            raise ValueError(f"expected a document, got {type(document).__name__}")
        return cls(
            key=document.get("email", ""),
            dataset=dataset_from_payload(document.get("data")),
            saved_at=document.get("updated_at"),
        )


def parse_count(raw: Any) -> int:
    """
    Parse an edit-field value into a bucket count.
    Reads the leading integer ("12abc" -> 12, "7.9" -> 7); anything else is 0.
    Negative numbers clamp to 0.
    """
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        return max(0, int(raw))
    if raw is None:
        return 0
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 0
    return max(0, int(match.group(1)))


def is_valid_email(key: Optional[str]) -> bool:
    return bool(key) and EMAIL_PATTERN.match(key) is not None


def clone_dataset(dataset: ChartDataset) -> ChartDataset:
    """Independent copy of a dataset, with every value re-mirrored from its count."""
    return [ChartDatum(name=datum.name, count=datum.count) for datum in dataset]


def dataset_to_payload(dataset: ChartDataset) -> List[dict]:
    return [{"name": datum.name, "count": datum.count, "value": datum.count} for datum in dataset]


def dataset_from_payload(payload: Any) -> ChartDataset:
    """Rebuild a dataset from stored records. Raises ValueError on malformed input."""
    if not isinstance(payload, list):
        raise ValueError(f"expected a list of chart records, got {type(payload).__name__}")
    dataset = [ChartDatum.model_validate(item) for item in payload]
    names = [datum.name for datum in dataset]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate bucket names in {names}")
    return dataset


def percentage_view(dataset: ChartDataset) -> pd.DataFrame:
    """
    Derived view for the duration chart: each bucket's share of the total count.
    All shares are 0 when the total is 0.
    """
    df = pd.DataFrame(
        dataset_to_payload(dataset),
        columns=["name", "count", "value"],
    )
    total = int(df["count"].sum()) if not df.empty else 0
    if total > 0:
        df["percentage"] = [count * 100 / total for count in df["count"]]
    else:
        df["percentage"] = [0.0] * len(df)
    return df
