from dataclasses import asdict
from typing import Any

from pydantic import BaseModel

from src.shuk_query.domain.filters import FilterState


class SetFilterRequest(BaseModel):
    value: Any = None


def filter_state_payload(state: FilterState) -> dict[str, Any]:
    """Enum members serialise to their wire values; tuples become lists."""
    data = asdict(state)
    return {
        key: (list(value) if isinstance(value, tuple) else value)
        for key, value in data.items()
    }
