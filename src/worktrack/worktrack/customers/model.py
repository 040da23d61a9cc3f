from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

CUSTOMER_FIELDS = ("name", "state", "county", "contact_name", "contact_email", "contact_phone")


@dataclass(frozen=True)
class Customer:
    name: str
    state: str
    county: str
    contact_name: str
    contact_email: str
    contact_phone: str
    id: Optional[int] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        return {"id": data.pop("id"), **data}
