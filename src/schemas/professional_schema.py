"""Professional records as supplied by the identity directory."""

import logging
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.utils import normalize_phone

logger = logging.getLogger(__name__)


class Professional(BaseModel):
    """A field professional and the service areas they cover."""
    professional_id: str = Field(min_length=1)
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    coverage: frozenset[int] = Field(default_factory=frozenset)

    model_config = {"frozen": True}

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = normalize_phone(value)
        return cleaned or None

    def covers(self, area_id: int) -> bool:
        return area_id in self.coverage


def parse_professional_records(records: Iterable[Any]) -> list[Professional]:
    """Validate raw directory records into Professional models.

    Records that do not match the contract are logged and dropped; the
    remaining records keep their input order.
    """
    professionals: list[Professional] = []
    for index, raw in enumerate(records):
        try:
            professionals.append(Professional.model_validate(raw))
        except ValidationError as exc:
            logger.warning(
                "Rejected directory record #%d: %d validation error(s): %s",
                index, exc.error_count(), exc.errors()[0]["msg"],
            )
    return professionals
