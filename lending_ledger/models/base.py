"""Shared base models and common type aliases."""

import logging
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import ModelValidationError


logger = logging.getLogger(__name__)

Amount = int
Tick = int
Percent = int

UINT64_MAX = 2**64 - 1
UINT128_MAX = 2**128 - 1


class BaseLedgerModel(BaseModel):
    """Base record schema for ledger-owned domain models."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=False,
    )

    def to_record(self) -> Dict[str, Any]:
        """Serialize model into a plain dictionary for storage or audit export.

        Returns:
            Dict[str, Any]: Serialized model payload.

        Raises:
            ModelValidationError: If serialization fails.
        """
        try:
            return self.model_dump(mode="json", exclude_none=True)
        except Exception as exc:
            logger.exception("Failed to serialize %s", self.__class__.__name__)
            raise ModelValidationError(str(exc)) from exc

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "BaseLedgerModel":
        """Create model instance from a stored record.

        Args:
            data: Record payload.

        Returns:
            BaseLedgerModel: Typed domain instance.

        Raises:
            ModelValidationError: If payload parsing fails.
        """
        try:
            return cls(**dict(data))
        except ValidationError as exc:
            logger.exception("Failed to parse record payload for %s", cls.__name__)
            raise ModelValidationError(str(exc)) from exc
