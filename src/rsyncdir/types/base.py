"""Base model class for rsyncdir models with serialization support."""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict


class RsyncDirBaseModel(BaseModel):
    """Base model for all rsyncdir models with built-in serialization.

    Provides common functionality for all models including:
    - Serialization to a JSON-compatible dictionary via to_dict()
    - Consistent configuration
    """
    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to a JSON-compatible dictionary.

        UUIDs and datetimes are rendered the same way they are written to
        the ledger file.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return self.model_dump(mode="json")
