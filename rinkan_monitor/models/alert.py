"""
Alert formatting models.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class FormattedAlert:
    """Formatted alert ready for delivery."""

    title: str
    url: str
    payload: Dict[str, Any]

    def validate(self) -> bool:
        """Validate formatted alert data."""
        if not isinstance(self.title, str):
            raise ValueError("title must be a string")

        if not self.title.strip():
            raise ValueError("title cannot be empty")

        # Discord rejects embed titles over 256 characters
        if len(self.title) > 256:
            raise ValueError("title too long (max 256 characters)")

        if not isinstance(self.payload, dict):
            raise ValueError("payload must be a dictionary")

        if not self.payload.get("embeds"):
            raise ValueError("payload must contain at least one embed")

        return True
