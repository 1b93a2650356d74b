"""
Product data models for the Rinkan Monitor.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser
from dateutil import tz

REQUIRED_FIELDS = (
    "product_code",
    "created_at",
)


def parse_created_at(value: Any, default_tz: Optional[tzinfo] = None) -> datetime:
    """
    Parse a search API timestamp into an aware datetime.

    Naive values are read in ``default_tz``, or UTC when none is given.
    """
    if value in (None, ""):
        raise ValueError("created_at is missing")

    try:
        created_at = date_parser.parse(str(value))
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid created_at '{value}': {e}")

    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=default_tz or tz.UTC)
    return created_at


@dataclass
class Product:
    """A product listing returned by the search API."""

    brand_name: str
    product_name: str
    product_code: str
    model_name: str
    size: str
    product_condition: str
    price: Any
    created_at: datetime
    images: List[str]

    @classmethod
    def from_api(
        cls, data: Dict[str, Any], default_tz: Optional[tzinfo] = None
    ) -> "Product":
        """
        Build a product from a search API item.

        Args:
            data: Product object from the ``products`` list
            default_tz: Timezone applied to naive ``created_at`` values

        Returns:
            Product instance

        Raises:
            ValueError: If a required field is missing or unparseable
        """
        if not isinstance(data, dict):
            raise ValueError("Product entry must be an object")

        missing = [key for key in REQUIRED_FIELDS if data.get(key) in (None, "")]
        if missing:
            raise ValueError(f"Product missing required fields: {missing}")

        created_at = parse_created_at(data["created_at"], default_tz)

        images = data.get("images") or []
        if not isinstance(images, list):
            raise ValueError("Product images must be a list")

        product = cls(
            brand_name=str(data.get("brand_name") or ""),
            product_name=str(data.get("product_name") or ""),
            product_code=str(data["product_code"]),
            model_name=str(data.get("model_name") or ""),
            size=str(data.get("size") or "-"),
            product_condition=str(data.get("product_condition") or "-"),
            price=data.get("price"),
            created_at=created_at,
            images=[str(image) for image in images if image],
        )
        product.validate()
        return product

    @property
    def thumbnail_url(self) -> Optional[str]:
        return self.images[0] if self.images else None

    def is_newer_than(self, watermark: Optional[datetime]) -> bool:
        """Check if the product was created after the watermark."""
        if watermark is None:
            return True
        return self.created_at > watermark

    def validate(self) -> bool:
        """Validate the product data."""
        if not self.product_code.strip():
            raise ValueError("Product code cannot be empty")

        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware")

        return True
