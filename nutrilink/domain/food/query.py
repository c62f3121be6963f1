"""
Search query syntax.

A query may narrow results to branded products:

- ``store:brand:product`` (e.g. ``walmart:great value:milk``)
- ``brand:product`` (e.g. ``ferrero:hazelnut spread``)

Any other query, including one with more than two colons, is a plain
product term. Only the product term is sent upstream and scored against;
store and brand filter the merged results by brand text.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from nutrilink.domain.food.models import CanonicalFoodItem


class SearchQuery(BaseModel):
    """Parsed search query."""

    model_config = ConfigDict(frozen=True)

    product: str = Field(..., description="Term sent to every source")
    brand: Optional[str] = Field(None, description="Lower-cased brand filter")
    store: Optional[str] = Field(None, description="Lower-cased store filter")

    @property
    def has_brand_filter(self) -> bool:
        return bool(self.brand or self.store)

    @classmethod
    def parse(cls, raw: str) -> SearchQuery:
        """Split a raw query on ``:``.

        Blank store or brand parts mean "no filter".

        Example:
            >>> SearchQuery.parse("Walmart:Great Value:milk")
            SearchQuery(product='milk', brand='great value', store='walmart')
            >>> SearchQuery.parse(":ferrero: nutella ").product
            'nutella'
            >>> SearchQuery.parse("apple").has_brand_filter
            False
        """
        text = raw.strip()
        parts = text.split(":")

        if len(parts) == 3:
            store, brand, product = parts
            return cls(product=product.strip(), brand=_filter(brand), store=_filter(store))
        if len(parts) == 2:
            brand, product = parts
            return cls(product=product.strip(), brand=_filter(brand))
        return cls(product=text)

    def matches(self, item: CanonicalFoodItem) -> bool:
        """Whether an item's brand text contains every requested filter.

        Brand text is the brand owner and brand name together. Without a
        filter every item matches; with one, unbranded items never do.
        """
        if not self.has_brand_filter:
            return True

        brand_text = " ".join(
            part for part in (item.brand_owner, item.brand_name) if part
        ).lower()
        if not brand_text:
            return False
        if self.store and self.store not in brand_text:
            return False
        if self.brand and self.brand not in brand_text:
            return False
        return True


def _filter(part: str) -> Optional[str]:
    return part.strip().lower() or None
