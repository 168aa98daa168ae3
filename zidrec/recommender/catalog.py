"""Catalog store and product projection.

Products are kept as their raw upstream records so a snapshot can be
persisted exactly as it was received. Normalized attributes are computed
through the extractors in :mod:`zidrec.recommender.fields`.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from zidrec.recommender.fields import (
    extract_category_ids,
    extract_image,
    extract_price,
    extract_title,
    to_int,
)

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Product:
    """A catalog product.

    Attributes:
        id: Product identifier.
        raw: Upstream record, read-only.
        categories: Normalized category ids.
    """

    id: int
    raw: Mapping[str, Any] = field(repr=False, compare=False)
    categories: Tuple[int, ...] = ()

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Optional["Product"]:
        """Build a product from an upstream record.

        Returns ``None`` when the record carries no usable ``id``.
        """
        product_id = to_int(record.get("id"))
        if product_id is None:
            return None
        return cls(
            id=product_id,
            raw=MappingProxyType(dict(record)),
            categories=extract_category_ids(record),
        )

    def shares_category(self, categories: Iterable[int]) -> bool:
        """Whether the product belongs to any of ``categories``."""
        return not set(self.categories).isdisjoint(categories)


def project(product: Product) -> Dict[str, Any]:
    """Project a product onto the public ``{id, title, image, price}`` shape."""
    raw = product.raw
    return {
        "id": to_int(raw.get("id")),
        "title": extract_title(raw),
        "image": extract_image(raw),
        "price": extract_price(raw),
    }


class Catalog(Mapping[int, Product]):
    """Immutable mapping from product id to :class:`Product`.

    Iteration follows the order in which records were supplied; a later
    record with an already seen id replaces the earlier one in place.
    """

    def __init__(self, products: Iterable[Product] = ()):
        self._products: Dict[int, Product] = {}
        for product in products:
            self._products[product.id] = product

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> "Catalog":
        """Build a catalog from raw product records, skipping unusable ones."""
        products = []
        skipped = 0
        for record in records:
            product = (
                Product.from_record(record) if isinstance(record, Mapping) else None
            )
            if product is None:
                skipped += 1
                continue
            products.append(product)

        if skipped:
            logger.warning(
                "Skipped product records without a usable id",
                extra={"skipped": skipped},
            )
        return cls(products)

    def __getitem__(self, product_id: int) -> Product:
        return self._products[product_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._products)

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def records(self) -> List[Dict[str, Any]]:
        """Return the raw records, suitable for persisting."""
        return [dict(product.raw) for product in self._products.values()]
