"""Recommendation queries over a loaded snapshot.

Two entry points: products frequently bought with a viewed product, and
products frequently bought with the contents of a cart. Both rank partners
from the co-occurrence matrix and top up with a fallback sample drawn from
the seed product's categories (or the whole catalog) when there is not
enough co-purchase signal.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

from zidrec.recommender.catalog import Catalog, Product, project
from zidrec.recommender.fields import to_int
from zidrec.recommender.snapshot import Snapshot

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_MAX_RECOMMENDATIONS = 5

RandomState = Union[None, int, np.random.Generator]


def rank_scores(scores: Dict[int, int]) -> List[int]:
    """Order candidate ids by score descending, then by id ascending."""
    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return [pid for pid, _ in ranked]


class Recommender:
    """Answers recommendation queries against one :class:`Snapshot`.

    The snapshot is only read, so one instance can serve concurrent queries.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        max_results: int = DEFAULT_MAX_RECOMMENDATIONS,
        random_state: RandomState = None,
    ):
        """Initialize the recommender.

        Args:
            snapshot: Loaded catalog, orders and co-occurrence matrix.
            max_results: Maximum number of products per query.
            random_state: Seed or generator for the fallback shuffle.
        """
        self.snapshot = snapshot
        self.max_results = max_results
        self.rng = np.random.default_rng(random_state)

    @property
    def catalog(self) -> Catalog:
        return self.snapshot.catalog

    def recommend_for_product(
        self, product_id: Optional[int]
    ) -> List[Dict[str, Any]]:
        """Recommend products bought together with ``product_id``.

        Returns an empty list when the id is unset or unknown. Otherwise up
        to ``max_results`` projections: co-purchased products by count, then
        a fallback sample seeded on the product.
        """
        if not product_id or product_id not in self.catalog:
            logger.debug(f"Product {product_id} not in catalog")
            return []

        ranked = rank_scores(self.snapshot.cooccurrence.row(product_id))

        recommendations = []
        for candidate_id in ranked:
            if len(recommendations) >= self.max_results:
                break
            if candidate_id == product_id or candidate_id not in self.catalog:
                continue
            recommendations.append(project(self.catalog[candidate_id]))

        num_ranked = len(recommendations)
        if num_ranked < self.max_results:
            recommendations.extend(
                self.fallback(product_id, self.max_results - num_ranked)
            )

        logger.info(
            "Product recommendations generated",
            extra={
                "product_id": product_id,
                "num_ranked": num_ranked,
                "num_fallback": len(recommendations) - num_ranked,
            },
        )
        return recommendations

    def recommend_for_cart(
        self, cart_product_ids: Iterable[Any]
    ) -> List[Dict[str, Any]]:
        """Recommend products bought together with the contents of a cart.

        Co-occurrence counts are summed over every cart entry, so a product
        listed twice contributes its partners twice. Products already in the
        cart are never recommended. The fallback is seeded on the first cart
        product.
        """
        cart_ids = []
        for value in cart_product_ids:
            product_id = to_int(value)
            if product_id and product_id > 0:
                cart_ids.append(product_id)
        if not cart_ids:
            return []

        cart_set = set(cart_ids)
        scores: Dict[int, int] = defaultdict(int)
        for product_id in cart_ids:
            partners = self.snapshot.cooccurrence.row(product_id)
            for partner_id, count in partners.items():
                if partner_id in cart_set or partner_id not in self.catalog:
                    continue
                scores[partner_id] += count

        recommendations = []
        for candidate_id in rank_scores(scores):
            if len(recommendations) >= self.max_results:
                break
            if candidate_id not in self.catalog:
                continue
            recommendations.append(project(self.catalog[candidate_id]))

        num_ranked = len(recommendations)
        if num_ranked < self.max_results:
            recommendations.extend(
                self.fallback(
                    cart_ids[0],
                    self.max_results - num_ranked,
                    exclude_ids=cart_ids,
                )
            )

        logger.info(
            "Cart recommendations generated",
            extra={
                "cart_size": len(cart_set),
                "num_ranked": num_ranked,
                "num_fallback": len(recommendations) - num_ranked,
            },
        )
        return recommendations

    def fallback(
        self,
        seed_product_id: int,
        limit: int,
        exclude_ids: Sequence[int] = (),
    ) -> List[Dict[str, Any]]:
        """Random sample of products related to ``seed_product_id``.

        Draws from products sharing at least one category with the seed. If
        the seed has no categories, or none of the other products shares one,
        draws from the whole catalog. The seed and ``exclude_ids`` are never
        returned.
        """
        if limit <= 0 or seed_product_id not in self.catalog:
            return []

        seed = self.catalog[seed_product_id]
        excluded = set(exclude_ids)
        excluded.add(seed_product_id)

        pool = [
            product for pid, product in self.catalog.items() if pid not in excluded
        ]
        candidates = self._same_category(seed, pool)
        if not candidates:
            candidates = pool

        order = self.rng.permutation(len(candidates))
        return [project(candidates[int(i)]) for i in order[:limit]]

    @staticmethod
    def _same_category(seed: Product, pool: List[Product]) -> List[Product]:
        if not seed.categories:
            return []
        return [
            product for product in pool if product.shares_category(seed.categories)
        ]
