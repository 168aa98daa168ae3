"""Co-occurrence model built from historical orders.

Each order contributes its distinct products once. The order x product
incidence matrix ``X`` is binary, so ``X.T @ X`` counts, for every pair of
products, the number of orders containing both. The diagonal (how many
orders contain a product at all) is dropped, leaving a symmetric matrix
without self-pairs.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix, diags

from zidrec.recommender.fields import extract_order_product_ids

# Configure module logger
logger = logging.getLogger(__name__)


class CooccurrenceMatrix:
    """Symmetric sparse matrix of product co-purchase counts.

    Rows and columns are indexed through ``product_id_to_idx``. Only products
    that co-occur with at least one other product have an index.
    """

    def __init__(
        self,
        matrix: Optional[csr_matrix] = None,
        product_id_to_idx: Optional[Dict[int, int]] = None,
    ):
        self.product_id_to_idx: Dict[int, int] = product_id_to_idx or {}
        self.idx_to_product_id: Dict[int, int] = {
            idx: pid for pid, idx in self.product_id_to_idx.items()
        }
        if matrix is None:
            n = len(self.product_id_to_idx)
            matrix = csr_matrix((n, n), dtype=np.int64)
        self.matrix = matrix

    def __contains__(self, product_id: object) -> bool:
        return product_id in self.product_id_to_idx

    def __len__(self) -> int:
        return len(self.product_id_to_idx)

    def __iter__(self) -> Iterator[int]:
        return iter(self.product_id_to_idx)

    @property
    def num_pairs(self) -> int:
        """Number of distinct unordered product pairs with a non-zero count."""
        return int(self.matrix.nnz // 2)

    def row(self, product_id: int) -> Dict[int, int]:
        """Return ``{partner_id: count}`` for a product (empty if unknown)."""
        idx = self.product_id_to_idx.get(product_id)
        if idx is None:
            return {}

        start, end = self.matrix.indptr[idx], self.matrix.indptr[idx + 1]
        partners = self.matrix.indices[start:end]
        counts = self.matrix.data[start:end]
        return {
            self.idx_to_product_id[int(j)]: int(count)
            for j, count in zip(partners, counts)
            if count > 0
        }

    def count(self, product_a: int, product_b: int) -> int:
        """Return the number of orders containing both products."""
        if product_a == product_b:
            return 0
        idx_a = self.product_id_to_idx.get(product_a)
        idx_b = self.product_id_to_idx.get(product_b)
        if idx_a is None or idx_b is None:
            return 0
        return int(self.matrix[idx_a, idx_b])

    def to_dict(self) -> Dict[int, Dict[int, int]]:
        """Return the matrix as nested dicts, omitting products without partners."""
        result = {}
        for pid in self:
            row = self.row(pid)
            if row:
                result[pid] = row
        return result


def build_cooccurrence(orders: Iterable[Any]) -> CooccurrenceMatrix:
    """Build the co-occurrence matrix from historical orders.

    Product ids are read from each order's line items and deduplicated per
    order, so an order counts at most once for any pair. Orders with fewer
    than two distinct products contribute nothing.

    Args:
        orders: Raw order records. Non-mapping entries are ignored.

    Returns:
        A freshly built :class:`CooccurrenceMatrix`.
    """
    records = []
    num_orders = 0
    for order_idx, order in enumerate(orders):
        num_orders += 1
        if not isinstance(order, Mapping):
            continue
        product_ids = extract_order_product_ids(order)
        if len(product_ids) < 2:
            continue
        records.extend((order_idx, pid) for pid in product_ids)

    if not records:
        logger.info(
            "No co-purchases found, built empty co-occurrence matrix",
            extra={"num_orders": num_orders},
        )
        return CooccurrenceMatrix()

    df = pd.DataFrame(records, columns=["order_idx", "product_id"])
    df = df.drop_duplicates()

    unique_orders = sorted(df["order_idx"].unique())
    unique_products = sorted(df["product_id"].unique())

    order_to_idx = {order_idx: idx for idx, order_idx in enumerate(unique_orders)}
    product_id_to_idx = {int(pid): idx for idx, pid in enumerate(unique_products)}

    row_indices = df["order_idx"].map(order_to_idx).values
    col_indices = df["product_id"].map(product_id_to_idx).values

    incidence = csr_matrix(
        (np.ones(len(df), dtype=np.int64), (row_indices, col_indices)),
        shape=(len(unique_orders), len(unique_products)),
        dtype=np.int64,
    )

    cooccurrence = (incidence.T @ incidence).tocsr()
    cooccurrence = (
        cooccurrence - diags(cooccurrence.diagonal(), dtype=np.int64)
    ).tocsr()
    cooccurrence.eliminate_zeros()
    cooccurrence.sort_indices()

    result = CooccurrenceMatrix(cooccurrence, product_id_to_idx)

    logger.info(
        "Built co-occurrence matrix",
        extra={
            "num_orders": num_orders,
            "num_products": len(result),
            "num_pairs": result.num_pairs,
        },
    )
    return result
