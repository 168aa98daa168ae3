"""Generate a fake catalog/order snapshot for testing and development.

Writes a JSON file in the same shape the service persists after fetching
from Zid (``{"products": [...], "orders": [...]}``), so the API can be run
locally without store credentials.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Then point the service at it:
        $ CACHE_FILE=storage/cache.json uvicorn zidrec.api.main:app

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_snapshot
        snapshot = generate_fake_snapshot(num_products=50, num_orders=200)
"""

import json
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_NUM_CATEGORIES = 8
DEFAULT_NUM_ORDERS = 100
DEFAULT_MAX_ITEMS_PER_ORDER = 5


def generate_fake_snapshot(
    num_products: int = DEFAULT_NUM_PRODUCTS,
    num_categories: int = DEFAULT_NUM_CATEGORIES,
    num_orders: int = DEFAULT_NUM_ORDERS,
    max_items_per_order: int = DEFAULT_MAX_ITEMS_PER_ORDER,
    seed: Optional[int] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """Generate a synthetic snapshot of products and orders.

    Products alternate between the two category shapes Zid returns (a single
    ``category_id`` or a ``categories`` list), and orders between ``items``
    and ``order_items``, so loaders see both variants. Orders favour
    products of a single category to give the co-occurrence model some
    structure.

    Args:
        num_products: Number of products in the catalog. Must be positive.
        num_categories: Number of categories. Must be positive.
        num_orders: Number of historical orders. Must be positive.
        max_items_per_order: Upper bound of line items per order.
        seed: Optional random seed for reproducible output.

    Returns:
        Dictionary with ``products`` and ``orders`` lists.

    Raises:
        ValueError: If any numeric parameter is non-positive.
    """
    if min(num_products, num_categories, num_orders, max_items_per_order) <= 0:
        raise ValueError(
            "num_products, num_categories, num_orders and "
            "max_items_per_order must be positive"
        )

    rng = random.Random(seed)

    products = []
    by_category: Dict[int, List[int]] = {}
    for product_id in range(1, num_products + 1):
        category_id = rng.randint(1, num_categories)
        by_category.setdefault(category_id, []).append(product_id)

        product: Dict[str, Any] = {
            "id": product_id,
            "name": f"Product {product_id}",
            "price": round(rng.uniform(5, 500), 2),
            "images": [f"https://cdn.example.com/products/{product_id}.jpg"],
        }
        if product_id % 2:
            product["category_id"] = category_id
        else:
            product["categories"] = [{"id": category_id}]
        products.append(product)

    orders = []
    for order_id in range(1, num_orders + 1):
        num_items = rng.randint(1, max_items_per_order)
        category_id = rng.choice(list(by_category))
        items = []
        for _ in range(num_items):
            # Mostly same-category baskets, with some noise
            if rng.random() < 0.7:
                product_id = rng.choice(by_category[category_id])
            else:
                product_id = rng.randint(1, num_products)
            items.append({"product_id": product_id, "quantity": rng.randint(1, 3)})

        key = "items" if order_id % 3 else "order_items"
        orders.append({"id": order_id, key: items})

    return {"products": products, "orders": orders}


def main() -> None:
    """Main entry point for the data generation script.

    Generates a fake snapshot with default parameters and saves it to
    storage/cache.json. Prints summary statistics upon completion.
    """
    print(f"Generating {DEFAULT_NUM_ORDERS} fake orders...")
    print(f"Products: {DEFAULT_NUM_PRODUCTS}, Categories: {DEFAULT_NUM_CATEGORIES}")

    try:
        snapshot = generate_fake_snapshot()
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    storage_dir = Path(__file__).parent.parent / "storage"
    storage_dir.mkdir(exist_ok=True)

    output_path = storage_dir / "cache.json"
    output_path.write_text(json.dumps(snapshot, indent=4), encoding="utf-8")

    line_items = pd.DataFrame(
        [
            {"order_id": order["id"], "product_id": item["product_id"]}
            for order in snapshot["orders"]
            for item in order.get("items", order.get("order_items", []))
        ]
    )
    basket_sizes = line_items.drop_duplicates().groupby("order_id").size()

    print(f"\nData generated successfully!")
    print(f"Saved to: {output_path}")
    print(f"\nData summary:")
    print(f"  Products: {len(snapshot['products'])}")
    print(f"  Orders: {len(snapshot['orders'])}")
    print(f"  Line items: {len(line_items)}")
    print(f"  Products ever ordered: {line_items['product_id'].nunique()}")
    print(f"  Mean distinct products per order: {basket_sizes.mean():.2f}")


if __name__ == "__main__":
    main()
