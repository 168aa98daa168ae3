"""CLI script for getting product recommendations.

Useful for testing and evaluation. Loads a snapshot file, builds the
co-occurrence model and prints recommendations for a product or a cart.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from zidrec.recommender.engine import Recommender
from zidrec.recommender.snapshot import SnapshotManager
from zidrec.recommender.store import JsonSnapshotStore

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def get_recommendations(
    cache_file: str,
    product_id: Optional[int] = None,
    cart: Optional[List[int]] = None,
    seed: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Get recommendations from a snapshot file.

    Args:
        cache_file: Path to the snapshot JSON file
        product_id: Viewed product ID (product mode)
        cart: Cart product IDs (cart mode, takes precedence)
        seed: Random seed for the fallback sample

    Returns:
        List of recommended products
    """
    store = JsonSnapshotStore(cache_file)
    if store.read() is None:
        print(f"Error: No usable snapshot at {cache_file}", file=sys.stderr)
        print("  Run scripts/generate_fake_data.py first.", file=sys.stderr)
        sys.exit(1)

    # No client: never reach out to the Zid API from the CLI
    snapshot = SnapshotManager(store, client=None).ensure_loaded()
    recommender = Recommender(snapshot, random_state=seed)

    if cart:
        return recommender.recommend_for_cart(cart)
    return recommender.recommend_for_product(product_id)


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Get product recommendations from a snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/predict_cli.py --product 42
  python scripts/predict_cli.py --cart 42 57 91
  python scripts/predict_cli.py --product 42 --seed 7 --json
        """
    )

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--product",
        type=int,
        help="Viewed product ID"
    )
    group.add_argument(
        "--cart",
        type=int,
        nargs="+",
        help="Product IDs in the cart"
    )

    parser.add_argument(
        "--cache-file",
        type=str,
        default="storage/cache.json",
        help="Snapshot JSON file (default: storage/cache.json)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the fallback sample"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print raw JSON instead of a table"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    recommendations = get_recommendations(
        cache_file=args.cache_file,
        product_id=args.product,
        cart=args.cart,
        seed=args.seed,
    )

    if args.json:
        print(json.dumps(recommendations, indent=2, ensure_ascii=False))
        return

    target = f"cart {args.cart}" if args.cart else f"product {args.product}"
    print(f"\nRecommendations for {target}:")
    if not recommendations:
        print("  (none)")
    for rec in recommendations:
        print(f"  {rec['id']:>8}  {rec['title']}  ({rec['price']})")

    print()


if __name__ == "__main__":
    main()
