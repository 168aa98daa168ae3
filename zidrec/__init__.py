"""ZidRec: co-purchase product recommendations for Zid storefronts.

This package provides a backend service that recommends products for a
viewed product or a shopping cart, using co-occurrence of products across
historical orders.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: Co-occurrence model, snapshot cache and query engine
"""

__version__ = "0.1.0"
