"""Recommendation engine for ZidRec.

This module contains the co-occurrence model built from historical orders,
the snapshot cache that loads catalog and order data, and the query engine
that ranks co-purchased products with a category-based fallback.
"""
