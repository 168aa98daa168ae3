"""FastAPI application module for ZidRec.

This module contains the FastAPI application, route handlers, and API
endpoints for the recommendation service.
"""
