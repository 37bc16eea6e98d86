"""
Backend package for the farmhouse stays & events site.

This package provides a FastAPI application that fronts the hosted record
store, object storage and auth service, with in-memory doubles so the site
can run locally without any of them.
"""
