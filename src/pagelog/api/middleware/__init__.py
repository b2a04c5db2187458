"""API middleware package.

Cross-cutting concerns (instrumentation, request ids, errors) live here so
routers stay focused on rendering records.
"""
