"""API routers.

Each router module is one logical handler grouping; its module name is
what ``request.completed`` events report as ``controller``.
"""
