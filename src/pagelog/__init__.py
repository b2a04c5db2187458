"""
pagelog - Record every completed HTTP request as a durable row.

An instrumented FastAPI host publishes one ``request.completed`` event per
request/response cycle; the event recorder turns each event into a
``page_requests`` row via SQLAlchemy.
"""

__version__ = "0.1.0"
