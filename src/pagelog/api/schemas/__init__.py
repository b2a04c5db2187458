"""API request/response schemas."""

from pagelog.api.schemas.common import ProblemDetail
from pagelog.api.schemas.page_requests import PageRequestOut

__all__ = ["PageRequestOut", "ProblemDetail"]
