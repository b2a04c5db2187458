"""
Common API schemas — RFC 7807 errors.

Every non-2xx response is a :class:`ProblemDetail`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs»."""

    type: str = Field(default="about:blank", description="URI reference identifying the problem type")
    title: str = Field(description="Short, human-readable summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Explanation specific to this occurrence")
    instance: str = Field(default="", description="URI of the request that failed")
