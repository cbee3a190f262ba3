"""
Type Definitions Module

Centralized type definitions for the proof-of-work library.
Uses TypedDict so worker messages stay plain picklable dicts.
"""

from typing import TypedDict, Optional, Literal


# ============================================================================
# Worker Request/Response Types
# ============================================================================

class SearchRequest(TypedDict, total=False):
    """Request sent to search workers."""
    id: int
    type: Literal["search", "shutdown"]
    payload: bytes
    cost: int
    meter: int


ErrorKind = Literal["budget_exhausted", "random_source", "internal"]


class SearchResponse(TypedDict, total=False):
    """Response from search workers."""
    type: Literal["started", "result"]
    request_id: int
    worker_id: int
    found: bool
    nonce: Optional[str]  # hex
    attempts: int
    duration: float
    error_kind: Optional[ErrorKind]
    error: Optional[str]
