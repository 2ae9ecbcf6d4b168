"""
Claim dependencies for FastAPI routes.
"""

from __future__ import annotations

from fastapi import Request

from .repository import ClaimStore


def get_claim_store(request: Request) -> ClaimStore:
    # Constructed once in `create_app()` and attached to app state.
    return request.app.state.claim_store
