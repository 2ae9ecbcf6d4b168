"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks every feature uses (DB wiring, settings,
error types). Claim-specific SQL and business logic live in `claims/`.
"""
