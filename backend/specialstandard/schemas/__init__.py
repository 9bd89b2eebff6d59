"""
SpecialStandard Backend — Pydantic Schemas
===========================================

Domain records returned by repositories and the request bodies routes
accept. Table definitions live in `specialstandard.models`; these are the
API contract.
"""
