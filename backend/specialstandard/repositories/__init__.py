"""
SpecialStandard Backend — Repositories
=======================================

One stateless repository per table (or tightly coupled group of tables).
Methods take the `Database` as their first argument and return pydantic
records; every list result is a list, never None.
"""
