"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate shape and size at the boundary; business rules
      (tip > 0, non-empty title, handle format) live in core/ so they yield
      domain error codes
"""
