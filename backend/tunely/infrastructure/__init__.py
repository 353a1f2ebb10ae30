"""Infrastructure Layer — store access, serialization points, and outbound clients.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external calls wrapped with retry/timeout/error mapping
"""
