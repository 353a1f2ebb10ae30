"""Services Layer — session lifecycle, queue engine, artist directory, viewer feed.

Invariants:
    - Each service wraps one AsyncSession and owns its commits
    - Store access goes through repository Protocols; rules come from core/
"""
