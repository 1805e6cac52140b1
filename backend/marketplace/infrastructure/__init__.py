"""Infrastructure Layer - database sessions and cross-cutting concerns.

Invariants:
    - Infrastructure never imports core/ decision logic (errors only)
    - All database failures surface as DatabaseError
"""
