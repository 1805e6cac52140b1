"""Services Layer - access guard and per-resource handlers.

Invariants:
    - Every mutation goes through the access guard before any write
    - Handlers own the DB session for the duration of one request
"""
