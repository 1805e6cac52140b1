"""Marketplace Application Package - items, categories and role-based access control.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
