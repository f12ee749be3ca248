"""
Test suite for the SpaceCoin exchange and ICO

Contains:
- tests/unit/          : Unit tests for math, ledger host, token, pool, router, ICO
"""
