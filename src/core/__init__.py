"""
Core domain models, mathematical primitives, and invariants.

This module contains the foundational building blocks shared by the ledger,
the exchange and the ICO (errors, snapshots, integer and CPMM math, schema
contracts).
"""
