"""
Test Suite for Ledger Import

Test Structure:
- fixtures/: Shared statement builders
- unit/: Unit tests mirroring src/ package structure
- integration/: CLI and end-to-end import tests

Test Data:
All statement rows are synthetic.
"""
