"""
Command Line Interface Package

Command Structure:
- ledger-import: main entry point with utility commands (version, config)
- ledger-import detect / import: read a statement file and run a batch
- ledger-import batches / matches: inspect import history
- ledger-import review approve|reject: decide flagged matches

State between commands lives in a JSON workspace under the data directory.
"""
