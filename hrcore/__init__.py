"""Core (UI-agnostic) HR console logic.

This package contains:
- entity models and the in-memory entity store
- CSV parsing, row validation and CSV export
- JSON file persistence and environment settings
- filter normalization and page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
- the LLM-backed query assistant
"""
