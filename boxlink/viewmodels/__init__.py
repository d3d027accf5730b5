"""ViewModel package for panel UI state.

Modules here hold form, list and settings state plus HTML fragment
rendering. They depend on domain types only; I/O adapters and use-case
orchestration stay outside.
"""
