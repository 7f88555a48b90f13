"""
Case File CLI: Record Store Commands
====================================
Command-line interface for listing, editing and searching case records.

Usage:
    python -m cli.casefile list cases
    python -m cli.casefile search warehouse
    python -m cli.casefile stats
"""
