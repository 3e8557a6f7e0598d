"""Entry point for running ikebana_studio as a module.

Usage:
    python -m ikebana_studio <command> [options]
"""
from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
