#!/usr/bin/env python3
"""
Venus Market Indexer
Entry point for ``python -m venus_indexer.main``
"""
from .cli import main

if __name__ == "__main__":
    main()
