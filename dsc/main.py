#!/usr/bin/env python3
"""
DSC ledger
Entry point: python -m dsc.main <command>
"""
from .cli import main

if __name__ == "__main__":
    main()
