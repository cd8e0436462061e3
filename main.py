#!/usr/bin/env python3
"""
Repository Catalog Fetcher - Main Entry Point

Fetches package manager repositories into a local cache and
validates configured repository sources.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from repo_catalog.cli import main

if __name__ == "__main__":
    main()
