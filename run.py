#!/usr/bin/env python3
"""
CLI entry point for Staysync calendar synchronization.
"""
from staysync.main import main

if __name__ == "__main__":
    main()
