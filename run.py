#!/usr/bin/env python3
"""Convenience runner for the 14 KM target tracker.

Usage:
    python run.py report 14km --period this_month --format xlsx
"""
import logging
import sys

from target_tracker.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
