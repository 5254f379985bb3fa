#!/usr/bin/env python
"""
Launcher script for Receipt Relay.

Usage from repo root:
    python run_receipt_relay.py

Alternative:
    python -m receipt_relay
"""
from receipt_relay.app import main

if __name__ == "__main__":
    main()
