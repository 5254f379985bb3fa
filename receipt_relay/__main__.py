"""
Module entrypoint for `python -m receipt_relay`.

This allows running the application as a module from the repository root:
    python -m receipt_relay
"""
from receipt_relay.app import main

if __name__ == "__main__":
    main()
