"""
Entry point for running modbus_console as a module.

This file enables:
- `python -m modbus_console`
"""

from __future__ import annotations

from modbus_console import main

if __name__ == "__main__":
    main()
