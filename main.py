"""Command-line Entry Point - Root Module.

Lets the control panel run with ``python main.py`` from the repository
root. It imports from the src package.
"""

from src.main import main

__all__ = [
    "main",
]


if __name__ == "__main__":
    raise SystemExit(main())
