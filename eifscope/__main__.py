"""
eifscope Module Entry Point
============================

Allows running the CLI via: python -m eifscope
"""

from eifscope.cli import main

if __name__ == "__main__":
    main()
