"""
minihttp/__main__.py — Enables `python -m minihttp` invocation.
"""

import sys
from minihttp.cli import main

if __name__ == "__main__":
    sys.exit(main())
