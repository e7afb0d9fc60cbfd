"""Allow python -m swap_quote to run the CLI (prints help with no arguments)."""
from __future__ import annotations

from .cli.main import main

if __name__ == "__main__":
    raise SystemExit(main())
