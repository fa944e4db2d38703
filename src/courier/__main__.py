"""courier CLI entry point."""

from __future__ import annotations

from courier.cli import main

if __name__ == "__main__":
    main()
