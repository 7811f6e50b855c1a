"""Allow ``python -m compatibility_gen``."""

from __future__ import annotations

from compatibility_gen.cli import main

if __name__ == "__main__":
    main()
