"""Module entrypoint for ``python -m relforge``."""

from __future__ import annotations

from relforge.cli.app import main

if __name__ == "__main__":
    main()
