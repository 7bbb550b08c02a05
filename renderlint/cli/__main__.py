#!/usr/bin/env python3
"""Entry point for the renderlint CLI when run as python -m renderlint.cli."""

if __name__ == "__main__":
    from renderlint.cli.main import main

    main()
