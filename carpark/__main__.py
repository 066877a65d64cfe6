"""
Package entry point.

Allows running the application via:

    python -m carpark

This simply forwards execution to carpark.cli.main().
"""

from carpark.cli import main

if __name__ == "__main__":
    main()
