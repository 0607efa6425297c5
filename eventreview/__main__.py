"""
Package entry point.

Allows running the application via:

    python -m eventreview

This simply forwards execution to eventreview.cli.main().
"""

from eventreview.cli import main

if __name__ == "__main__":
    main()
