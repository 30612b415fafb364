"""
Package entry point.

Allows running the application via:

    python -m oxterm

This simply forwards execution to oxterm.cli.main().
"""

from oxterm.cli import main

if __name__ == "__main__":
    main()
