# File: laragen/__main__.py
"""
Laragen - Module entry point.

Allows running the generator directly via::

    python -m laragen Post --all --base-path ~/code/blog

Delegates to ``laragen.cli.cli_main``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from laragen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
