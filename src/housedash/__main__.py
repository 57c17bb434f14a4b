"""Entry point for running housedash as a module.

This allows the CLI to be invoked with ``python -m housedash``.
"""

from .cli import cli

if __name__ == "__main__":  # pragma: no cover
    cli()
