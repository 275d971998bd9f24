"""tracedap - a Debug Adapter Protocol server for Python programs."""

from tracedap.cli import main as _cli_main

__all__ = ["__version__", "main"]
__version__ = "0.1.0"


def main() -> None:
    """Entry point that mirrors :func:`tracedap.cli.main`."""

    _cli_main()
