"""sluice-cli: Command-line interface for sluice.

Provides the ``sluice`` command with ``compile`` and ``validate``
subcommands.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
