"""CLI command modules.

Commands are loaded lazily by ``sluice_cli.main.LazyGroup``; nothing is
imported here.
"""

from __future__ import annotations

__all__: list[str] = []
