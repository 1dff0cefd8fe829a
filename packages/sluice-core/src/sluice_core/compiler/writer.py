"""Artifact writer for sluice.

Writes compiled artifacts to ``{output_root}/{category}/{file_name}``.
Only called with the complete artifact list of a successful compilation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from sluice_core.compiler.models import Artifact

logger = logging.getLogger(__name__)


def write_artifacts(artifacts: Iterable[Artifact], output_root: Path | str) -> list[Path]:
    """Write artifacts below an output directory.

    Category directories are created as needed; existing files with the
    same name are overwritten.

    Args:
        artifacts: Artifacts to write.
        output_root: Root output directory.

    Returns:
        Paths of the written files, in input order.

    Raises:
        OSError: If a directory or file cannot be written (for example
            PermissionError, or NotADirectoryError when the root is a file).

    Example:
        >>> paths = write_artifacts(compiled.artifacts, Path("build"))
        >>> paths[0]
        PosixPath('build/bindings/s1-proc1-binding.yaml')
    """
    root = Path(output_root)
    written: list[Path] = []

    for artifact in artifacts:
        destination = root / artifact.category.value
        destination.mkdir(parents=True, exist_ok=True)
        path = destination / artifact.file_name
        path.write_text(artifact.content)
        written.append(path)

    logger.info(
        "Wrote %d artifacts",
        len(written),
        extra={"output_root": str(root)},
    )
    return written
