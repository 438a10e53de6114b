from __future__ import annotations

import os
import pathlib
import time

from rich.console import Console

from ._cxml import etree as ET
from ._exceptions import WriteError

# Time granted to a shared filesystem for a new directory to show up on all
# nodes. See <https://github.com/KratosMultiphysics/Kratos/pull/9247>.
DIRECTORY_VISIBILITY_WAIT = 0.05


def warn(string, highlight: bool = True) -> None:
    Console(stderr=True).print(
        f"[yellow][bold]Warning:[/bold] {string}[/yellow]", highlight=highlight
    )


def makedirs_mpi_safe(path) -> None:
    """Create `path` (and its parents) in a way that is safe if many processes try to
    create the same directory at once, e.g., all ranks of an MPI job.

    Existing directories are fine. On slow network filesystems a new directory is not
    always visible right away, so there is one bounded wait for it to appear. This is a
    mitigation, not a guarantee.
    """
    path = pathlib.Path(path)
    if not path.exists():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(f"Failed to create directory {path}: {e}") from e

    if not path.exists():
        time.sleep(DIRECTORY_VISIBILITY_WAIT)
        if not path.exists():
            warn(f"Directory {path} is not visible yet.")


def write_xml(filename, root) -> None:
    # Readers must never see a half-written file, so write next to the target and
    # move it into place.
    filename = pathlib.Path(filename)
    tmp_filename = filename.with_name(filename.name + ".tmp")
    tree = ET.ElementTree(root)
    try:
        tree.write(tmp_filename)
        os.replace(tmp_filename, filename)
    except BaseException:
        tmp_filename.unlink(missing_ok=True)
        raise
