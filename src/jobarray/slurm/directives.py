from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

DIRECTIVE_PREFIX = "#SBATCH"


def extract_directives(target: Union[str, Path], prefix: str = DIRECTIVE_PREFIX) -> List[str]:
    """
    Return the lines of `target` that start with `prefix`, in file order.

    Pure text scan: the target is never executed. An unreadable target
    yields no directives.
    """
    try:
        raw = Path(target).read_bytes()
    except OSError as exc:
        logger.info("no directives read from %s (%s)", target, exc.strerror)
        return []

    found = []
    for line in raw.decode("utf-8", "surrogateescape").split("\n"):
        line = line.rstrip("\r")
        if line.startswith(prefix) and "\x00" not in line:
            found.append(line)
    logger.info("extracted %d directive(s) from %s", len(found), target)
    return found
