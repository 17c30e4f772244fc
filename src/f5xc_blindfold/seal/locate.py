"""Locating the vesctl executable."""
from __future__ import annotations

import logging
import shutil

from f5xc_blindfold.core.config import VESCTL_EXECUTABLE
from f5xc_blindfold.core.errors import ToolNotFound

logger = logging.getLogger(__name__)


def find_vesctl(name: str = "") -> str:
    """Find vesctl on the system path, or raise :class:`ToolNotFound`.

    *name* may be empty to search for the default ``vesctl``, a different
    filename to search for (e.g. ``"vesctl.0.2.37"``), or a full path to a
    known binary.
    """
    if not name:
        name = VESCTL_EXECUTABLE
    logger.debug("Looking for vesctl binary %s", name)
    vesctl = shutil.which(name)
    if vesctl is None:
        raise ToolNotFound(
            f"failed to locate vesctl ({name!r})",
            details={"name": name},
        )
    return vesctl
