"""Version stamping: record detected provenance on a BomBuilder.

Stamping is best-effort. If the write fails for any reason (no version
was detected, an unexpected value was passed) the failure is logged and
absorbed, and the resulting Bom simply has spec_version None.
"""

import logging
from typing import Optional

from safebom.kernel.versions import SchemaVersion
from safebom.model import BomBuilder

logger = logging.getLogger(__name__)


def stamp(builder: BomBuilder, version: Optional[SchemaVersion]) -> BomBuilder:
    """Write `version` into the builder's provenance slot.

    Returns the same builder, stamped or not.
    """
    try:
        builder._set_spec_version(version)
    except (TypeError, ValueError) as e:
        # TODO: decide with consumers whether an unstampable version should fail parse()
        logger.debug("spec version left unset: %s", e)
    return builder
