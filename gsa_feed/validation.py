"""Offline validation of feed documents against the gsafeed DTD.

This is a manual tool for checking generated feeds; pushes never run it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from lxml import etree

logger = logging.getLogger(__name__)

DEFAULT_DTD_PATH = Path(__file__).parent / "dtd" / "gsafeed.dtd"


def validate_feed(xml_text: str, dtd_path: Optional[str] = None) -> List[str]:
    """Return DTD validation errors for the document; empty when valid."""
    dtd_file = Path(dtd_path) if dtd_path else DEFAULT_DTD_PATH
    logger.info("Validating feed against %s", dtd_file)

    # The doctype points at the appliance; never fetch it.
    parser = etree.XMLParser(load_dtd=False, no_network=True, resolve_entities=False)
    try:
        root = etree.fromstring(xml_text.encode("utf-8"), parser)
    except etree.XMLSyntaxError as exc:
        raise ValueError(f"Feed is not well-formed XML: {exc}") from exc

    with dtd_file.open("rb") as handle:
        dtd = etree.DTD(handle)

    if dtd.validate(root):
        return []

    errors = [f"line {entry.line}: {entry.message}" for entry in dtd.error_log]
    logger.warning("Feed failed validation with %d errors", len(errors))
    return errors
