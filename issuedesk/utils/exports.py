"""
exports.py - Export file writer
Issue Desk v1.0
"""
import logging
import os
from datetime import date

from issuedesk.config import EXPORT_DIR
from issuedesk.services.export_service import export_filename

logger = logging.getLogger(__name__)


def save_export(content: str, directory: str | None = None, today: date | None = None) -> str:
    """
    Write CSV text under the export folder and return the absolute path.

    An existing export of the same day is overwritten. The file carries a
    UTF-8 BOM so spreadsheet tools detect the encoding.
    """
    directory = directory or EXPORT_DIR
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, export_filename(today))
    with open(path, "w", encoding="utf-8-sig", newline="") as f:
        f.write(content)
    logger.info("Exported %s", path)
    return path
