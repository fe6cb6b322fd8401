"""
Main Output Handler Module.

This module provides the unified OutputHandler class that writes
extraction results as JSON or as an Excel workbook, chosen by the
output file extension.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.utils.helpers import ensure_directory
from label_extraction.utils.exceptions import OutputError
from label_extraction.extractors import PageExtraction
from .excel_exporter import ExcelExporter

# Initialize module logger
logger = get_logger(__name__)


class OutputHandler:
    """
    Unified output handler for extraction results.

    Attributes:
        json_indent: Indentation of JSON output
        excel_exporter: ExcelExporter instance (created on first use)

    Example:
        >>> handler = OutputHandler()
        >>> handler.save(pages, "outputs/labels.xlsx")
        >>> handler.save(pages, "outputs/labels.json")
    """

    def __init__(self) -> None:
        """Initialize the output handler."""
        self.json_indent = get_config("output.json.indent", 2)

        self._excel_exporter = None

        logger.debug("OutputHandler initialized")

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get or create the Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    def save(
        self,
        records: Union[PageExtraction, List[PageExtraction]],
        output_path: Union[str, Path]
    ) -> str:
        """
        Save results to ``output_path``.

        ``.json`` writes JSON; anything else (normally ``.xlsx``) writes
        an Excel workbook.

        Returns:
            Path of the written file.
        """
        if isinstance(records, PageExtraction):
            records = [records]

        output_path = Path(output_path)
        if output_path.suffix.lower() == '.json':
            return self.to_json(records, output_path)
        return self.to_excel(records, output_path.name, str(output_path.parent))

    def to_json(self, records: List[PageExtraction], output_path: Union[str, Path]) -> str:
        """
        Write results as a JSON array.

        Raises:
            OutputError: If the file cannot be written.
        """
        output_path = Path(output_path)
        ensure_directory(output_path.parent)

        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dicts(records), f, indent=self.json_indent, ensure_ascii=False)
        except OSError as e:
            logger.error(f"JSON export failed: {e}")
            raise OutputError(f"Failed to write JSON file: {output_path}", {"reason": str(e)})

        logger.info(f"JSON file saved: {output_path} ({len(records)} labels)")
        return str(output_path)

    def to_excel(
        self,
        records: List[PageExtraction],
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export results to Excel file.

        Returns:
            Path to created Excel file.
        """
        return self.excel_exporter.export(records, filename, output_dir)

    @staticmethod
    def to_dicts(records: List[PageExtraction]) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in records]
