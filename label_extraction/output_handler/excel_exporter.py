"""
Excel Exporter Module.

This module provides Excel file generation for label extraction
results. Uses openpyxl for modern Excel format support.

Features:
    - Formatted headers
    - Auto-column width
    - One row per label on the labels sheet
    - One row per product on the product lines sheet
"""

from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.utils.helpers import ensure_directory, generate_timestamp
from label_extraction.utils.exceptions import ExcelExportError
from label_extraction.extractors import PageExtraction

# Initialize module logger
logger = get_logger(__name__)


class ExcelExporter:
    """
    Exports label extraction results to Excel format.

    Attributes:
        output_dir: Directory for output files
        include_products: Whether to add the product lines sheet
        sheet_name: Title of the labels sheet

    Example:
        >>> exporter = ExcelExporter()
        >>> filepath = exporter.export(pages, "labels.xlsx")
        >>> print(f"Saved to: {filepath}")
    """

    # Column definitions: (header, key in the flat result row)
    COLUMNS = [
        ('Courier', 'courier_name'),
        ('Brand', 'brand_name'),
        ('Order Number', 'order_number'),
        ('Customer Name', 'customer_name'),
        ('Product Name', 'product_name'),
        ('Product Count', 'product_count'),
        ('Products', 'products'),
        ('Text Source', 'text_source'),
        ('Warnings', 'warnings'),
    ]

    SOURCE_COLUMNS = ['Source File', 'Page']

    PRODUCT_COLUMNS = ['Source File', 'Page', 'Line', 'Product Name', 'Quantity', 'Price']

    def __init__(self) -> None:
        """Initialize the Excel exporter with configuration."""
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))
        self.include_products = get_config("output.excel.include_products", True)
        self.sheet_name = get_config("output.excel.sheet_name", "Labels")

        # Check for openpyxl
        self._check_dependencies()

        logger.debug(f"ExcelExporter initialized (output_dir: {self.output_dir})")

    def _check_dependencies(self) -> None:
        """Check if required libraries are available."""
        try:
            import openpyxl
            self._openpyxl = openpyxl
        except ImportError:
            raise ImportError(
                "openpyxl is required for Excel export. "
                "Install with: pip install openpyxl"
            )

    def export(
        self,
        records: Union[PageExtraction, List[PageExtraction]],
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export extraction results to Excel file.

        Args:
            records: Single record or list of records to export.
            filename: Output filename. If None, auto-generated.
            output_dir: Output directory. If None, uses configured dir.

        Returns:
            Path to the created Excel file.

        Raises:
            ExcelExportError: If export fails.
        """
        if isinstance(records, PageExtraction):
            records = [records]

        if not records:
            raise ExcelExportError("No results", "No results to export")

        out_dir = Path(output_dir) if output_dir else self.output_dir
        ensure_directory(out_dir)

        filepath = out_dir / (filename or self.get_default_filename())

        try:
            workbook = self._openpyxl.Workbook()

            self._create_labels_sheet(workbook, records)

            if self.include_products:
                self._create_products_sheet(workbook, records)

            workbook.save(filepath)

            logger.info(f"Excel file saved: {filepath} ({len(records)} labels)")
            return str(filepath)

        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Excel export failed: {e}")
            raise ExcelExportError(str(filepath), str(e))

    def _style_header(self, sheet, headers: List[str], color: str) -> None:
        from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        thin = Side(style='thin')

        for col, header_name in enumerate(headers, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = Border(left=thin, right=thin, top=thin, bottom=thin)

        sheet.freeze_panes = 'A2'

    def _fit_columns(self, sheet, column_count: int) -> None:
        from openpyxl.utils import get_column_letter

        for col in range(1, column_count + 1):
            max_length = 0
            for row in range(1, sheet.max_row + 1):
                value = sheet.cell(row=row, column=col).value
                if value is not None:
                    max_length = max(max_length, len(str(value)))
            sheet.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 50)

    def _create_labels_sheet(self, workbook, records: List[PageExtraction]) -> None:
        """
        Create the main sheet, one row per label.

        Args:
            workbook: openpyxl Workbook instance.
            records: Extraction records.
        """
        sheet = workbook.active
        sheet.title = self.sheet_name

        headers = self.SOURCE_COLUMNS + [name for name, _ in self.COLUMNS]
        self._style_header(sheet, headers, "4472C4")

        for row_num, record in enumerate(records, 2):
            flat = record.result.to_flat_dict()
            values = [record.filename, record.page_number] + [flat[key] for _, key in self.COLUMNS]
            for col, value in enumerate(values, 1):
                sheet.cell(row=row_num, column=col, value=value)

        self._fit_columns(sheet, len(headers))

    def _create_products_sheet(self, workbook, records: List[PageExtraction]) -> None:
        """Create a sheet with one row per product line."""
        sheet = workbook.create_sheet(title="Product Lines")
        self._style_header(sheet, self.PRODUCT_COLUMNS, "548235")

        row_num = 2
        for record in records:
            for line_number, product in enumerate(record.result.products, 1):
                values = [
                    record.filename,
                    record.page_number,
                    line_number,
                    product.product_name,
                    product.quantity,
                    product.price
                ]
                for col, value in enumerate(values, 1):
                    sheet.cell(row=row_num, column=col, value=value)
                row_num += 1

        self._fit_columns(sheet, len(self.PRODUCT_COLUMNS))

    def get_default_filename(self) -> str:
        """
        Generate a default filename with timestamp.

        Returns:
            Default filename string.
        """
        pattern = get_config(
            "output.excel.filename_pattern",
            "label_extractions_{timestamp}.xlsx"
        )
        return pattern.format(timestamp=generate_timestamp())
