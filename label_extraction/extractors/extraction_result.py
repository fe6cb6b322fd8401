"""
Extraction Result Data Classes.

This module defines the output contract of the label pipeline: the
ExtractionResult for one label, its ProductLine items, and the
PageExtraction wrapper produced by the page splitter.

Results carry no timestamps or timings, so extracting the same PDF twice
produces identical JSON.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ProductLine:
    """
    One product row of a label.

    Attributes:
        product_name: Cleaned product name.
        quantity: Units shipped, at least 1.
        price: Unit price, 0.0 when the label does not print one.
    """
    product_name: str
    quantity: int = 1
    price: float = 0.0

    def __post_init__(self):
        """Clamp quantity and price into their valid ranges."""
        if self.quantity is None or self.quantity < 1:
            self.quantity = 1
        if self.price is None or self.price < 0:
            self.price = 0.0
        self.price = float(self.price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_name': self.product_name,
            'quantity': self.quantity,
            'price': self.price
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductLine':
        return cls(
            product_name=data.get('product_name', ''),
            quantity=int(data.get('quantity', 1) or 1),
            price=float(data.get('price', 0.0) or 0.0)
        )


@dataclass
class ExtractionResult:
    """
    Represents the result of extracting one shipping label.

    Unresolved fields are empty strings and ``products`` is an empty list,
    never None; ambiguity is represented as data, not as failure.

    Attributes:
        courier_name: Courier that printed the label
        brand_name: Seller / store name (empty unless brand extraction is enabled)
        products: Product lines in label order
        order_number: Dedup key, preferring tracking numbers over order IDs
        customer_name: Recipient name from the shipping address block
        product_name: First product name, kept for older consumers
        text_source: "native", "ocr" or "none"
        warnings: Field-level failures recovered during extraction

    Example:
        >>> result = ExtractionResult(courier_name="Ekart")
        >>> result.products.append(ProductLine("Spice Rack", 1, 1999.0))
        >>> print(result.to_json())
    """
    courier_name: str = ""
    brand_name: str = ""
    products: List[ProductLine] = field(default_factory=list)
    order_number: str = ""

    customer_name: str = ""
    product_name: str = ""

    # Metadata
    text_source: str = "none"
    warnings: List[str] = field(default_factory=list)

    @property
    def fields(self) -> Dict[str, str]:
        """
        Get the scalar extracted fields as a dictionary.

        Returns:
            Dictionary of field names to values.
        """
        return {
            'courier_name': self.courier_name,
            'brand_name': self.brand_name,
            'order_number': self.order_number,
            'customer_name': self.customer_name,
            'product_name': self.product_name
        }

    @property
    def missing_fields(self) -> List[str]:
        """Names of scalar fields left empty, plus ``products`` when empty."""
        missing = [k for k, v in self.fields.items() if not v]
        if not self.products:
            missing.append('products')
        return missing

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Dictionary representation of the extraction result.
        """
        return {
            'courier_name': self.courier_name,
            'brand_name': self.brand_name,
            'products': [p.to_dict() for p in self.products],
            'order_number': self.order_number,
            'customer_name': self.customer_name,
            'product_name': self.product_name,
            'text_source': self.text_source,
            'warnings': list(self.warnings)
        }

    def to_json(self, indent: int = 2) -> str:
        """
        Convert to JSON string.

        Args:
            indent: JSON indentation level.

        Returns:
            JSON string representation.
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_flat_dict(self) -> Dict[str, Any]:
        """
        Convert to flat dictionary suitable for a spreadsheet row.

        Products collapse into a count and a ``name x qty`` summary.

        Returns:
            Flat dictionary with no nested structures.
        """
        return {
            'courier_name': self.courier_name,
            'brand_name': self.brand_name,
            'order_number': self.order_number,
            'customer_name': self.customer_name,
            'product_name': self.product_name,
            'product_count': len(self.products),
            'products': '; '.join(
                f"{p.product_name} x{p.quantity}" for p in self.products
            ),
            'text_source': self.text_source,
            'warnings': '; '.join(self.warnings)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExtractionResult':
        """
        Create ExtractionResult from dictionary.

        Args:
            data: Dictionary with extraction data.

        Returns:
            ExtractionResult instance.
        """
        return cls(
            courier_name=data.get('courier_name', ''),
            brand_name=data.get('brand_name', ''),
            products=[ProductLine.from_dict(p) for p in data.get('products', [])],
            order_number=data.get('order_number', ''),
            customer_name=data.get('customer_name', ''),
            product_name=data.get('product_name', ''),
            text_source=data.get('text_source', 'none'),
            warnings=list(data.get('warnings', []))
        )

    def __repr__(self) -> str:
        return (
            f"ExtractionResult("
            f"courier={self.courier_name!r}, "
            f"order={self.order_number!r}, "
            f"products={len(self.products)})"
        )


@dataclass
class PageExtraction:
    """
    Extraction result for one page of a split manifest.

    Attributes:
        page_number: 1-based page number in the source PDF
        file_path: Path of the single-page PDF
        filename: Base name of the single-page PDF
        result: Extraction result for the page
    """
    page_number: int
    file_path: str
    filename: str
    result: ExtractionResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'page_number': self.page_number,
            'file_path': self.file_path,
            'filename': self.filename,
            'result': self.result.to_dict()
        }
