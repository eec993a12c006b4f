from .aggregate import tax_categories, redistribute_parent_allowances
from .document import convert_document
from .lines import convert_line, convert_lines
from .party import convert_party

__all__ = [
    "convert_document",
    "convert_line",
    "convert_lines",
    "convert_party",
    "redistribute_parent_allowances",
    "tax_categories",
]
