"""
FileMaker Data API SDK Protocol Module.

Compiles call arguments into wire options and normalizes server replies.
"""

from .options import (
    compile_date_format,
    compile_find_query,
    compile_paging,
    compile_portals,
    compile_response_layout,
    compile_scripts,
    compile_sort,
    stringify_field_data,
    url_encode_segment,
)
from .response import Response, extract_http_code, parse_body, parse_headers, validate_response
from .specs import FindOptions, FindQueryItem, PortalSpec, QueryField, ScriptSpec, SortSpec

__all__ = [
    # Response normalizer
    "Response",
    "extract_http_code",
    "parse_body",
    "parse_headers",
    "validate_response",
    # Option compiler
    "compile_date_format",
    "compile_find_query",
    "compile_paging",
    "compile_portals",
    "compile_response_layout",
    "compile_scripts",
    "compile_sort",
    "stringify_field_data",
    "url_encode_segment",
    # Option models
    "FindOptions",
    "FindQueryItem",
    "PortalSpec",
    "QueryField",
    "ScriptSpec",
    "SortSpec",
]
