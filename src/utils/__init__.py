"""
Utility modules for the catalog client
"""
from .config_loader import load_catalog_config, load_credentials
from .identifiers import (
    add_affiliate_tag,
    extract_identifier,
    is_valid_identifier,
    normalize_identifier,
    resolve_identifier,
)

__all__ = [
    'load_catalog_config',
    'load_credentials',
    'add_affiliate_tag',
    'extract_identifier',
    'is_valid_identifier',
    'normalize_identifier',
    'resolve_identifier',
]
