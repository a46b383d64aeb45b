"""
figma-bundle — Figma 設計 + 自訂程式碼 → 可預覽 / 可下載的元件 bundle

核心是 content（片段合併）與 tabs（分頁推導），其餘為 Figma 讀取、產生器與輸出。
"""

__version__ = "0.1.0"

from .content import (
    CodeFragmentKind,
    ContentBag,
    CustomCodeInputs,
    KIND_METADATA,
    DEFAULT_COMPONENT_NAME,
    merge,
)
from .tabs import (
    TabDescriptor,
    TabResolver,
    TabStats,
    default_tab,
    file_name,
    is_empty,
    is_visible,
    list_visible_tabs,
    stats,
)
from .errors import BundleError, ErrorCategory
from .url_validator import FigmaUrlValidation, validate_figma_url
from .figma_reader import FigmaAPIClient
from .generator import generate_fragments, generate_from_document, generate_pages
from .export import write_bundle
from .config import load_config, validate_config

__all__ = [
    "__version__",
    "CodeFragmentKind",
    "ContentBag",
    "CustomCodeInputs",
    "KIND_METADATA",
    "DEFAULT_COMPONENT_NAME",
    "merge",
    "TabDescriptor",
    "TabResolver",
    "TabStats",
    "default_tab",
    "file_name",
    "is_empty",
    "is_visible",
    "list_visible_tabs",
    "stats",
    "BundleError",
    "ErrorCategory",
    "FigmaUrlValidation",
    "validate_figma_url",
    "FigmaAPIClient",
    "generate_fragments",
    "generate_from_document",
    "generate_pages",
    "write_bundle",
    "load_config",
    "validate_config",
]
