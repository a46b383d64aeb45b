"""Bundle 輸出層的錯誤型別（core 本身不拋例外）."""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    CLIPBOARD = "clipboard"
    DOWNLOAD = "download"
    SYNTAX = "syntax"
    THEME = "theme"
    UNKNOWN = "unknown"


class BundleError(Exception):
    """帶分類與 context 的錯誤，交給 CLI 轉成使用者看得懂的訊息。"""

    def __init__(self, message: str, category=ErrorCategory.UNKNOWN, context: Optional[dict] = None):
        super().__init__(message)
        self.category = ErrorCategory(category)
        self.context: dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.args[0]}"
