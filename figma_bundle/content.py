"""
Content Model — 程式碼片段容器與合併

一次產生流程（generation cycle）只有一個 ContentBag；更新時整包替換，不做局部修改。
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Dict, Optional, Union


class CodeFragmentKind(str, Enum):
    JSX = "jsx"
    TSX = "tsx"
    CSS = "css"
    CSS_ADVANCED = "cssAdvanced"
    TYPESCRIPT = "typescript"
    HTML = "html"

    @classmethod
    def parse(cls, value: Union[str, "CodeFragmentKind", None]) -> Optional["CodeFragmentKind"]:
        """字串轉 kind；未知 id 回傳 None 而不是拋例外。"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class KindMeta:
    kind: CodeFragmentKind
    label: str
    language: str
    extension: str
    attr: str


# 順序即 tab 可見性的計算順序，啟動後不再變動
KIND_METADATA: Dict[CodeFragmentKind, KindMeta] = {
    meta.kind: meta
    for meta in (
        KindMeta(CodeFragmentKind.JSX, "JSX", "jsx", ".jsx", "jsx"),
        KindMeta(CodeFragmentKind.TSX, "TSX", "tsx", ".tsx", "tsx"),
        KindMeta(CodeFragmentKind.CSS, "CSS", "css", ".css", "css"),
        KindMeta(CodeFragmentKind.CSS_ADVANCED, "CSS++", "css", ".advanced.css", "css_advanced"),
        KindMeta(CodeFragmentKind.TYPESCRIPT, "Types", "typescript", ".d.ts", "typescript"),
        KindMeta(CodeFragmentKind.HTML, "HTML", "html", ".html", "html"),
    )
}

DEFAULT_COMPONENT_NAME = "Component"

FRAGMENT_SEPARATOR = "\n\n"


def has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


@dataclass(frozen=True)
class ContentBag:
    """kind → 片段文字。空字串或純空白視同沒有產出。"""

    jsx: Optional[str] = None
    tsx: Optional[str] = None
    css: Optional[str] = None
    css_advanced: Optional[str] = None
    typescript: Optional[str] = None
    html: Optional[str] = None
    component_name: Optional[str] = None

    def get(self, kind: Union[str, CodeFragmentKind]) -> Optional[str]:
        parsed = CodeFragmentKind.parse(kind)
        if parsed is None:
            return None
        return getattr(self, KIND_METADATA[parsed].attr)

    def has(self, kind: Union[str, CodeFragmentKind]) -> bool:
        return has_text(self.get(kind))

    def to_dict(self) -> dict:
        data = {}
        for meta in KIND_METADATA.values():
            value = getattr(self, meta.attr)
            if value is not None:
                data[meta.kind.value] = value
        if self.component_name is not None:
            data["componentName"] = self.component_name
        return data

    def fingerprint(self) -> str:
        payload = json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=False)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CustomCodeInputs:
    """使用者可編輯的三種片段；表單每次傳入整份新值。"""

    jsx: str = ""
    css: str = ""
    css_advanced: str = ""

    def is_empty(self) -> bool:
        return not any(has_text(getattr(self, f.name)) for f in fields(self))


def _append(design: Optional[str], custom: str) -> Optional[str]:
    if not has_text(custom):
        return design
    if not has_text(design):
        return custom
    return f"{design}{FRAGMENT_SEPARATOR}{custom}"


def merge(design_fragments: ContentBag, custom: CustomCodeInputs) -> ContentBag:
    """
    把使用者自訂程式碼接在設計產出的片段後面。

    - jsx / css / cssAdvanced 各自獨立處理：custom 去空白後非空才接上，中間空一行
    - tsx / typescript / html 與 component_name 原樣保留
    - 不檢查語法、不修改輸入，回傳新的 ContentBag
    """
    return replace(
        design_fragments,
        jsx=_append(design_fragments.jsx, custom.jsx),
        css=_append(design_fragments.css, custom.css),
        css_advanced=_append(design_fragments.css_advanced, custom.css_advanced),
    )
