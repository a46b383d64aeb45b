"""
Tab Resolver — 由 ContentBag 推導可顯示的程式碼分頁

所有函式都是純函式：同樣的 (bag, has_typescript) 永遠得到同樣結果，
未知的 tab id 一律退回預設值（空字串、.txt、不可見），不拋例外。
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple, Union

from .content import DEFAULT_COMPONENT_NAME, KIND_METADATA, CodeFragmentKind, ContentBag, has_text

TabId = Union[str, CodeFragmentKind]

# TSX > JSX > CSS > TypeScript > HTML
PRIORITY_ORDER = (
    CodeFragmentKind.TSX,
    CodeFragmentKind.JSX,
    CodeFragmentKind.CSS,
    CodeFragmentKind.TYPESCRIPT,
    CodeFragmentKind.HTML,
)

FALLBACK_EXTENSION = ".txt"

_MIME_TYPES = {
    ".js": "application/javascript",
    ".jsx": "application/javascript",
    ".ts": "application/typescript",
    ".tsx": "application/typescript",
    ".css": "text/css",
    ".html": "text/html",
    ".json": "application/json",
    ".md": "text/markdown",
}


@dataclass(frozen=True)
class TabStats:
    lines: int
    characters: int
    words: int


@dataclass(frozen=True)
class TabDescriptor:
    id: CodeFragmentKind
    label: str
    language: str
    extension: str
    content: str
    visible: bool


def _passes_capability_gate(kind: CodeFragmentKind, has_typescript: bool) -> bool:
    if kind is CodeFragmentKind.JSX:
        return not has_typescript
    if kind is CodeFragmentKind.TSX:
        return has_typescript
    return True


@lru_cache(maxsize=128)
def _visible_kinds(bag: ContentBag, has_typescript: bool) -> Tuple[CodeFragmentKind, ...]:
    # ContentBag 是 frozen dataclass，hash/eq 依內容，所以 cache 以內容為 key
    return tuple(
        kind
        for kind in KIND_METADATA
        if _passes_capability_gate(kind, has_typescript) and bag.has(kind)
    )


def is_visible(bag: ContentBag, tab_id: TabId, has_typescript: bool = False) -> bool:
    kind = CodeFragmentKind.parse(tab_id)
    if kind is None:
        return False
    return kind in _visible_kinds(bag, has_typescript)


def content(bag: ContentBag, tab_id: TabId) -> str:
    return bag.get(tab_id) or ""


def describe(bag: ContentBag, tab_id: TabId, has_typescript: bool = False) -> Optional[TabDescriptor]:
    kind = CodeFragmentKind.parse(tab_id)
    if kind is None:
        return None
    meta = KIND_METADATA[kind]
    return TabDescriptor(
        id=kind,
        label=meta.label,
        language=meta.language,
        extension=meta.extension,
        content=content(bag, kind),
        visible=is_visible(bag, kind, has_typescript),
    )


def list_visible_tabs(bag: ContentBag, has_typescript: bool = False) -> List[TabDescriptor]:
    return [describe(bag, kind, has_typescript) for kind in _visible_kinds(bag, has_typescript)]


def default_tab(bag: ContentBag, has_typescript: bool = False) -> Optional[CodeFragmentKind]:
    """依固定優先序挑預設分頁；完全沒有分頁時回傳 None。"""
    visible = _visible_kinds(bag, has_typescript)
    if not visible:
        return None
    for kind in PRIORITY_ORDER:
        if kind in visible:
            return kind
    return visible[0]


def extension(tab_id: TabId) -> str:
    kind = CodeFragmentKind.parse(tab_id)
    if kind is None:
        return FALLBACK_EXTENSION
    return KIND_METADATA[kind].extension


def file_name(tab_id: TabId, component_name: str) -> str:
    return f"{component_name}{extension(tab_id)}"


def is_empty(bag: ContentBag, tab_id: TabId) -> bool:
    return not has_text(content(bag, tab_id))


def text_stats(text: str) -> TabStats:
    return TabStats(
        lines=len(text.split("\n")),
        characters=len(text),
        words=len(text.split()),
    )


def stats(bag: ContentBag, tab_id: TabId) -> TabStats:
    return text_stats(content(bag, tab_id))


def mime_type(ext: str) -> str:
    # ".d.ts" / ".advanced.css" 取最後一段
    suffix = "." + ext.lower().rsplit(".", 1)[-1] if ext else ""
    return _MIME_TYPES.get(suffix, "text/plain")


class TabResolver:
    """綁定單一 ContentBag 的便利包裝，對應 UI 每次 render 讀取的資料。"""

    def __init__(self, bag: ContentBag, has_typescript: bool = False):
        self.bag = bag
        self.has_typescript = has_typescript

    @property
    def tabs(self) -> List[TabDescriptor]:
        return list_visible_tabs(self.bag, self.has_typescript)

    def default_tab(self) -> Optional[CodeFragmentKind]:
        return default_tab(self.bag, self.has_typescript)

    def descriptor(self, tab_id: TabId) -> Optional[TabDescriptor]:
        return describe(self.bag, tab_id, self.has_typescript)

    def is_visible(self, tab_id: TabId) -> bool:
        return is_visible(self.bag, tab_id, self.has_typescript)

    def content(self, tab_id: TabId) -> str:
        return content(self.bag, tab_id)

    def file_name(self, tab_id: TabId, component_name: Optional[str] = None) -> str:
        return file_name(tab_id, component_name or self.bag.component_name or DEFAULT_COMPONENT_NAME)

    def is_empty(self, tab_id: TabId) -> bool:
        return is_empty(self.bag, tab_id)

    def stats(self, tab_id: TabId) -> TabStats:
        return stats(self.bag, tab_id)
