"""
Bundle 輸出

把 Tab Resolver 算出的可見分頁寫成檔案，並附上 bundle-manifest.json。
寫檔失敗一律包成 BundleError(category="download")。
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .content import DEFAULT_COMPONENT_NAME, KIND_METADATA, ContentBag
from .errors import BundleError, ErrorCategory
from .tabs import TabId, TabResolver, mime_type

MANIFEST_NAME = "bundle-manifest.json"


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_tab(resolver: TabResolver, tab_id: TabId, output_dir: str, component_name: Optional[str] = None) -> Path:
    """寫出單一分頁，回傳檔案路徑。"""
    filename = resolver.file_name(tab_id, component_name)
    content = resolver.content(tab_id)
    if not content.strip():
        raise BundleError(
            "No content to download",
            ErrorCategory.DOWNLOAD,
            {"tabId": str(tab_id), "filename": filename},
        )
    target = Path(output_dir) / filename
    try:
        _write(target, content)
    except OSError as e:
        raise BundleError(
            f"Failed to download file: {e}",
            ErrorCategory.DOWNLOAD,
            {"filename": filename, "contentLength": len(content), "mimeType": mime_type(Path(filename).suffix)},
        ) from e
    return target


def build_manifest(resolver: TabResolver, component_name: str) -> dict:
    default = resolver.default_tab()
    files = []
    for tab in resolver.tabs:
        tab_stats = resolver.stats(tab.id)
        files.append({
            "tab": tab.id.value,
            "label": tab.label,
            "language": tab.language,
            "file": resolver.file_name(tab.id, component_name),
            "mimeType": mime_type(tab.extension),
            "lines": tab_stats.lines,
            "words": tab_stats.words,
            "characters": tab_stats.characters,
        })
    return {
        "componentName": component_name,
        "typescript": resolver.has_typescript,
        "defaultTab": default.value if default else None,
        "fingerprint": resolver.bag.fingerprint(),
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "files": files,
    }


def remove_stale_tabs(resolver: TabResolver, output_dir: str, component_name: str) -> List[Path]:
    """刪除先前寫出、但這次已不可見的分頁檔案，回傳被刪除的路徑。"""
    visible = {tab.id for tab in resolver.tabs}
    removed = []
    for kind in KIND_METADATA:
        if kind in visible:
            continue
        target = Path(output_dir) / resolver.file_name(kind, component_name)
        if not target.is_file():
            continue
        try:
            target.unlink()
        except OSError as e:
            raise BundleError(
                f"Failed to remove stale file: {e}",
                ErrorCategory.DOWNLOAD,
                {"tabId": kind.value, "filename": target.name},
            ) from e
        removed.append(target)
    return removed


def write_bundle(
    bag: ContentBag,
    output_dir: str,
    has_typescript: bool = False,
    component_name: Optional[str] = None,
) -> List[Path]:
    """寫出所有可見分頁與 manifest；沒有任何分頁時只寫 manifest。目錄內只留 manifest 列出的分頁檔。"""
    resolver = TabResolver(bag, has_typescript)
    name = component_name or bag.component_name or DEFAULT_COMPONENT_NAME
    remove_stale_tabs(resolver, output_dir, name)
    written = [write_tab(resolver, tab.id, output_dir, name) for tab in resolver.tabs]

    manifest_path = Path(output_dir) / MANIFEST_NAME
    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(build_manifest(resolver, name), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise BundleError(f"Failed to write manifest: {e}", ErrorCategory.DOWNLOAD, {"filename": MANIFEST_NAME}) from e
    written.append(manifest_path)
    return written
