#!/usr/bin/env python3
"""
figma-bundle CLI — Figma 設計 + 自訂程式碼 → 可預覽 / 可下載的元件 bundle

  figma-bundle generate --file-key KEY --output ./out   # 寫出 bundle
  figma-bundle generate --from-json file.json --all-pages --output ./out  # 每頁一個 bundle
  figma-bundle preview --url https://www.figma.com/design/KEY/...  # 列出分頁
  figma-bundle watch --file-key KEY --custom-css extra.css  # 自訂程式碼變更時重寫
  figma-bundle validate-url <url>
"""

import argparse
import os
import threading
import time
from pathlib import Path
from typing import Optional

import requests
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from . import __version__
from .config import DEFAULT_CONFIG_PATH, load_config
from .content import DEFAULT_COMPONENT_NAME, ContentBag, CustomCodeInputs, has_text, merge
from .errors import BundleError
from .export import write_bundle
from .figma_reader import FigmaAPIClient, load_figma_json
from .generator import generate_from_document, generate_pages
from .tabs import TabResolver
from .url_validator import validate_figma_url

# CLI 參數名 → CustomCodeInputs 欄位 / config key
_CUSTOM_KINDS = (
    ("custom_jsx", "jsx", "jsx"),
    ("custom_css", "css", "css"),
    ("custom_css_advanced", "css_advanced", "cssAdvanced"),
)

DEFAULT_OUTPUT_DIR = "./bundle"


def _section(config: dict, name: str) -> dict:
    """取 config 區塊；型別不對時當作沒設定（validate_config 已印過警告）。"""
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _bundle_str(config: dict, key: str) -> Optional[str]:
    value = _section(config, "bundle").get(key)
    return value if isinstance(value, str) and value else None


def _use_typescript(args, config: dict) -> bool:
    if getattr(args, "typescript", False):
        return True
    return _section(config, "bundle").get("typescript") is True


def _use_responsive(args, config: dict) -> bool:
    if getattr(args, "responsive", False):
        return True
    return _section(config, "bundle").get("responsive") is True


def _output_dir(args, config: dict) -> str:
    return getattr(args, "output", None) or _bundle_str(config, "outputDir") or DEFAULT_OUTPUT_DIR


def _resolve_file_key(args, config: dict) -> Optional[str]:
    url = getattr(args, "url", None)
    if url:
        validation = validate_figma_url(url)
        if not validation.is_valid:
            print(f"❌ {validation.error}")
            return None
        return validation.file_id
    key = getattr(args, "file_key", None) or _section(config, "figma").get("fileKey")
    if not key:
        print("❌ 請使用 --file-key / --url，或在 config 的 figma.fileKey 設定 Figma 檔案 key。")
    return key


def _fetch_figma_file(args, config: dict) -> Optional[dict]:
    if getattr(args, "from_json", None):
        try:
            return load_figma_json(args.from_json)
        except (OSError, ValueError) as e:
            print(f"❌ 無法讀取 Figma JSON：{e}")
            return None

    file_key = _resolve_file_key(args, config)
    if not file_key:
        return None
    token = _section(config, "figma").get("personalAccessToken") or os.environ.get("FIGMA_TOKEN")
    if not token:
        print("❌ 請設定 FIGMA_TOKEN 環境變數，或在 figma-bundle.config.json 的 figma.personalAccessToken 設定。")
        print("   取得方式：Figma → Settings → Personal access tokens → 新增")
        return None

    print(f"📥 Fetching Figma file: {file_key}")
    try:
        return FigmaAPIClient(token).get_file(file_key)
    except requests.RequestException as e:
        status = getattr(getattr(e, "response", None), "status_code", None)
        if status == 403:
            print("❌ Figma API 403：Token 無效或已過期，請重新產生 FIGMA_TOKEN。")
        elif status == 404:
            print(f"❌ Figma API 404：找不到檔案 '{file_key}'，請確認 file key 是否正確。")
        else:
            print(f"❌ Figma API 錯誤：{e}")
        return None


def load_design_fragments(args, config: dict) -> Optional[ContentBag]:
    """取得 Figma 檔案並產生設計片段；失敗時印出原因並回傳 None。"""
    figma_data = _fetch_figma_file(args, config)
    if figma_data is None:
        return None
    try:
        design = generate_from_document(
            figma_data,
            page_name=getattr(args, "page", None) or _bundle_str(config, "page"),
            page_index=getattr(args, "page_index", None),
            node_name=getattr(args, "node", None),
            component_name=getattr(args, "component_name", None) or _bundle_str(config, "componentName"),
            typescript=_use_typescript(args, config),
            responsive=_use_responsive(args, config),
        )
    except ValueError as e:
        print(f"❌ {e}")
        return None
    print(f"   ✅ Generated design fragments for {design.component_name}")
    return design


def custom_code_paths(args, config: dict) -> dict:
    """回傳 {CustomCodeInputs 欄位: 檔案路徑}，CLI 參數優先於 config；非字串路徑略過。"""
    custom_cfg = _section(config, "custom")
    paths = {}
    for arg_name, attr, cfg_key in _CUSTOM_KINDS:
        path = getattr(args, arg_name, None) or custom_cfg.get(cfg_key)
        if not path:
            continue
        if not isinstance(path, str):
            print(f"   ⚠️  custom.{cfg_key} 不是檔案路徑，已略過。")
            continue
        paths[attr] = path
    return paths


def read_custom_code(paths: dict) -> CustomCodeInputs:
    values = {}
    for attr, path in paths.items():
        try:
            values[attr] = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            print(f"   ⚠️  無法讀取自訂程式碼 '{path}'：{e}")
    return CustomCodeInputs(**values)


def merge_custom_code(design: ContentBag, paths: dict, has_typescript: bool) -> ContentBag:
    """讀取自訂程式碼並接到設計片段後面；沒有任何自訂內容時原樣回傳。"""
    custom = read_custom_code(paths)
    if custom.is_empty():
        return design
    if has_typescript and has_text(custom.jsx):
        # 自訂 JSX 只接在 jsx 片段，TypeScript 模式下 JSX 分頁不顯示
        print("   ⚠️  TypeScript 模式只輸出 TSX 分頁，自訂 JSX 不會出現在結果中。")
    return merge(design, custom)


def _print_written(paths) -> None:
    for path in paths:
        print(f"   📄 {path}")


def _generate_all_pages(args, config: dict) -> None:
    """每個 Figma 頁面各寫一個 bundle 到 <output>/<元件名稱>/。"""
    figma_data = _fetch_figma_file(args, config)
    if figma_data is None:
        return
    has_typescript = _use_typescript(args, config)
    try:
        bags = generate_pages(figma_data, typescript=has_typescript, responsive=_use_responsive(args, config))
    except ValueError as e:
        print(f"❌ {e}")
        return
    if custom_code_paths(args, config):
        print("   ℹ️  --all-pages 不合併自訂程式碼，已略過 custom 設定。")

    output_dir = _output_dir(args, config)
    total = 0
    for bag in bags:
        page_dir = os.path.join(output_dir, bag.component_name)
        try:
            written = write_bundle(bag, page_dir, has_typescript=has_typescript)
        except BundleError as e:
            print(f"❌ Export failed for {bag.component_name}: {e}")
            return
        _print_written(written)
        total += len(written) - 1
    print(f"✅ Wrote {total} files for {len(bags)} pages to {output_dir}")


def cmd_generate(args, config: dict):
    """Generate: Figma + 自訂程式碼 → 寫出 bundle."""
    if getattr(args, "all_pages", False):
        _generate_all_pages(args, config)
        return
    design = load_design_fragments(args, config)
    if design is None:
        return
    has_typescript = _use_typescript(args, config)
    bag = merge_custom_code(design, custom_code_paths(args, config), has_typescript)
    output_dir = _output_dir(args, config)
    try:
        written = write_bundle(bag, output_dir, has_typescript=has_typescript)
    except BundleError as e:
        print(f"❌ Export failed: {e}")
        return
    _print_written(written)
    print(f"✅ Wrote {len(written) - 1} files to {output_dir}")


def print_preview(bag: ContentBag, has_typescript: bool, tab: Optional[str] = None) -> None:
    resolver = TabResolver(bag, has_typescript)
    name = bag.component_name or DEFAULT_COMPONENT_NAME
    tabs = resolver.tabs
    if not tabs:
        print("   ℹ️  沒有可顯示的分頁。")
        return

    default = resolver.default_tab()
    print(f"👁️  {name} — {len(tabs)} tabs")
    for t in tabs:
        s = resolver.stats(t.id)
        marker = "▶" if t.id == default else " "
        print(
            f"   {marker} {t.label:<6} {resolver.file_name(t.id, name):<28} "
            f"{s.lines} lines / {s.words} words / {s.characters} chars"
        )

    if tab:
        if not resolver.is_visible(tab):
            print(f"   ⚠️  分頁 '{tab}' 不存在或沒有內容。")
            return
        print()
        print(resolver.content(tab))


def cmd_preview(args, config: dict):
    """Preview: 列出可見分頁、預設分頁與統計."""
    design = load_design_fragments(args, config)
    if design is None:
        return
    has_typescript = _use_typescript(args, config)
    bag = merge_custom_code(design, custom_code_paths(args, config), has_typescript)
    print_preview(bag, has_typescript, args.tab)


class ChangeHandler(FileSystemEventHandler):
    """
    自訂程式碼檔案變更事件處理器，帶 debounce 防抖。

    視窗內的後續事件合併成一次，在視窗結束時補跑 callback。
    """

    def __init__(self, callback, watched_paths, debounce: float = 1.0):
        self.callback = callback
        self.watched = {os.path.abspath(p) for p in watched_paths}
        self.last_trigger = 0.0
        self.debounce_seconds = debounce
        self.pending: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def _run(self) -> None:
        with self._lock:
            self.callback()

    def _flush_pending(self) -> None:
        self.pending = None
        self.last_trigger = time.time()
        print("\n🔄 Rebuilding after latest change...")
        self._run()

    def _handle(self, path: str) -> None:
        if os.path.abspath(path) not in self.watched:
            return
        current_time = time.time()
        remaining = self.debounce_seconds - (current_time - self.last_trigger)
        if remaining > 0:
            if self.pending is None:
                self.pending = threading.Timer(remaining, self._flush_pending)
                self.pending.daemon = True
                self.pending.start()
            return
        self.last_trigger = current_time
        print(f"\n🔄 File changed: {path}")
        self._run()

    def cancel(self) -> None:
        if self.pending is not None:
            self.pending.cancel()
            self.pending = None

    def on_modified(self, event):
        if event.is_directory:
            return
        self._handle(event.src_path)

    def on_created(self, event):
        if event.is_directory:
            return
        self._handle(event.src_path)

    def on_moved(self, event):
        # 編輯器常以「寫暫存檔再改名」的方式存檔
        if event.is_directory:
            return
        self._handle(event.dest_path)


class BundleRebuilder:
    """設計片段固定，自訂程式碼變更時整包重新 merge 並寫出；內容沒變就跳過。"""

    def __init__(self, design: ContentBag, paths: dict, output_dir: str, has_typescript: bool):
        self.design = design
        self.paths = paths
        self.output_dir = output_dir
        self.has_typescript = has_typescript
        self.last_fingerprint: Optional[str] = None

    def __call__(self) -> bool:
        bag = merge_custom_code(self.design, self.paths, self.has_typescript)
        fingerprint = bag.fingerprint()
        if fingerprint == self.last_fingerprint:
            print("   ✅ No changes.")
            return False
        try:
            written = write_bundle(bag, self.output_dir, has_typescript=self.has_typescript)
        except BundleError as e:
            print(f"   ❌ Export failed: {e}")
            return False
        self.last_fingerprint = fingerprint
        print(f"   ✅ Rebuilt {len(written) - 1} files in {self.output_dir}")
        return True


def cmd_watch(args, config: dict):
    """Watch: 監聽自訂程式碼檔案並自動重寫 bundle."""
    paths = custom_code_paths(args, config)
    if not paths:
        print("❌ 沒有可監聽的自訂程式碼檔案，請使用 --custom-jsx / --custom-css / --custom-css-advanced。")
        return
    design = load_design_fragments(args, config)
    if design is None:
        return

    output_dir = _output_dir(args, config)
    rebuild = BundleRebuilder(design, paths, output_dir, _use_typescript(args, config))
    rebuild()

    handler = ChangeHandler(rebuild, paths.values(), debounce=args.debounce)
    observer = Observer()
    for directory in {os.path.dirname(os.path.abspath(p)) for p in paths.values()}:
        observer.schedule(handler, path=directory, recursive=False)
    print(f"👀 Watching {len(paths)} custom code files...")
    print("   Press Ctrl+C to stop.")
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n👋 Stopping watch...")
        observer.stop()
    finally:
        handler.cancel()
        observer.join()


def cmd_validate_url(args, config: dict):
    result = validate_figma_url(args.url)
    if result.is_valid:
        print(f"✅ {result.url_type} URL, file key: {result.file_id}")
    else:
        print(f"❌ {result.error}")


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--file-key", help="Figma file key")
    p.add_argument("--url", help="Figma file / proto / design URL")
    p.add_argument("--from-json", help="Saved GET /files response (offline)")
    p.add_argument("--page", help="Page name")
    p.add_argument("--page-index", type=int, help="Page index")
    p.add_argument("--node", help="Node name inside the page to use as component root")
    p.add_argument("--component-name", help="Component name (file names follow it)")
    p.add_argument("--typescript", action="store_true", help="Emit TSX + .d.ts instead of JSX tab")
    p.add_argument("--responsive", action="store_true", help="Emit breakpoint media queries in the CSS++ tab")
    p.add_argument("--custom-jsx", help="File with custom JSX appended to the component")
    p.add_argument("--custom-css", help="File with custom CSS appended to the stylesheet")
    p.add_argument("--custom-css-advanced", help="File with advanced CSS (CSS++ tab)")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="figma-bundle: Figma design + custom code → component bundle",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config path")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    gen_p = sub.add_parser("generate", help="Write bundle files",
        epilog="Examples:\n  figma-bundle generate --file-key ABC123 --output ./out\n  figma-bundle generate --from-json file.json --typescript --custom-css extra.css\n  figma-bundle generate --from-json file.json --all-pages --responsive --output ./out",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    _add_source_args(gen_p)
    gen_p.add_argument("--output", help="Output directory")
    gen_p.add_argument("--all-pages", action="store_true",
        help="One bundle per page in <output>/<Component>/ (ignores --page/--node/--component-name and custom code)")

    preview_p = sub.add_parser("preview", help="List visible tabs",
        epilog="Examples:\n  figma-bundle preview --file-key ABC123\n  figma-bundle preview --from-json file.json --tab css",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    _add_source_args(preview_p)
    preview_p.add_argument("--tab", help="Print this tab's content (jsx, tsx, css, cssAdvanced, typescript, html)")

    watch_p = sub.add_parser("watch", help="Rebuild bundle when custom code changes",
        epilog="Examples:\n  figma-bundle watch --file-key ABC123 --custom-jsx extra.jsx --output ./out",
        formatter_class=argparse.RawDescriptionHelpFormatter)
    _add_source_args(watch_p)
    watch_p.add_argument("--output", help="Output directory")
    watch_p.add_argument("--debounce", type=float, default=1.0, help="Seconds between rebuilds")

    url_p = sub.add_parser("validate-url", help="Check a Figma URL and print its file key")
    url_p.add_argument("url", help="Figma URL")

    args = parser.parse_args(argv)
    config = load_config(args.config)

    if args.command == "generate":
        cmd_generate(args, config)
    elif args.command == "preview":
        cmd_preview(args, config)
    elif args.command == "watch":
        cmd_watch(args, config)
    elif args.command == "validate-url":
        cmd_validate_url(args, config)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
