"""
Watch Mode / ChangeHandler debounce 與 BundleRebuilder 單元測試
不需要真實檔案系統事件，用 mock event 物件測試防抖與重寫邏輯。
"""
import json
import os
import time
from unittest.mock import MagicMock

import pytest
from figma_bundle.cli import BundleRebuilder, ChangeHandler
from figma_bundle.content import ContentBag


# ─── helper: 建立假 FileSystemEvent ─────────────────────────────────────────

def make_event(src_path: str, is_directory: bool = False, dest_path: str = ""):
    ev = MagicMock()
    ev.is_directory = is_directory
    ev.src_path = src_path
    ev.dest_path = dest_path
    return ev


WATCHED = "/src/custom/extra.css"


# ─── ChangeHandler 過濾邏輯 ──────────────────────────────────────────────────

class TestChangeHandlerFilter:
    """目錄事件與非監聽檔案不觸發 callback。"""

    def setup_method(self):
        self.callback = MagicMock()
        self.handler = ChangeHandler(self.callback, [WATCHED], debounce=0.0)

    def test_directory_event_ignored(self):
        self.handler.on_modified(make_event("/src/custom", is_directory=True))
        self.callback.assert_not_called()

    def test_unwatched_file_ignored(self):
        self.handler.on_modified(make_event("/src/custom/other.css"))
        self.callback.assert_not_called()

    def test_watched_file_triggers_callback(self):
        self.handler.on_modified(make_event(WATCHED))
        self.callback.assert_called_once_with()

    def test_created_event_triggers_callback(self):
        self.handler.on_created(make_event(WATCHED))
        self.callback.assert_called_once_with()

    def test_moved_event_uses_destination(self):
        self.handler.on_moved(make_event("/src/custom/.extra.css.swp", dest_path=WATCHED))
        self.callback.assert_called_once_with()

    def test_relative_paths_normalized(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        handler = ChangeHandler(self.callback, ["extra.css"], debounce=0.0)
        handler.on_modified(make_event(os.path.join(str(tmp_path), "extra.css")))
        self.callback.assert_called_once_with()


# ─── ChangeHandler debounce 邏輯 ─────────────────────────────────────────────

class TestChangeHandlerDebounce:
    """短時間內重複觸發只呼叫一次 callback。"""

    def setup_method(self):
        self.callback = MagicMock()
        self.handler = ChangeHandler(self.callback, [WATCHED], debounce=0.5)

    def teardown_method(self):
        self.handler.cancel()

    def test_debounce_blocks_rapid_events(self):
        ev = make_event(WATCHED)
        self.handler.on_modified(ev)
        self.handler.on_modified(ev)
        self.handler.on_modified(ev)
        assert self.callback.call_count == 1
        assert self.handler.pending is not None

    def test_debounce_allows_event_after_window(self):
        ev = make_event(WATCHED)
        self.handler.on_modified(ev)
        assert self.callback.call_count == 1

        # 模擬時間過了超過 debounce 視窗
        self.handler.last_trigger = time.time() - 1.0

        self.handler.on_modified(ev)
        assert self.callback.call_count == 2

    def test_debounce_timestamp_updated(self):
        before = time.time() - 0.01
        self.handler.on_modified(make_event(WATCHED))
        assert self.handler.last_trigger >= before

    def test_event_inside_window_rebuilds_once_after_window(self):
        handler = ChangeHandler(self.callback, [WATCHED], debounce=0.05)
        ev = make_event(WATCHED)
        handler.on_modified(ev)
        handler.on_modified(ev)
        handler.on_modified(ev)
        timer = handler.pending
        assert timer is not None
        assert self.callback.call_count == 1

        timer.join(timeout=2.0)
        assert self.callback.call_count == 2
        assert handler.pending is None

    def test_cancel_drops_pending_rebuild(self):
        ev = make_event(WATCHED)
        self.handler.on_modified(ev)
        self.handler.on_modified(ev)
        timer = self.handler.pending
        self.handler.cancel()
        timer.join(timeout=2.0)
        assert self.callback.call_count == 1
        assert self.handler.pending is None


# ─── BundleRebuilder ─────────────────────────────────────────────────────────

class TestBundleRebuilder:
    def setup_method(self):
        self.design = ContentBag(css=".a {}", component_name="Card")

    def test_rebuild_writes_merged_bundle(self, tmp_path):
        custom = tmp_path / "extra.css"
        custom.write_text(".b {}", encoding="utf-8")
        out = tmp_path / "out"
        rebuild = BundleRebuilder(self.design, {"css": str(custom)}, str(out), False)

        assert rebuild() is True
        assert (out / "Card.css").read_text(encoding="utf-8") == ".a {}\n\n.b {}"

    def test_unchanged_content_skipped(self, tmp_path, capsys):
        custom = tmp_path / "extra.css"
        custom.write_text(".b {}", encoding="utf-8")
        rebuild = BundleRebuilder(self.design, {"css": str(custom)}, str(tmp_path / "out"), False)

        assert rebuild() is True
        assert rebuild() is False
        assert "No changes" in capsys.readouterr().out

    def test_changed_content_rewritten(self, tmp_path):
        custom = tmp_path / "extra.css"
        custom.write_text(".b {}", encoding="utf-8")
        out = tmp_path / "out"
        rebuild = BundleRebuilder(self.design, {"css": str(custom)}, str(out), False)
        rebuild()

        custom.write_text(".c {}", encoding="utf-8")
        assert rebuild() is True
        assert (out / "Card.css").read_text(encoding="utf-8").endswith(".c {}")

    def test_emptied_custom_file_removes_stale_tab(self, tmp_path):
        custom = tmp_path / "advanced.css"
        custom.write_text("@keyframes pulse {}", encoding="utf-8")
        out = tmp_path / "out"
        rebuild = BundleRebuilder(self.design, {"css_advanced": str(custom)}, str(out), False)

        assert rebuild() is True
        assert (out / "Card.advanced.css").exists()

        custom.write_text("   \n", encoding="utf-8")
        assert rebuild() is True
        assert not (out / "Card.advanced.css").exists()

        manifest = json.loads((out / "bundle-manifest.json").read_text(encoding="utf-8"))
        listed = {f["file"] for f in manifest["files"]} | {"bundle-manifest.json"}
        assert {p.name for p in out.iterdir()} == listed

    def test_typescript_with_custom_jsx_warns(self, tmp_path, capsys):
        custom = tmp_path / "extra.jsx"
        custom.write_text("// note", encoding="utf-8")
        design = ContentBag(tsx="export const Card = () => null", component_name="Card")
        rebuild = BundleRebuilder(design, {"jsx": str(custom)}, str(tmp_path / "out"), True)

        rebuild()
        assert "自訂 JSX 不會出現在結果中" in capsys.readouterr().out
        assert not (tmp_path / "out" / "Card.jsx").exists()
