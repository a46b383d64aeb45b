"""設定檔載入與基本驗證."""

import json
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = "figma-bundle.config.json"

# 已知有效的頂層欄位
_KNOWN_TOP_KEYS = {"figma", "bundle", "custom"}

# 各區塊已知欄位（用於拼字提示）
_KNOWN_SECTION_KEYS = {
    "figma": {"personalAccessToken", "fileKey"},
    "bundle": {"componentName", "typescript", "responsive", "outputDir", "page"},
    "custom": {"jsx", "css", "cssAdvanced"},
}


def _warn(msg: str) -> None:
    print(f"   ⚠️  [config] {msg}")


def validate_config(cfg: dict) -> None:
    """對 config 做基本欄位驗證，印出警告但不拋例外。"""
    if not cfg:
        return

    for key in cfg:
        if key not in _KNOWN_TOP_KEYS:
            known = ", ".join(sorted(_KNOWN_TOP_KEYS))
            _warn(f"未知頂層欄位 '{key}'（已知欄位：{known}）")

    for section, known_keys in _KNOWN_SECTION_KEYS.items():
        section_cfg = cfg.get(section, {})
        if not isinstance(section_cfg, dict):
            _warn(f"[{section}] 應為 JSON 物件，目前是 {type(section_cfg).__name__}")
            continue
        for key in section_cfg:
            if key not in known_keys:
                known = ", ".join(sorted(known_keys))
                _warn(f"[{section}] 未知欄位 '{key}'（已知欄位：{known}）")

    bundle = cfg.get("bundle", {})
    if isinstance(bundle, dict):
        for flag in ("typescript", "responsive"):
            value = bundle.get(flag)
            if value is not None and not isinstance(value, bool):
                _warn(f"bundle.{flag} 應為 true/false，目前是 {type(value).__name__}")

    # custom 區塊填的是檔案路徑；不存在只提示（watch 時可能稍後才建立）
    custom = cfg.get("custom", {})
    if isinstance(custom, dict):
        for kind, path in custom.items():
            if not isinstance(path, str):
                _warn(f"custom.{kind} 應為檔案路徑字串，目前是 {type(path).__name__}，將忽略")
                continue
            if path and not Path(path).exists():
                _warn(f"custom.{kind} 檔案 '{path}' 不存在")


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """載入 JSON 設定檔，不存在則回傳空 dict；存在則做基本驗證。"""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        cfg: Any = json.load(f)
    if not isinstance(cfg, dict):
        print(f"   ⚠️  [config] '{config_path}' 格式錯誤，應為 JSON 物件，回傳空設定。")
        return {}
    validate_config(cfg)
    return cfg
