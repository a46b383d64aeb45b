"""
Figma 設計檔讀取

透過 REST API（或先前存下的 JSON）取得節點樹，並把節點屬性直接換成 CSS 宣告。
"""

import json
from pathlib import Path
from typing import Dict, Optional

import requests


class FigmaAPIClient:
    """Figma REST API 唯讀封裝."""

    BASE_URL = "https://api.figma.com/v1"

    def __init__(self, token: str, timeout: float = 30):
        self.token = token
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "X-Figma-Token": token,
            "Content-Type": "application/json",
        })

    def get_file(self, file_key: str) -> dict:
        url = f"{self.BASE_URL}/files/{file_key}"
        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()


def load_figma_json(path: str) -> dict:
    """讀取先前存下的 GET /files 回應（離線使用）。"""
    with open(Path(path), "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"'{path}' 不是 Figma 檔案 JSON 物件")
    return data


def select_pages(document: dict, page_name: Optional[str], page_index: Optional[int], all_pages: bool = False) -> list:
    pages = document.get("children", [])
    if not pages:
        return []
    if all_pages:
        return pages
    if page_name:
        return [p for p in pages if p.get("name") == page_name][:1]
    if page_index is not None:
        if 0 <= page_index < len(pages):
            return [pages[page_index]]
        return []
    return [pages[0]]


def find_node(node: dict, name: str) -> Optional[dict]:
    """深度優先找第一個名稱相符的節點."""
    if node.get("name") == name:
        return node
    for child in node.get("children", []):
        found = find_node(child, name)
        if found:
            return found
    return None


def visible_children(node: dict) -> list:
    return [c for c in node.get("children", []) or [] if c.get("visible", True)]


def _rgb(color: dict) -> tuple:
    return tuple(int(color.get(ch, 0) * 255) for ch in ("r", "g", "b"))


def _first_solid(paints: list) -> Optional[dict]:
    for paint in paints or []:
        if paint.get("visible", True) and paint.get("type") == "SOLID":
            return paint
    return None


def _align(value: str, axis: str) -> str:
    if value == "CENTER":
        return "center"
    if value == "MAX":
        return "flex-end"
    if value == "SPACE_BETWEEN" and axis == "primary":
        return "space-between"
    return "flex-start"


def node_styles(node: dict) -> Dict[str, str]:
    """Figma 節點 → CSS 宣告（key 為 CSS 屬性名）。"""
    styles: Dict[str, str] = {"box-sizing": "border-box"}
    bbox = node.get("absoluteBoundingBox") or {}
    if bbox.get("width"):
        styles["width"] = f"{int(bbox['width'])}px"
    if bbox.get("height"):
        styles["height"] = f"{int(bbox['height'])}px"

    is_text = node.get("type") == "TEXT"
    fill = _first_solid(node.get("fills"))
    if fill and not is_text:
        r, g, b = _rgb(fill.get("color", {}))
        a = fill.get("opacity", fill.get("color", {}).get("a", 1))
        styles["background-color"] = f"rgba({r}, {g}, {b}, {a})"

    if node.get("opacity") is not None and node["opacity"] < 1:
        styles["opacity"] = str(node["opacity"])

    radii = node.get("rectangleCornerRadii")
    if radii and len(radii) == 4:
        styles["border-radius"] = " ".join(f"{int(v)}px" for v in radii)
    elif node.get("cornerRadius"):
        styles["border-radius"] = f"{int(node['cornerRadius'])}px"

    stroke = _first_solid(node.get("strokes"))
    if stroke:
        r, g, b = _rgb(stroke.get("color", {}))
        styles["border"] = f"{int(node.get('strokeWeight', 1))}px solid rgb({r}, {g}, {b})"

    shadows = []
    for effect in node.get("effects", []) or []:
        if effect.get("visible", True) and effect.get("type") == "DROP_SHADOW":
            c = effect.get("color", {})
            r, g, b = _rgb(c)
            off = effect.get("offset", {})
            shadows.append(
                f"{off.get('x', 0)}px {off.get('y', 0)}px {effect.get('radius', 0)}px "
                f"{effect.get('spread', 0)}px rgba({r}, {g}, {b}, {c.get('a', 0.25)})"
            )
    if shadows:
        styles["box-shadow"] = ", ".join(shadows)

    if node.get("layoutMode") in ("HORIZONTAL", "VERTICAL"):
        styles["display"] = "flex"
        styles["flex-direction"] = "row" if node["layoutMode"] == "HORIZONTAL" else "column"
        styles["gap"] = f"{int(node.get('itemSpacing', 0))}px"
        styles["padding"] = " ".join(
            f"{int(node.get(k, 0))}px"
            for k in ("paddingTop", "paddingRight", "paddingBottom", "paddingLeft")
        )
        styles["justify-content"] = _align(node.get("primaryAxisAlignItems", "MIN"), "primary")
        styles["align-items"] = _align(node.get("counterAxisAlignItems", "MIN"), "counter")

    if is_text:
        style = node.get("style", {})
        styles["font-size"] = f"{int(style.get('fontSize', 14))}px"
        styles["font-family"] = style.get("fontFamily", "Inter")
        styles["font-weight"] = str(int(style.get("fontWeight", 400)))
        if style.get("lineHeightPx"):
            styles["line-height"] = f"{int(style['lineHeightPx'])}px"
        styles["text-align"] = style.get("textAlignHorizontal", "LEFT").lower().replace("justified", "justify")
        if fill:
            r, g, b = _rgb(fill.get("color", {}))
            styles["color"] = f"rgb({r}, {g}, {b})"

    return styles
