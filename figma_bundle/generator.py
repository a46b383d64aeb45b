"""
Generator — Figma 節點 → 設計片段（ContentBag）

jsx / css / html 一律產出；typescript=True 時另外產出 tsx 與 .d.ts 型別，
responsive=True 時把 root 的斷點 media query 放進 cssAdvanced。
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .content import DEFAULT_COMPONENT_NAME, ContentBag
from .figma_reader import find_node, node_styles, select_pages, visible_children


@dataclass
class StyleSheet:
    prefix: str
    counter: int = 0
    rules: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def add_node(self, node: dict) -> str:
        self.counter += 1
        class_name = f"{self.prefix}-{_kebab(node.get('name', 'node'))}-{self.counter}"
        self.rules[class_name] = node_styles(node)
        return class_name

    def to_css(self) -> str:
        blocks = []
        for class_name, styles in self.rules.items():
            if not styles:
                continue
            body = "\n".join(f"  {prop}: {val};" for prop, val in styles.items())
            blocks.append(f".{class_name} {{\n{body}\n}}")
        return "\n\n".join(blocks) + "\n" if blocks else ""


def sanitize_component_name(name: Optional[str]) -> str:
    """只留英數字；數字開頭補 Component 前綴；首字大寫。"""
    safe = re.sub(r"[^a-zA-Z0-9]", "", name or "")
    if not safe:
        return DEFAULT_COMPONENT_NAME
    if safe[0].isdigit():
        safe = DEFAULT_COMPONENT_NAME + safe
    return safe[0].upper() + safe[1:]


def _kebab(name: str) -> str:
    slug = "".join(ch.lower() if ch.isalnum() else "-" for ch in name).strip("-")
    while "--" in slug:
        slug = slug.replace("--", "-")
    return slug or "unnamed"


def _jsx_text(text: str) -> str:
    escaped = html.escape(text, quote=False)
    return escaped.replace("{", "&#123;").replace("}", "&#125;")


def _render_markup(node: dict, sheet: StyleSheet, indent: int, jsx: bool) -> str:
    pad = "  " * indent
    attr = "className" if jsx else "class"
    class_name = sheet.add_node(node)
    if node.get("type") == "TEXT":
        chars = node.get("characters", "")
        text = _jsx_text(chars) if jsx else html.escape(chars, quote=False)
        return f"{pad}<span {attr}=\"{class_name}\">{text}</span>"

    children = visible_children(node)
    if not children:
        if jsx:
            return f"{pad}<div {attr}=\"{class_name}\" />"
        return f"{pad}<div {attr}=\"{class_name}\"></div>"
    inner = "\n".join(_render_markup(child, sheet, indent + 1, jsx) for child in children)
    return f"{pad}<div {attr}=\"{class_name}\">\n{inner}\n{pad}</div>"


def _render_body(root: dict, prefix: str, indent: int, jsx: bool) -> tuple[str, str, StyleSheet]:
    """回傳 (root class, 子節點 markup, stylesheet)；class 名稱依走訪順序決定，多次呼叫結果一致。"""
    sheet = StyleSheet(prefix=prefix)
    root_class = sheet.add_node(root)
    inner = "\n".join(_render_markup(child, sheet, indent, jsx) for child in visible_children(root))
    return root_class, inner, sheet


def _component_source(name: str, root_class: str, inner: str, typescript: bool) -> str:
    if typescript:
        signature = (
            f"interface {name}Props {{\n"
            "  className?: string\n"
            "  children?: React.ReactNode\n"
            "}\n\n"
            f"export function {name}({{ className = '', children }}: {name}Props) {{"
        )
    else:
        signature = f"export function {name}({{ className = '', children }}) {{"
    body = f"{inner}\n" if inner else ""
    return (
        "import React from 'react'\n"
        f"import './{name}.css'\n\n"
        f"{signature}\n"
        "  return (\n"
        f"    <div className={{`{root_class} ${{className}}`}}>\n"
        f"{body}"
        "      {children}\n"
        "    </div>\n"
        "  )\n"
        "}\n\n"
        f"export default {name}\n"
    )


def _type_definitions(name: str) -> str:
    return (
        "import type { ReactNode } from 'react'\n\n"
        f"export interface {name}Props {{\n"
        "  className?: string\n"
        "  children?: ReactNode\n"
        "}\n\n"
        f"export declare function {name}(props: {name}Props): JSX.Element\n\n"
        f"export default {name}\n"
    )


def _html_page(name: str, root_class: str, inner: str) -> str:
    body = f"{inner}\n" if inner else ""
    return (
        "<!doctype html>\n"
        "<html>\n<head>\n  <meta charset=\"utf-8\">\n"
        "  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">\n"
        f"  <title>{html.escape(name)}</title>\n"
        f"  <link rel=\"stylesheet\" href=\"./{name}.css\">\n"
        "</head>\n<body>\n"
        f"  <div class=\"{root_class}\">\n{body}  </div>\n"
        "</body>\n</html>\n"
    )


def _responsive_css(root_class: str) -> str:
    """平板（768px）與手機（480px）兩個斷點，只調整 root。"""
    return (
        "@media (max-width: 768px) {\n"
        f"  .{root_class} {{\n"
        "    width: 100%;\n"
        "    padding: 1rem;\n"
        "  }\n"
        "}\n\n"
        "@media (max-width: 480px) {\n"
        f"  .{root_class} {{\n"
        "    padding: 0.5rem;\n"
        "    font-size: 0.875rem;\n"
        "  }\n"
        "}\n"
    )


def generate_fragments(
    node: dict,
    component_name: Optional[str] = None,
    typescript: bool = False,
    responsive: bool = False,
) -> ContentBag:
    name = sanitize_component_name(component_name or node.get("name"))
    prefix = _kebab(name)

    root_class, jsx_inner, sheet = _render_body(node, prefix, 3, jsx=True)
    _, html_inner, _ = _render_body(node, prefix, 2, jsx=False)

    return ContentBag(
        jsx=_component_source(name, root_class, jsx_inner, typescript=False),
        tsx=_component_source(name, root_class, jsx_inner, typescript=True) if typescript else None,
        css=sheet.to_css(),
        css_advanced=_responsive_css(root_class) if responsive else None,
        typescript=_type_definitions(name) if typescript else None,
        html=_html_page(name, root_class, html_inner),
        component_name=name,
    )


def generate_from_document(
    figma_data: dict,
    page_name: Optional[str] = None,
    page_index: Optional[int] = None,
    node_name: Optional[str] = None,
    component_name: Optional[str] = None,
    typescript: bool = False,
    responsive: bool = False,
) -> ContentBag:
    """從 GET /files 回應挑出頁面（或頁面內指定節點）產生設計片段。"""
    document = figma_data.get("document", {})
    pages = select_pages(document, page_name, page_index)
    if not pages:
        raise ValueError("No matching Figma pages found.")
    root = pages[0]
    if node_name:
        root = find_node(root, node_name)
        if root is None:
            raise ValueError(f"Node '{node_name}' not found on page '{pages[0].get('name', '')}'.")
    return generate_fragments(root, component_name=component_name, typescript=typescript, responsive=responsive)


def generate_pages(figma_data: dict, typescript: bool = False, responsive: bool = False) -> List[ContentBag]:
    """每個頁面各產生一份設計片段，元件名稱取自頁面名稱；清理後撞名的補上序號。"""
    pages = select_pages(figma_data.get("document", {}), None, None, all_pages=True)
    if not pages:
        raise ValueError("No matching Figma pages found.")
    bags = []
    seen: Dict[str, int] = {}
    for page in pages:
        name = sanitize_component_name(page.get("name"))
        seen[name] = seen.get(name, 0) + 1
        if seen[name] > 1:
            name = f"{name}{seen[name]}"
        bags.append(generate_fragments(page, component_name=name, typescript=typescript, responsive=responsive))
    return bags
