"""
Generator / figma_reader 測試
全部用假 Figma 節點資料，不需要 Token。
"""
import pytest
from figma_bundle.figma_reader import find_node, node_styles, select_pages
from figma_bundle.generator import (
    StyleSheet,
    generate_fragments,
    generate_from_document,
    generate_pages,
    sanitize_component_name,
)


def make_node(**kwargs):
    base = {
        "type": "FRAME",
        "name": "Card",
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 320, "height": 120},
        "children": [],
    }
    base.update(kwargs)
    return base


CARD = make_node(
    fills=[{"visible": True, "type": "SOLID", "color": {"r": 1.0, "g": 1.0, "b": 1.0, "a": 1.0}}],
    cornerRadius=8,
    layoutMode="VERTICAL",
    itemSpacing=12,
    paddingTop=16, paddingRight=16, paddingBottom=16, paddingLeft=16,
    children=[
        make_node(
            type="TEXT",
            name="Title",
            characters="Hello {world}",
            style={"fontSize": 20, "fontFamily": "Inter", "fontWeight": 700},
            fills=[{"visible": True, "type": "SOLID", "color": {"r": 0, "g": 0, "b": 0, "a": 1}}],
        ),
        make_node(name="Hidden", visible=False),
        make_node(name="Divider", children=[]),
    ],
)


# ─── node_styles ─────────────────────────────────────────────────────────────

class TestNodeStyles:
    def test_frame_fill_radius_auto_layout(self):
        s = node_styles(CARD)
        assert s["width"] == "320px"
        assert s["background-color"] == "rgba(255, 255, 255, 1.0)"
        assert s["border-radius"] == "8px"
        assert s["display"] == "flex"
        assert s["flex-direction"] == "column"
        assert s["gap"] == "12px"
        assert s["padding"] == "16px 16px 16px 16px"

    def test_text_fill_becomes_color(self):
        s = node_styles(CARD["children"][0])
        assert "background-color" not in s
        assert s["color"] == "rgb(0, 0, 0)"
        assert s["font-size"] == "20px"
        assert s["font-weight"] == "700"

    def test_per_corner_radii(self):
        s = node_styles(make_node(rectangleCornerRadii=[1, 2, 3, 4]))
        assert s["border-radius"] == "1px 2px 3px 4px"

    def test_stroke_and_shadow(self):
        node = make_node(
            strokes=[{"type": "SOLID", "color": {"r": 1, "g": 0, "b": 0}}],
            strokeWeight=2,
            effects=[{"type": "DROP_SHADOW", "color": {"r": 0, "g": 0, "b": 0, "a": 0.5},
                      "offset": {"x": 0, "y": 4}, "radius": 8}],
        )
        s = node_styles(node)
        assert s["border"] == "2px solid rgb(255, 0, 0)"
        assert s["box-shadow"] == "0px 4px 8px 0px rgba(0, 0, 0, 0.5)"

    def test_invisible_fill_ignored(self):
        node = make_node(fills=[{"visible": False, "type": "SOLID", "color": {"r": 1}}])
        assert "background-color" not in node_styles(node)


# ─── 頁面 / 節點選擇 ─────────────────────────────────────────────────────────

DOC = {"document": {"children": [
    {"type": "CANVAS", "name": "Home", "children": [CARD]},
    {"type": "CANVAS", "name": "Settings", "children": []},
]}}


def test_select_pages():
    doc = DOC["document"]
    assert select_pages(doc, None, None)[0]["name"] == "Home"
    assert select_pages(doc, "Settings", None)[0]["name"] == "Settings"
    assert select_pages(doc, None, 1)[0]["name"] == "Settings"
    assert select_pages(doc, None, 5) == []
    assert select_pages(doc, "Nope", None) == []
    assert len(select_pages(doc, None, None, all_pages=True)) == 2


def test_find_node():
    assert find_node(DOC["document"], "Title")["characters"] == "Hello {world}"
    assert find_node(DOC["document"], "Missing") is None


# ─── sanitize_component_name ────────────────────────────────────────────────

@pytest.mark.parametrize("raw,expected", [
    ("primary button", "Primarybutton"),
    ("Card / Hover", "CardHover"),
    ("3col", "Component3col"),
    ("", "Component"),
    (None, "Component"),
    ("✨", "Component"),
])
def test_sanitize_component_name(raw, expected):
    assert sanitize_component_name(raw) == expected


# ─── generate_fragments ─────────────────────────────────────────────────────

class TestGenerateFragments:
    def test_plain_bundle(self):
        bag = generate_fragments(CARD)
        assert bag.component_name == "Card"
        assert "export function Card({ className = '', children }) {" in bag.jsx
        assert "import './Card.css'" in bag.jsx
        assert bag.tsx is None
        assert bag.typescript is None
        assert ".card-card-1 {" in bag.css
        assert "<link rel=\"stylesheet\" href=\"./Card.css\">" in bag.html

    def test_hidden_children_skipped(self):
        bag = generate_fragments(CARD)
        assert "hidden" not in bag.css
        assert "Hidden" not in bag.jsx

    def test_text_escaped_for_jsx_and_html(self):
        bag = generate_fragments(CARD)
        assert "Hello &#123;world&#125;" in bag.jsx
        assert "Hello {world}" in bag.html

    def test_markup_class_names_match_css(self):
        bag = generate_fragments(CARD)
        for class_name in ("card-title-2", "card-divider-3"):
            assert f".{class_name} {{" in bag.css
            assert f"className=\"{class_name}\"" in bag.jsx
            assert f"class=\"{class_name}\"" in bag.html

    def test_typescript_bundle(self):
        bag = generate_fragments(CARD, component_name="profile card", typescript=True)
        assert bag.component_name == "Profilecard"
        assert "interface ProfilecardProps" in bag.tsx
        assert "}: ProfilecardProps) {" in bag.tsx
        assert "export declare function Profilecard(props: ProfilecardProps)" in bag.typescript
        assert bag.jsx is not None

    def test_responsive_media_queries_in_css_advanced(self):
        bag = generate_fragments(CARD, responsive=True)
        assert bag.css_advanced.startswith("@media (max-width: 768px) {\n  .card-card-1 {\n    width: 100%;")
        assert "@media (max-width: 480px)" in bag.css_advanced
        assert "font-size: 0.875rem;" in bag.css_advanced
        # 一般 css 不受影響
        assert "@media" not in bag.css

    def test_css_advanced_absent_without_responsive(self):
        assert generate_fragments(CARD).css_advanced is None

    def test_stylesheet_skips_empty_rules(self):
        sheet = StyleSheet(prefix="x")
        sheet.rules["x-empty-1"] = {}
        assert sheet.to_css() == ""


def test_generate_from_document_uses_node():
    bag = generate_from_document(DOC, node_name="Card")
    assert bag.component_name == "Card"


def test_generate_from_document_page_name_default():
    bag = generate_from_document(DOC, page_name="Settings")
    assert bag.component_name == "Settings"


def test_generate_from_document_errors():
    with pytest.raises(ValueError):
        generate_from_document({"document": {"children": []}})
    with pytest.raises(ValueError):
        generate_from_document(DOC, node_name="Missing")


def test_generate_from_document_responsive():
    bag = generate_from_document(DOC, node_name="Card", responsive=True)
    assert ".card-card-1 {" in bag.css_advanced


# ─── generate_pages ─────────────────────────────────────────────────────────

def test_generate_pages_one_bag_per_page():
    bags = generate_pages(DOC, typescript=True)
    assert [b.component_name for b in bags] == ["Home", "Settings"]
    assert all(b.tsx is not None for b in bags)
    assert all(b.css_advanced is None for b in bags)


def test_generate_pages_dedupes_sanitized_names():
    doc = {"document": {"children": [
        {"type": "CANVAS", "name": "Home", "children": []},
        {"type": "CANVAS", "name": "Home!", "children": []},
        {"type": "CANVAS", "name": "", "children": []},
    ]}}
    bags = generate_pages(doc, responsive=True)
    assert [b.component_name for b in bags] == ["Home", "Home2", "Component"]
    assert ".home2-home-1 {" in bags[1].css_advanced


def test_generate_pages_empty_document():
    with pytest.raises(ValueError):
        generate_pages({"document": {}})
