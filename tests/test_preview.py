"""
Tests de la prévisualisation : filtre d'affichage, bloc actif, HTML autonome, URLs vidéo.
"""

from app.schemas.block import (
    BlockStyles, CalloutBlock, DividerBlock, Heading1Block, ImageBlock, ListBlock, ParagraphBlock, VideoBlock,
)
from app.schemas.page import PageSettings
from app.services.preview import build_nodes, render_live, render_standalone
from app.services.style_resolver import THEME_COLORS, resolve_block_style, to_inline_css
from app.services.video_service import detect_video_platform, get_embed_url

LIGHT = PageSettings()
DARK = PageSettings(theme="dark")

# ========== TEST VIDEO ==========

def test_youtube_watch_url():
    assert get_embed_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ") == "https://www.youtube.com/embed/dQw4w9WgXcQ"

def test_youtube_watch_url_extra_params():
    assert get_embed_url("https://youtube.com/watch?feature=share&v=abc123&t=10") == "https://www.youtube.com/embed/abc123"

def test_youtube_short_url():
    assert get_embed_url("https://youtu.be/abc123?si=xyz") == "https://www.youtube.com/embed/abc123"

def test_vimeo_and_loom():
    assert get_embed_url("https://vimeo.com/76979871") == "https://player.vimeo.com/video/76979871"
    assert get_embed_url("https://www.loom.com/share/0123abcd") == "https://www.loom.com/embed/0123abcd"

def test_unknown_url_passed_through():
    assert get_embed_url("https://example.com/video.mp4") == "https://example.com/video.mp4"
    assert get_embed_url("") == ""

def test_unknown_url_requires_http_scheme():
    assert get_embed_url("javascript:alert(document.cookie)") == ""
    assert get_embed_url("data:text/html;base64,PHNjcmlwdD4=") == ""
    assert get_embed_url("HTTP://example.com/v") == "HTTP://example.com/v"

def test_detect_platform():
    assert detect_video_platform("https://youtu.be/x") == "youtube"
    assert detect_video_platform("https://vimeo.com/1") == "vimeo"
    assert detect_video_platform("https://loom.com/share/a") == "loom"
    assert detect_video_platform("https://example.com") == "other"

# ========== TEST NODES ==========

def test_content_less_blocks_not_rendered():
    blocks = [
        ParagraphBlock(id="empty", content="  "),
        ListBlock(id="blank-list", items=["", " "]),
        ImageBlock(id="no-img", url=""),
        VideoBlock(id="no-video", url=""),
        CalloutBlock(id="no-callout"),
        Heading1Block(id="h", content="Title"),
        DividerBlock(id="d"),
    ]
    nodes = build_nodes(blocks, LIGHT)
    assert [n.block_id for n in nodes] == ["h", "d"]

def test_display_filter_does_not_mutate():
    blocks = [ListBlock(id="l", items=["A", "", "B"])]
    nodes = build_nodes(blocks, LIGHT)
    assert nodes[0].items == ["A", "B"]
    assert blocks[0].items == ["A", "", "B"]

def test_video_node_uses_embed_url():
    nodes = build_nodes([VideoBlock(id="v", url="https://www.youtube.com/watch?v=abc")], LIGHT)
    assert nodes[0].src == "https://www.youtube.com/embed/abc"
    assert nodes[0].platform == "youtube"

def test_video_with_unsafe_url_not_rendered():
    blocks = [VideoBlock(id="v", url="javascript:alert(document.cookie)")]
    assert build_nodes(blocks, LIGHT) == []
    assert "javascript:" not in render_standalone(blocks, LIGHT)

def test_nodes_use_style_resolver():
    block = ParagraphBlock(id="p", content="Hi", styles=BlockStyles(size="large"))
    node = build_nodes([block], DARK)[0]
    assert node.styles == resolve_block_style(block, "dark")

# ========== TEST LIVE ==========

def test_empty_sequence_shows_empty_state():
    preview = render_live([], LIGHT)
    assert preview.nodes == []
    assert preview.empty_state is not None
    assert preview.scroll is None

def test_active_block_highlight_and_scroll():
    blocks = [Heading1Block(id="a", content="A"), ParagraphBlock(id="b", content="B")]
    preview = render_live(blocks, LIGHT, active_block_id="b", scroll_trigger=3)

    active = [n for n in preview.nodes if n.active]
    assert [n.block_id for n in active] == ["b"]
    assert "outline" in active[0].styles["container"]
    assert preview.scroll.block_id == "b"
    assert preview.scroll.behavior == "smooth"
    assert preview.scroll.block == "center"
    assert preview.scroll.trigger == 3

def test_active_block_not_visible_no_scroll():
    blocks = [ParagraphBlock(id="empty", content="")]
    preview = render_live(blocks, LIGHT, active_block_id="empty", scroll_trigger=1)
    assert preview.scroll is None

def test_title_falls_back_to_product_name():
    assert render_live([], LIGHT, product_name="My Course").title == "My Course"
    assert render_live([], PageSettings(title="Custom"), product_name="My Course").title == "Custom"

# ========== TEST STANDALONE ==========

def test_standalone_is_complete_document():
    html = render_standalone([Heading1Block(id="h", content="Welcome")], LIGHT, "My Course")
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>My Course</title>" in html
    assert "Welcome" in html
    assert "<link" not in html and "<script" not in html

def test_standalone_uses_same_styles_as_live():
    block = ParagraphBlock(id="p", content="Hello", styles=BlockStyles(size="xlarge", color="#123456"))
    html = render_standalone([block], DARK)
    node = render_live([block], DARK).nodes[0]
    assert to_inline_css(node.styles["text"]) in html

def test_standalone_dark_background():
    html = render_standalone([], DARK)
    assert THEME_COLORS["page_background"]["dark"] in html
    assert "No content yet" in html

def test_standalone_escapes_user_content():
    html = render_standalone([ParagraphBlock(id="p", content="<script>alert(1)</script>")], LIGHT)
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html

def test_standalone_caption_position():
    block = ImageBlock(id="i", url="https://cdn/x.png", caption="Cover",
                       styles=BlockStyles(caption={"position": "above"}))
    html = render_standalone([block], LIGHT)
    assert html.index("Cover</p>") < html.index("<img")

def test_standalone_list_and_callout():
    blocks = [ListBlock(id="l", items=["One", "", "Two"]), CalloutBlock(id="c", content="Tip", emoji="🔥")]
    html = render_standalone(blocks, LIGHT)
    assert html.count("<li") == 2
    assert "🔥" in html and "Tip" in html
