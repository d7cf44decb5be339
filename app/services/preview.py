"""
Prévisualisation de la page de livraison.

Deux rendus construits à partir des MEMES noeuds (build_nodes) :
- render_live : modèle de vue pour l'aperçu dans l'app (bloc actif + scroll)
- render_standalone : document HTML autonome (styles inline) via Jinja2
"""

from pathlib import Path
from typing import List, Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape
from app.schemas.content import EmptyState, LivePreview, PreviewNode, ScrollInstruction
from app.schemas.page import PageSettings
from app.services.style_resolver import (
    caption_position, default_color, resolve_block_style, resolve_page_style, to_inline_css,
)
from app.services.video_service import detect_video_platform, get_embed_url

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["css"] = to_inline_css


def _node(block, theme: str) -> Optional[PreviewNode]:
    """None si le bloc n'a rien à afficher pour son type (filtre d'affichage, pas de mutation)"""
    styles = resolve_block_style(block, theme)
    base = {"block_id": block.id, "kind": block.type, "styles": styles}

    if block.type in ("heading1", "heading2", "paragraph"):
        if not block.content.strip():
            return None
        return PreviewNode(text=block.content, **base)

    if block.type == "callout":
        if not block.content.strip():
            return None
        return PreviewNode(text=block.content, emoji=block.emoji or "💡", **base)

    if block.type == "list":
        items = [item for item in block.items if item.strip()]
        if not items:
            return None
        return PreviewNode(items=items, **base)

    if block.type == "video":
        src = get_embed_url(block.url.strip())
        if not src:
            return None
        return PreviewNode(src=src, caption=block.caption or None, platform=detect_video_platform(src),
                           caption_position=caption_position(block.styles), **base)

    if block.type == "image":
        if not block.url.strip():
            return None
        return PreviewNode(src=block.url.strip(), caption=block.caption or None,
                           caption_position=caption_position(block.styles), **base)

    # divider
    return PreviewNode(**base)


def build_nodes(blocks: List, settings: PageSettings) -> List[PreviewNode]:
    nodes = []
    for block in blocks:
        node = _node(block, settings.theme)
        if node is not None:
            nodes.append(node)
    return nodes


def render_live(
    blocks: List,
    settings: PageSettings,
    active_block_id: Optional[str] = None,
    scroll_trigger: int = 0,
    product_name: str = "",
) -> LivePreview:
    nodes = build_nodes(blocks, settings)

    scroll = None
    for node in nodes:
        if node.block_id == active_block_id:
            node.active = True
            # surbrillance du bloc actif, uniquement dans l'aperçu live
            node.styles["container"] = {
                **node.styles["container"],
                "outline": f"2px solid {default_color(settings.theme, 'accent')}",
                "outline-offset": "4px",
            }
            scroll = ScrollInstruction(block_id=node.block_id, trigger=scroll_trigger)

    return LivePreview(
        page=resolve_page_style(settings),
        title=settings.title or product_name,
        subtitle=settings.subtitle,
        nodes=nodes,
        empty_state=EmptyState() if not nodes else None,
        active_block_id=active_block_id,
        scroll=scroll,
    )


def render_standalone(blocks: List, settings: PageSettings, product_name: str = "") -> str:
    """Document HTML complet pour "ouvrir l'aperçu dans un nouvel onglet" """
    preview = render_live(blocks, settings, product_name=product_name)
    template = _env.get_template("delivery_page.html")
    return template.render(preview=preview, page_title=preview.title or "Preview")
