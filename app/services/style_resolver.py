"""
Résolution des styles - fonctions pures.

Transforme les surcharges d'un bloc (presets ou valeurs libres) en déclarations
CSS concrètes, avec des défauts qui dépendent du thème de la page (light/dark).
Appelé à l'identique par la prévisualisation live et par le HTML autonome.
"""

import re
from typing import Dict, List, Optional

# ============ TABLES ============

SIZE_PRESETS: Dict[str, Dict[str, str]] = {
    "title": {"small": "2rem", "medium": "2.5rem", "large": "3rem", "xlarge": "3.75rem"},
    "subtitle": {"small": "1rem", "medium": "1.125rem", "large": "1.25rem", "xlarge": "1.5rem"},
    "heading1": {"small": "1.875rem", "medium": "2.25rem", "large": "3rem", "xlarge": "3.75rem"},
    "heading2": {"small": "1.5rem", "medium": "1.875rem", "large": "2.25rem", "xlarge": "3rem"},
    "paragraph": {"small": "0.875rem", "medium": "1rem", "large": "1.125rem", "xlarge": "1.25rem"},
    "list": {"small": "0.875rem", "medium": "1rem", "large": "1.125rem", "xlarge": "1.25rem"},
    "callout": {"small": "0.875rem", "medium": "1rem", "large": "1.125rem", "xlarge": "1.25rem"},
    "image": {"small": "40%", "medium": "70%", "large": "85%", "full": "100%"},
    "caption": {"small": "0.75rem", "medium": "0.875rem", "large": "1rem"},
}

# Couleurs par défaut selon le thème
THEME_COLORS: Dict[str, Dict[str, str]] = {
    "text": {"light": "#171717", "dark": "#F5F5F5"},
    "muted": {"light": "#737373", "dark": "#A3A3A3"},
    "callout_background": {"light": "#EEF2FF", "dark": "#1E1B4B"},
    "page_background": {"light": "#FFFFFF", "dark": "#0A0A0A"},
    "border": {"light": "#E5E5E5", "dark": "#404040"},
    "accent": {"light": "#6366F1", "dark": "#818CF8"},
}

BACKGROUND_PALETTES: Dict[str, List[str]] = {
    "light": ["#FFFFFF", "#F9FAFB", "#FAF8F3", "#F0FDF4", "#EEF2FF", "#FFF7ED"],
    "dark": ["#0A0A0A", "#0B0B0D", "#0F172A", "#1A0B2E", "#0D1F0F", "#1F1315"],
}

DEFAULT_ALIGN = {
    "title": "center",
    "subtitle": "center",
    "image": "center",
    "video": "center",
    "caption": "center",
}

WIDTHS = {"narrow": "60%", "medium": "80%", "wide": "90%", "full": "100%"}
DEFAULT_WIDTH = "full"

ITEM_SPACING = {"tight": "0.25rem", "normal": "0.5rem", "relaxed": "1rem"}
DEFAULT_ITEM_SPACING = "normal"

ROUNDED = {"none": "0", "small": "4px", "medium": "8px", "large": "16px", "full": "9999px"}
DEFAULT_ROUNDED = "medium"

FONT_WEIGHTS = {"title": "700", "heading1": "700", "heading2": "600"}

_CSS_LENGTH = re.compile(r"^\d+(\.\d+)?(px|rem|em|%|vw|vh)$")


# ============ RESOLVERS ============

def resolve_size(value: Optional[str], kind: str) -> str:
    """Preset → taille concrète ; longueur CSS explicite gardée telle quelle ; sinon 'medium' du type"""
    presets = SIZE_PRESETS[kind]
    if value:
        if value in presets:
            return presets[value]
        if _CSS_LENGTH.match(value.strip()):
            return value.strip()
    return presets["medium"]


def default_color(theme: str, role: str = "text") -> str:
    return THEME_COLORS[role][theme]


def resolve_color(override: Optional[str], theme: str, role: str = "text") -> str:
    """
    Une surcharge est gardée telle quelle, sauf si elle vaut le défaut de
    l'AUTRE thème : elle suit alors le thème courant (couleur jamais touchée).
    """
    if not override:
        return default_color(theme, role)
    other = "dark" if theme == "light" else "light"
    if override.lower() == THEME_COLORS[role][other].lower():
        return default_color(theme, role)
    return override


def resolve_background(override: Optional[str], theme: str) -> str:
    """Fond de page : un fond de la palette de l'autre thème revient au défaut du thème"""
    if not override:
        return default_color(theme, "page_background")
    other = "dark" if theme == "light" else "light"
    if override.upper() in BACKGROUND_PALETTES[other] and override.upper() not in BACKGROUND_PALETTES[theme]:
        return default_color(theme, "page_background")
    return override


def background_palette(theme: str) -> List[str]:
    return list(BACKGROUND_PALETTES[theme])


def resolve_align(value: Optional[str], kind: str) -> str:
    if value in ("left", "center", "right"):
        return value
    return DEFAULT_ALIGN.get(kind, "left")


def resolve_width(value: Optional[str]) -> str:
    return WIDTHS.get(value or DEFAULT_WIDTH, WIDTHS[DEFAULT_WIDTH])


def resolve_spacing(value: Optional[str]) -> str:
    return ITEM_SPACING.get(value or DEFAULT_ITEM_SPACING, ITEM_SPACING[DEFAULT_ITEM_SPACING])


def resolve_rounded(value: Optional[str]) -> str:
    return ROUNDED.get(value or DEFAULT_ROUNDED, ROUNDED[DEFAULT_ROUNDED])


def _margins(align: str) -> Dict[str, str]:
    # positionne un élément de largeur réduite
    if align == "center":
        return {"margin-left": "auto", "margin-right": "auto"}
    if align == "right":
        return {"margin-left": "auto", "margin-right": "0"}
    return {"margin-left": "0", "margin-right": "auto"}


def _caption_style(caption, theme: str) -> Dict[str, str]:
    return {
        "font-size": resolve_size(caption.size if caption else None, "caption"),
        "text-align": resolve_align(caption.align if caption else None, "caption"),
        "color": resolve_color(caption.color if caption else None, theme, "muted"),
    }


def caption_position(styles) -> str:
    caption = styles.caption if styles else None
    return (caption.position if caption and caption.position else "below")


def resolve_block_style(block, theme: str) -> Dict[str, Dict[str, str]]:
    """
    Déclarations CSS par partie du bloc :
    container, text, media, caption, item.
    """
    s = block.styles
    kind = block.type
    parts: Dict[str, Dict[str, str]] = {"container": {}, "text": {}, "media": {}, "caption": {}, "item": {}}

    if kind in ("heading1", "heading2", "paragraph", "list", "callout"):
        parts["text"] = {
            "font-size": resolve_size(s.size if s else None, kind),
            "text-align": resolve_align(s.align if s else None, kind),
            "color": resolve_color(s.color if s else None, theme, "text"),
        }
        if kind in FONT_WEIGHTS:
            parts["text"]["font-weight"] = FONT_WEIGHTS[kind]

    if kind == "paragraph":
        parts["text"]["white-space"] = "pre-wrap"
        parts["container"] = {"width": resolve_width(s.width if s else None)}
        parts["container"].update(_margins(resolve_align(s.align if s else None, kind)))
        if s and s.background:
            parts["container"].update({"background": s.background, "padding": "1rem", "border-radius": "8px"})

    elif kind == "list":
        parts["item"] = {"margin-bottom": resolve_spacing(s.item_spacing if s else None)}

    elif kind == "callout":
        align = resolve_align(s.align if s else None, kind)
        parts["container"] = {
            "width": resolve_width(s.width if s else None),
            "background": s.background if s and s.background else default_color(theme, "callout_background"),
            "border": f"1px solid {default_color(theme, 'border')}",
            "border-radius": "8px",
            "padding": "1rem",
            "display": "flex",
            "gap": "0.75rem",
        }
        parts["container"].update(_margins(align))

    elif kind == "image":
        align = resolve_align(s.align if s else None, kind)
        parts["media"] = {
            "display": "block",
            "width": resolve_size(s.image_size if s else None, "image"),
            "border-radius": resolve_rounded(s.rounded if s else None),
        }
        parts["media"].update(_margins(align))
        if s and s.border:
            parts["media"]["border"] = f"1px solid {default_color(theme, 'border')}"
        parts["caption"] = _caption_style(s.caption if s else None, theme)

    elif kind == "video":
        align = resolve_align(s.align if s else None, kind)
        parts["container"] = {"width": resolve_width(s.width if s else None)}
        parts["container"].update(_margins(align))
        parts["media"] = {
            "width": "100%",
            "aspect-ratio": "16 / 9",
            "border": "0",
            "border-radius": resolve_rounded(s.rounded if s else None),
        }
        parts["caption"] = _caption_style(s.caption if s else None, theme)

    elif kind == "divider":
        parts["container"] = {
            "width": resolve_width(s.width if s else None),
            "border": "0",
            "border-top": f"1px solid {resolve_color(s.color if s else None, theme, 'border')}",
            "margin": "2rem auto",
        }

    return parts


def resolve_page_style(settings) -> Dict[str, Dict[str, str]]:
    """Fond de page, titre et sous-titre"""
    theme = settings.theme
    title, subtitle = settings.title_styles, settings.subtitle_styles
    return {
        "page": {
            "background": resolve_background(settings.background_color, theme),
            "color": default_color(theme, "text"),
        },
        "title": {
            "font-size": resolve_size(title.size, "title"),
            "text-align": resolve_align(title.align, "title"),
            "color": resolve_color(title.color, theme, "text"),
            "font-weight": FONT_WEIGHTS["title"],
        },
        "subtitle": {
            "font-size": resolve_size(subtitle.size, "subtitle"),
            "text-align": resolve_align(subtitle.align, "subtitle"),
            "color": resolve_color(subtitle.color, theme, "muted"),
        },
    }


def to_inline_css(declarations: Dict[str, str]) -> str:
    return ";".join(f"{prop}:{value}" for prop, value in declarations.items())
