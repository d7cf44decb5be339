"""
Blocs de contenu de la page de livraison.

Union discriminée sur `type` : un modèle par type de bloc.
La séquence complète est sérialisée en JSON dans un seul champ du produit.
"""
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

BlockKind = Literal["heading1", "heading2", "paragraph", "list", "video", "image", "divider", "callout"]
BLOCK_KINDS: Tuple[str, ...] = ("heading1", "heading2", "paragraph", "list", "video", "image", "divider", "callout")

Theme = Literal["light", "dark"]
Align = Literal["left", "center", "right"]

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"
DEFAULT_CALLOUT_EMOJI = "💡"


class CaptionStyles(BaseModel):
    model_config = ConfigDict(extra="forbid")

    position: Optional[Literal["below", "above"]] = None
    size: Optional[Literal["small", "medium", "large"]] = None
    align: Optional[Align] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)


class BlockStyles(BaseModel):
    """Surcharges de style, toutes optionnelles (absent = défaut du type + thème)"""
    model_config = ConfigDict(extra="forbid")

    size: Optional[str] = None  # preset (small/medium/large/xlarge) ou longueur CSS
    align: Optional[Align] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    background: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    width: Optional[Literal["narrow", "medium", "wide", "full"]] = None
    image_size: Optional[str] = None
    rounded: Optional[Literal["none", "small", "medium", "large", "full"]] = None
    border: Optional[bool] = None
    item_spacing: Optional[Literal["tight", "normal", "relaxed"]] = None
    caption: Optional[CaptionStyles] = None


class _BaseBlock(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    styles: Optional[BlockStyles] = None


class Heading1Block(_BaseBlock):
    type: Literal["heading1"] = "heading1"
    content: str = ""


class Heading2Block(_BaseBlock):
    type: Literal["heading2"] = "heading2"
    content: str = ""


class ParagraphBlock(_BaseBlock):
    type: Literal["paragraph"] = "paragraph"
    content: str = ""


class ListBlock(_BaseBlock):
    type: Literal["list"] = "list"
    items: List[str] = Field(default_factory=lambda: [""])


class VideoBlock(_BaseBlock):
    type: Literal["video"] = "video"
    url: str = ""
    caption: Optional[str] = None


class ImageBlock(_BaseBlock):
    type: Literal["image"] = "image"
    url: str = ""
    caption: Optional[str] = None


class DividerBlock(_BaseBlock):
    type: Literal["divider"] = "divider"


class CalloutBlock(_BaseBlock):
    type: Literal["callout"] = "callout"
    content: str = ""
    emoji: str = DEFAULT_CALLOUT_EMOJI


ContentBlock = Annotated[
    Union[
        Heading1Block, Heading2Block, ParagraphBlock, ListBlock,
        VideoBlock, ImageBlock, DividerBlock, CalloutBlock,
    ],
    Field(discriminator="type"),
]

BlockSequence = TypeAdapter(List[ContentBlock])

BLOCK_MODELS = {
    "heading1": Heading1Block,
    "heading2": Heading2Block,
    "paragraph": ParagraphBlock,
    "list": ListBlock,
    "video": VideoBlock,
    "image": ImageBlock,
    "divider": DividerBlock,
    "callout": CalloutBlock,
}

# Champs de contenu modifiables par type
PAYLOAD_FIELDS: Dict[str, Tuple[str, ...]] = {
    "heading1": ("content",),
    "heading2": ("content",),
    "paragraph": ("content",),
    "list": ("items",),
    "video": ("url", "caption"),
    "image": ("url", "caption"),
    "divider": (),
    "callout": ("content", "emoji"),
}

# Surcharges de style acceptées par type
STYLE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "heading1": ("size", "align", "color"),
    "heading2": ("size", "align", "color"),
    "paragraph": ("size", "align", "color", "background", "width"),
    "list": ("size", "align", "color", "item_spacing"),
    "callout": ("size", "align", "color", "background", "width"),
    "image": ("align", "image_size", "rounded", "border", "caption"),
    "video": ("align", "width", "rounded", "caption"),
    "divider": ("color", "width"),
}


# ========== SCHEMAS API ==========

class BlockCreate(BaseModel):
    """Ajouter un bloc en fin de séquence"""
    kind: BlockKind


class BlockUpdate(BaseModel):
    """Modifier le contenu d'un bloc (seuls les champs envoyés sont appliqués)"""
    model_config = ConfigDict(extra="forbid")

    content: Optional[str] = None
    items: Optional[List[str]] = None
    url: Optional[str] = None
    caption: Optional[str] = None
    emoji: Optional[str] = None


class BlockMove(BaseModel):
    direction: Literal["up", "down"]


class BlockReorder(BaseModel):
    target_index: int = Field(ge=0)
