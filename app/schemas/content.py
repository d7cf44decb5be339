from pydantic import BaseModel
from typing import Dict, List, Optional
from app.schemas.block import ContentBlock
from app.schemas.page import PageSettings

# Schemas de l'éditeur de contenu et de la prévisualisation

class PreviewNode(BaseModel):
    """Un bloc prêt à afficher (styles déjà résolus)"""
    block_id: str
    kind: str
    styles: Dict[str, Dict[str, str]]
    text: Optional[str] = None
    items: List[str] = []
    src: Optional[str] = None
    caption: Optional[str] = None
    caption_position: str = "below"
    emoji: Optional[str] = None
    platform: Optional[str] = None  # vidéo : youtube / vimeo / loom / other
    active: bool = False

class ScrollInstruction(BaseModel):
    block_id: str
    behavior: str = "smooth"
    block: str = "center"
    trigger: int

class EmptyState(BaseModel):
    title: str = "No content yet"
    hint: str = "Add blocks in the editor to see a preview"

class LivePreview(BaseModel):
    page: Dict[str, Dict[str, str]]
    title: str
    subtitle: str
    nodes: List[PreviewNode]
    empty_state: Optional[EmptyState] = None
    active_block_id: Optional[str] = None
    scroll: Optional[ScrollInstruction] = None

class EditorState(BaseModel):
    product_id: str
    blocks: List[ContentBlock]
    settings: PageSettings
    selected_block_id: Optional[str] = None
    active_block_id: Optional[str] = None
    scroll_trigger: int = 0
    pending_delete_id: Optional[str] = None
    can_undo: bool = False
    has_unsaved_changes: bool = False
    last_error: Optional[str] = None

class RemoveResponse(BaseModel):
    status: str  # "removed", "pending_confirmation" ou "noop"
    state: EditorState

class SaveResponse(BaseModel):
    saved: bool
    state: EditorState

class UploadResponse(BaseModel):
    url: str
    state: EditorState

class PaletteResponse(BaseModel):
    theme: str
    colors: List[str]
    default: str
