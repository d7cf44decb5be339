from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from app.schemas.block import Align, HEX_COLOR, Theme

# Réglages de la page (frères de la séquence de blocs dans le même document)

class TextStyles(BaseModel):
    model_config = ConfigDict(extra="forbid")

    size: Optional[str] = None
    align: Optional[Align] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)

class PageSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = ""
    subtitle: str = ""
    title_styles: TextStyles = Field(default_factory=TextStyles)
    subtitle_styles: TextStyles = Field(default_factory=TextStyles)
    background_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    theme: Theme = "light"

class PageSettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    subtitle: Optional[str] = None
    title_styles: Optional[TextStyles] = None
    subtitle_styles: Optional[TextStyles] = None
    background_color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    theme: Optional[Theme] = None
