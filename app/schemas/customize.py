# app/schemas/customize.py
from pydantic import ConfigDict
from sqlmodel import SQLModel


class BackgroundColor(SQLModel):
    """One entry of the blister card palette."""

    id: str
    name: str
    value: str
    hex: str


class CustomizationForm(SQLModel):
    """
    Answers of the customization form.

    Every field is free text; the values are pasted verbatim into the
    generated prompt. Unknown keys from older drafts are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    subtitle: str = ""
    expression: str = ""
    posture: str = ""
    habillement: str = ""
    accessoire1: str = ""
    accessoire2: str = ""
    accessoire3: str = ""
    background_color: str = "bleu clair"
    background_color_hex: str = "#dbeafe"


class CustomizationUpdate(SQLModel):
    """Partial update of the draft form (one screen at a time)."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    subtitle: str | None = None
    expression: str | None = None
    posture: str | None = None
    habillement: str | None = None
    accessoire1: str | None = None
    accessoire2: str | None = None
    accessoire3: str | None = None
    background_color_id: str | None = None


class PromptRead(SQLModel):
    prompt: str
    generator_url: str
