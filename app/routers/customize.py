# app/routers/customize.py
from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.core.auth import get_storefront
from app.schemas.cart import CartSummary
from app.schemas.customize import (
    BackgroundColor,
    CustomizationForm,
    CustomizationUpdate,
    PromptRead,
)
from app.services.customize_service import BACKGROUND_COLORS
from app.storefront import Storefront

router = APIRouter(prefix="/customize", tags=["Customize"])


@router.get("/colors", response_model=list[BackgroundColor])
def list_colors():
    """Palette for the blister card background."""
    return BACKGROUND_COLORS


@router.get("/form", response_model=CustomizationForm)
def read_form(storefront: Storefront = Depends(get_storefront)):
    return storefront.customize.get_form()


@router.patch("/form", response_model=CustomizationForm)
def update_form(
    payload: CustomizationUpdate,
    storefront: Storefront = Depends(get_storefront),
):
    """Save answers of the current screen into the draft."""
    return storefront.customize.update_form(payload)


@router.delete("/form", response_model=CustomizationForm)
def reset_form(storefront: Storefront = Depends(get_storefront)):
    return storefront.customize.reset_form()


@router.get("/prompt", response_model=PromptRead)
def read_prompt(storefront: Storefront = Depends(get_storefront)):
    """Prompt to copy into the image generator."""
    return storefront.customize.prompt()


@router.post("/design", response_model=CartSummary)
async def upload_design(
    file: UploadFile = File(...),
    image_url: str = Form(default=""),
    storefront: Storefront = Depends(get_storefront),
):
    """
    Upload the generated design and add the pack to the cart.

    Auth:
      - Requires a signed-in customer (401 otherwise).
    Validation:
      - image/* only, max 10MB.
    """
    file_bytes = await file.read()
    return storefront.customize.finalize(
        filename=file.filename or "design.png",
        content_type=file.content_type,
        file_bytes=file_bytes,
        image_url=image_url,
    )
