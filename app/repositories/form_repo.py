# app/repositories/form_repo.py
import json
import logging

from pydantic import ValidationError

from app.core.local_storage import STORAGE_ERRORS, LocalStorage
from app.schemas.customize import CustomizationForm

logger = logging.getLogger(__name__)

FORM_STORAGE_KEY = "starterprint3d_form_data"


class FormDraftRepository:
    """
    Draft of the customization form, kept in device storage between
    the form, prompt and upload screens.
    """

    def __init__(self, storage: LocalStorage, key: str = FORM_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> CustomizationForm:
        """Saved draft, or a fresh form if missing or unreadable."""
        try:
            raw = self.storage.get_item(self.key)
        except STORAGE_ERRORS:
            logger.exception("Could not read the form draft")
            return CustomizationForm()
        if raw is None:
            return CustomizationForm()
        try:
            return CustomizationForm.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.warning("Ignoring corrupt form draft in local storage")
            return CustomizationForm()

    def save(self, form: CustomizationForm) -> bool:
        """Store the draft; returns False when the storage refuses it."""
        try:
            self.storage.set_item(self.key, form.model_dump_json())
        except STORAGE_ERRORS as exc:
            logger.warning("Form draft not saved: %s", exc)
            return False
        return True

    def clear(self) -> None:
        self.storage.remove_item(self.key)
