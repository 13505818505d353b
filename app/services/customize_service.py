# app/services/customize_service.py
import uuid

from fastapi import HTTPException, status
from storage3.utils import StorageException
from supabase import Client

from app.core.storage_utils import file_extension, generate_filename, upload_to_storage
from app.repositories.form_repo import FormDraftRepository
from app.schemas.cart import CartItemCreate, CartSummary, UploadedFile
from app.schemas.customize import (
    BackgroundColor,
    CustomizationForm,
    CustomizationUpdate,
    PromptRead,
)
from app.services.auth_service import SessionGate
from app.services.cart_service import CartStore

# --- Design upload config ---

MAX_DESIGN_BYTES = 10 * 1024 * 1024  # 10MB

DEFAULT_ITEM_TITLE = "Starter Pack Personnalisé"

IMAGE_GENERATOR_URL = "https://chat.openai.com"


def _color(id_: str, name: str, hex_: str) -> BackgroundColor:
    return BackgroundColor(id=id_, name=name, value=name.lower(), hex=hex_)


BACKGROUND_COLORS: list[BackgroundColor] = [
    # Light colors
    _color("light-blue", "Bleu clair", "#dbeafe"),
    _color("light-green", "Vert clair", "#dcfce7"),
    _color("light-pink", "Rose clair", "#fce7f3"),
    _color("light-yellow", "Jaune clair", "#fef9c3"),
    _color("light-purple", "Violet clair", "#f3e8ff"),
    _color("light-orange", "Orange clair", "#ffedd5"),
    _color("light-gray", "Gris clair", "#f3f4f6"),
    _color("white", "Blanc", "#ffffff"),
    # Medium colors
    _color("medium-blue", "Bleu moyen", "#60a5fa"),
    _color("medium-green", "Vert moyen", "#4ade80"),
    _color("medium-pink", "Rose moyen", "#f472b6"),
    _color("medium-yellow", "Jaune moyen", "#fde047"),
    _color("medium-purple", "Violet moyen", "#c084fc"),
    _color("medium-orange", "Orange moyen", "#fb923c"),
    _color("medium-gray", "Gris moyen", "#9ca3af"),
    _color("gray", "Gris", "#d1d5db"),
    # Dark colors
    _color("dark-blue", "Bleu foncé", "#1e40af"),
    _color("dark-green", "Vert foncé", "#166534"),
    _color("dark-pink", "Rose foncé", "#9d174d"),
    _color("dark-yellow", "Jaune foncé", "#854d0e"),
    _color("dark-purple", "Violet foncé", "#6b21a8"),
    _color("dark-orange", "Orange foncé", "#9a3412"),
    _color("dark-gray", "Gris foncé", "#1f2937"),
    _color("black", "Noir", "#111827"),
]

PROMPT_TEMPLATE = (
    "Crée un rendu 3D de haute qualité d'une figurine en style cartoon, présentée sous blister, "
    "à la manière d'un jouet de collection. Le fond en carton est {background_color} et porte une "
    "étiquette de jouet rétro. En haut au centre, en grandes lettres majuscules et en gras et noir, "
    'écris "{title}". Juste en dessous, tu peux écrire "{subtitle}" en plus petit en bas à droite. '
    'En haut à droite, un badge bleu circulaire indique "ACTION FIGURE". En haut à gauche, une '
    'petite bulle blanche indique "4+". En bas à droite, une mention discrète indique '
    '"Made with ❤️ by www.mystarterpack.com".\n'
    "\n"
    "Le personnage se tient debout, moulé dans une boîte en plastique transparente fixée sur un "
    "support en carton plat. Il doit ressembler aux photos portrait fournies. L'expression de son "
    "visage est {expression}. Sa posture est {posture}. Le ton général est léger et réaliste. \n"
    "\n"
    "La figurine est habillée de {habillement}. Sur le côté de la figurine, intégrés dans des "
    "moules en plastique distincts, sont présents 3 accessoires :\n"
    "- {accessoire1} ;\n"
    "- {accessoire2} ;\n"
    "- {accessoire3}.\n"
    "\n"
    "Chaque accessoire est vu de face, positionné à droite de la figurine et s'insère parfaitement "
    "dans son propre compartiment moulé. L'emballage est photographié avec des ombres douces, "
    "entièrement visible, un éclairage uniforme et un fond blanc épuré pour donner l'impression "
    "d'une séance photo commerciale.\n"
    "\n"
    "Le style doit allier réalisme et stylisation du dessin animé 3D, à l'image de Pixar ou des "
    "maquettes de jouets modernes. Assure-toi que la disposition et les proportions du produit "
    "ressemblent à celles d'un véritable jouet vendu en magasin. Attache une attention toute "
    "particulière à ce que le visage de la figurine ressemble fidèlement à la photo portrait "
    "fournie. Reproduis fidèlement la forme du visage, la coupe de cheveux, les yeux et les "
    "expressions faciales tout en gardant une touche stylisée, légèrement caricatural."
)


def generate_prompt(form: CustomizationForm) -> str:
    """Text to paste into the image generator, built from the form answers."""
    return PROMPT_TEMPLATE.format(**form.model_dump())


def find_color(color_id: str) -> BackgroundColor | None:
    return next((c for c in BACKGROUND_COLORS if c.id == color_id), None)


def validate_design(content_type: str | None, size: int, max_bytes: int = MAX_DESIGN_BYTES) -> None:
    """
    Check an uploaded design before any network call.

    Raises:
        HTTPException(400): not an image, or larger than max_bytes.
    """
    if not content_type or not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Veuillez sélectionner un fichier image valide",
        )
    if size > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"La taille du fichier ne doit pas dépasser {max_bytes // (1024 * 1024)}MB",
        )


class CustomizeService:
    """
    The customization flow: form screens -> prompt -> design upload -> cart.

    Responsibilities:
      - keep the form draft in device storage
      - build the prompt for the external image generator
      - validate and upload the design, then add the pack to the cart
    """

    def __init__(
        self,
        client: Client,
        bucket: str,
        drafts: FormDraftRepository,
        gate: SessionGate,
        cart: CartStore,
        max_upload_bytes: int = MAX_DESIGN_BYTES,
    ):
        self.client = client
        self.bucket = bucket
        self.drafts = drafts
        self.gate = gate
        self.cart = cart
        self.max_upload_bytes = max_upload_bytes

    # ---- form ----

    def get_form(self) -> CustomizationForm:
        return self.drafts.load()

    def update_form(self, payload: CustomizationUpdate) -> CustomizationForm:
        """
        Merge the given answers into the draft and save it.

        background_color_id selects a palette entry (value + hex).
        """
        changes = payload.model_dump(exclude_none=True, exclude={"background_color_id"})
        if payload.background_color_id is not None:
            color = find_color(payload.background_color_id)
            if color is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Couleur de fond inconnue",
                )
            changes["background_color"] = color.value
            changes["background_color_hex"] = color.hex

        form = self.drafts.load().model_copy(update=changes)
        self.drafts.save(form)
        return form

    def reset_form(self) -> CustomizationForm:
        self.drafts.clear()
        return CustomizationForm()

    def prompt(self) -> PromptRead:
        return PromptRead(
            prompt=generate_prompt(self.drafts.load()),
            generator_url=IMAGE_GENERATOR_URL,
        )

    # ---- design upload ----

    def _upload_design(
        self,
        user_id: str,
        filename: str,
        content_type: str,
        file_bytes: bytes,
    ) -> UploadedFile:
        """
        Upload the design to a random filename.

        Path pattern:
            <user_id>/<uuid>.<ext>
        """
        path = f"{user_id}/{generate_filename(file_extension(filename))}"
        try:
            upload_to_storage(self.client, self.bucket, path, file_bytes, content_type)
        except StorageException as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Erreur lors de l'upload du fichier",
            ) from exc
        return UploadedFile(
            path=path,
            name=filename,
            type=content_type,
            size=len(file_bytes),
        )

    def finalize(
        self,
        filename: str,
        content_type: str | None,
        file_bytes: bytes,
        image_url: str = "",
    ) -> CartSummary:
        """
        Turn the current draft plus its design into a cart line.

        Rules:
          - a signed-in customer is required (the design is stored per user)
          - a valid image <= 10MB is required
          - the line starts at quantity 1 (1x pack)
        """
        user = self.gate.current_user
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Vous devez être connecté pour ajouter votre starter pack au panier",
            )
        if not file_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Veuillez télécharger le fichier de votre starter pack",
            )
        validate_design(content_type, len(file_bytes), self.max_upload_bytes)

        form = self.drafts.load()
        uploaded = self._upload_design(user.id, filename, content_type, file_bytes)

        return self.cart.add_item(
            CartItemCreate(
                id=str(uuid.uuid4()),
                title=form.title or DEFAULT_ITEM_TITLE,
                image_url=image_url,
                quantity=1,
                form_data=form.model_dump(),
                uploaded_file=uploaded,
            )
        )
