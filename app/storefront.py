# app/storefront.py
import time
from dataclasses import dataclass
from typing import Callable

import requests
from supabase import Client

from app.core.config import Settings
from app.core.local_storage import LocalStorage
from app.repositories.cart_repo import LocalCartRepository, RemoteCartRepository
from app.repositories.form_repo import FormDraftRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.user_repo import ProfileRepository
from app.services.admin_service import AdminService
from app.services.auth_service import SessionGate
from app.services.cart_service import CartStore
from app.services.checkout_service import CheckoutService
from app.services.customize_service import CustomizeService
from app.services.order_service import OrderService
from app.services.user_service import ProfileService


@dataclass
class Storefront:
    """
    Everything one storefront session needs, wired together once.

    Owned by the application lifespan (app.state.storefront); routers
    reach it through app.core.auth.get_storefront.
    """

    settings: Settings
    gate: SessionGate
    cart: CartStore
    profiles: ProfileService
    customize: CustomizeService
    checkout: CheckoutService
    orders: OrderService
    admin: AdminService


def build_storefront(
    settings: Settings,
    client: Client,
    storage: LocalStorage,
    http: requests.Session,
    sleep: Callable[[float], None] = time.sleep,
) -> Storefront:
    """
    Composition root: inject device storage, the Supabase client and the
    HTTP session into repositories and services.
    """
    profile_repo = ProfileRepository(client)
    order_repo = OrderRepository(client)

    cart = CartStore(
        local=LocalCartRepository(storage),
        remote=RemoteCartRepository(client, profile_repo, settings.STORAGE_BUCKET),
    )
    gate = SessionGate(client, cart)
    profiles = ProfileService(profile_repo)

    return Storefront(
        settings=settings,
        gate=gate,
        cart=cart,
        profiles=profiles,
        customize=CustomizeService(
            client,
            settings.STORAGE_BUCKET,
            FormDraftRepository(storage),
            gate,
            cart,
            max_upload_bytes=settings.MAX_UPLOAD_BYTES,
        ),
        checkout=CheckoutService(client, http, gate, cart, profiles, settings),
        orders=OrderService(
            order_repo,
            gate,
            cart,
            poll_retries=settings.ORDER_POLL_RETRIES,
            poll_delay=settings.ORDER_POLL_DELAY_SECONDS,
            sleep=sleep,
        ),
        admin=AdminService(order_repo, profiles, gate),
    )
