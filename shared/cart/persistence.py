"""
Local cart persistence

Stores the cart store's durable state in a versioned envelope:

    {"state": {"cart": {...}, "isOpen": false}, "version": 2}

Older envelopes are migrated on load: every item key is re-normalized and
invalid items are dropped, so carts saved before variant ids were tracked
heal instead of failing at checkout.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .models import Cart, CartItem
from .utils import build_cart, empty_cart, filter_checkout_items

logger = logging.getLogger(__name__)

STORAGE_VERSION = 2


class CartStorage:
    """Backend holding one persisted envelope"""

    def load(self) -> Optional[dict]:
        raise NotImplementedError

    def save(self, envelope: dict) -> None:
        raise NotImplementedError


class MemoryCartStorage(CartStorage):
    """In-process storage, used by tests and short-lived sessions"""

    def __init__(self, envelope: Optional[dict] = None):
        self.envelope = envelope

    def load(self) -> Optional[dict]:
        return self.envelope

    def save(self, envelope: dict) -> None:
        self.envelope = envelope


class JSONFileCartStorage(CartStorage):
    """Envelope stored as a JSON file, replaced atomically on save"""

    def __init__(self, directory: Union[str, Path], name: str = "cart-storage"):
        self.path = Path(directory) / f"{name}.json"

    def load(self) -> Optional[dict]:
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Discarding unreadable cart storage {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Discarding malformed cart storage {self.path}")
            return None
        return data

    def save(self, envelope: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(envelope, f)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


@dataclass
class PersistedCartState:
    """The durable part of the cart store state"""
    cart: Cart = field(default_factory=empty_cart)
    is_open: bool = False


def _read_items(raw_items) -> list[CartItem]:
    items = []
    for raw in raw_items if isinstance(raw_items, list) else []:
        try:
            items.append(CartItem.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Dropping unreadable persisted cart item: {e.error_count()} errors")
    return items


def migrate_persisted_state(state: dict) -> dict:
    """Re-normalize item keys and drop invalid items from an old envelope"""
    state = state if isinstance(state, dict) else {}
    cart_data = state.get("cart")
    raw_items = cart_data.get("items") if isinstance(cart_data, dict) else None

    migrated = filter_checkout_items(_read_items(raw_items))
    return {
        **state,
        "cart": build_cart(migrated).model_dump(by_alias=True, mode="json"),
    }


def load_cart_state(storage: CartStorage) -> PersistedCartState:
    """Read, migrate if needed, and rebuild the persisted state"""
    envelope = storage.load()
    if not envelope:
        return PersistedCartState()

    state = envelope.get("state")
    version = envelope.get("version", 0)
    if not isinstance(version, int) or version < STORAGE_VERSION:
        logger.info(f"Migrating persisted cart from version {version} to {STORAGE_VERSION}")
        state = migrate_persisted_state(state)

    if not isinstance(state, dict):
        return PersistedCartState()

    cart_data = state.get("cart")
    raw_items = cart_data.get("items") if isinstance(cart_data, dict) else None
    # Aggregates are always recomputed, never read back.
    cart = build_cart(_read_items(raw_items))
    return PersistedCartState(cart=cart, is_open=bool(state.get("isOpen", False)))


def dump_cart_state(state: PersistedCartState) -> dict:
    """Envelope for the current storage version"""
    return {
        "state": {
            "cart": state.cart.model_dump(by_alias=True, mode="json"),
            "isOpen": state.is_open,
        },
        "version": STORAGE_VERSION,
    }
