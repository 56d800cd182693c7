# Overview: Product resource operations; composes the store, image normalizer and caller identity.

"""
Products Service

Bodies and filters are opaque key/value mappings: caller fields are stored
and merged verbatim with no schema. The only keys dropped are the reserved
ones this service owns, so that `owner` is fixed at creation, `approved` only
moves through approve_product(), `views` only through record_views() and
`images` only through the upload normalizer.

Returned products are serialized with `owner` resolved to the owning
account's public fields.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from werkzeug.datastructures import FileStorage

from . import product_store
from .product_store import InvalidValueError, StoreError
from .upload_service import ImageStorage, discard_images, normalize_images


RESERVED_FIELDS = frozenset({
    "id", "_id", "owner", "images", "approved", "views", "createdAt", "updatedAt",
})


class ProductVanishedError(LookupError):
    """A product was written but could not be read back."""
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} was removed before it could be read back")
        self.product_id = product_id


def _caller_fields(body: Any) -> dict:
    if body is None:
        return {}
    if not isinstance(body, Mapping):
        raise InvalidValueError("Request body must be an object")
    return {k: v for k, v in body.items() if k not in RESERVED_FIELDS}


def _serialize(product) -> dict | None:
    return product.to_dict() if product is not None else None


def list_products(criteria: Mapping[str, Any] | None = None) -> list[dict]:
    """All products matching `criteria`, most viewed first."""
    return [p.to_dict() for p in product_store.find(criteria)]


def get_product(product_id: Any) -> dict | None:
    """The product, or None when the id matches nothing."""
    return _serialize(product_store.find_by_id(product_id))


def create_product(
    *,
    body: Mapping[str, Any] | None,
    owner_id: int,
    uploads: Iterable[FileStorage],
    storage: ImageStorage,
    placeholder: str,
) -> dict:
    """
    Create a product owned by `owner_id` and return it as read back.

    The write and the follow-up read are two separate store calls. If the
    product is deleted in between, ProductVanishedError is raised.

    Raises:
        UploadRejectedError: If the storage backend refuses a file
        ProductVanishedError: If the read-back finds nothing
        StoreError: On store failure; images stored for it are discarded
    """
    attributes = _caller_fields(body)
    images = normalize_images(uploads, storage, placeholder)

    try:
        new_id = product_store.create(owner_id=owner_id, images=images, attributes=attributes)
    except StoreError:
        discard_images(storage, images[1:] if images[0] == placeholder else images)
        raise

    product = product_store.find_by_id(new_id)
    if product is None:
        raise ProductVanishedError(new_id)
    return product.to_dict()


def update_product(product_id: Any, body: Mapping[str, Any] | None) -> dict | None:
    """
    Shallow merge of the body's fields; absent fields are untouched.

    Any authenticated caller may update any product.
    """
    return _serialize(product_store.find_by_id_and_update(product_id, _caller_fields(body)))


def delete_product(product_id: Any) -> dict:
    """
    Remove a product. Reports success whether or not the id existed.

    Any authenticated caller may delete any product.
    """
    pk = product_store.parse_product_id(product_id)
    product_store.find_by_id_and_remove(pk)
    return {"id": pk, "success": True}


def approve_product(product_id: Any) -> dict | None:
    """Set approved=True. Repeating the call leaves it True."""
    return _serialize(product_store.find_by_id_and_update(product_id, {"approved": True}))


def record_views(product_id: Any, views: Any) -> dict | None:
    """
    Overwrite the view count with the caller's value.

    Absolute assignment, last write wins: concurrent callers overwrite
    each other's counts.
    """
    return _serialize(product_store.find_by_id_and_update(product_id, {"views": views}))
