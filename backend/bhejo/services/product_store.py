# Overview: Product persistence; document-style create/find/update/remove over SQLAlchemy.

"""
Document-store style access to products.

Every call is a single unit of work: it commits on success and rolls back
and raises StoreError on failure. Callers compose calls sequentially and
get no atomicity across them.

Filters and update mappings are accepted as opaque key/value pairs. Keys
naming a stored column are cast to that column's type; every other key is
treated as part of the product's free-form attributes.
"""
from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import Product


class StoreError(Exception):
    """The store could not complete an operation."""
    status_code = 500


class InvalidValueError(StoreError):
    """A value could not be cast to the type the store keeps it as."""
    status_code = 400


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER_TEXT = re.compile(r"-?[0-9]+")


def _cast_int(key: str, value: Any) -> int:
    """Strict integer cast; the result always fits a signed 64-bit column."""
    number = None
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and _INTEGER_TEXT.fullmatch(value.strip()):
        number = int(value.strip())

    if number is None or not INT64_MIN <= number <= INT64_MAX:
        raise InvalidValueError(f'Cast to Number failed for value "{value}" at path "{key}"')
    return number


def _cast_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    if value in (0, 1):
        return bool(value)
    raise InvalidValueError(f'Cast to Boolean failed for value "{value}" at path "{key}"')


def parse_product_id(value: Any) -> int:
    """Cast a path/query identifier to a product primary key."""
    return _cast_int("id", value)


FILTER_COLUMNS = {
    "id": (Product.id, _cast_int),
    "owner": (Product.owner_id, _cast_int),
    "approved": (Product.approved, _cast_bool),
    "views": (Product.views, _cast_int),
}

UPDATE_COLUMNS = {
    "approved": _cast_bool,
    "views": _cast_int,
}


def _as_query_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _attributes_match(attributes: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    for key, expected in criteria.items():
        if key not in attributes:
            return False
        if _as_query_text(attributes[key]) != _as_query_text(expected):
            return False
    return True


@contextmanager
def _store_operation(action: str):
    try:
        yield
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError(f"Failed to {action}") from e


def create(*, owner_id: int, images: list[str], attributes: Mapping[str, Any]) -> int:
    """Insert a product and return its new id."""
    with _store_operation("create product"):
        product = Product(
            owner_id=owner_id,
            images=list(images),
            attributes=dict(attributes),
        )
        db.session.add(product)
        db.session.commit()
        return product.id


def find(criteria: Mapping[str, Any] | None = None) -> list[Product]:
    """
    Return every product matching `criteria`, owners loaded,
    most viewed first.
    """
    criteria = dict(criteria or {})
    column_filters = []
    attribute_criteria = {}
    for key, value in criteria.items():
        if key in FILTER_COLUMNS:
            column, cast = FILTER_COLUMNS[key]
            column_filters.append(column == cast(key, value))
        else:
            attribute_criteria[key] = value

    with _store_operation("list products"):
        products = (
            db.session.query(Product)
            .options(selectinload(Product.owner))
            .filter(*column_filters)
            .order_by(Product.views.desc(), Product.id.asc())
            .all()
        )

    if not attribute_criteria:
        return products
    return [p for p in products if _attributes_match(p.attributes or {}, attribute_criteria)]


def find_by_id(product_id: Any) -> Product | None:
    pk = parse_product_id(product_id)
    with _store_operation("load product"):
        return (
            db.session.query(Product)
            .options(selectinload(Product.owner))
            .filter(Product.id == pk)
            .first()
        )


def find_by_id_and_update(product_id: Any, changes: Mapping[str, Any]) -> Product | None:
    """
    Shallow `$set`: each key in `changes` replaces the stored value.

    Returns the updated product, or None when the id matches nothing.
    """
    pk = parse_product_id(product_id)
    column_changes = {}
    attribute_changes = {}
    for key, value in changes.items():
        if key in UPDATE_COLUMNS:
            column_changes[key] = UPDATE_COLUMNS[key](key, value)
        else:
            attribute_changes[key] = value

    with _store_operation("update product"):
        product = db.session.query(Product).filter(Product.id == pk).first()
        if product is None:
            return None

        for key, value in column_changes.items():
            setattr(product, key, value)
        if attribute_changes:
            # Reassign so the JSON column is flagged dirty
            product.attributes = {**(product.attributes or {}), **attribute_changes}

        db.session.commit()
        return product


def find_by_id_and_remove(product_id: Any) -> bool:
    """Delete by id. Returns True if a product was removed."""
    pk = parse_product_id(product_id)
    with _store_operation("remove product"):
        product = db.session.query(Product).filter(Product.id == pk).first()
        if product is None:
            return False
        db.session.delete(product)
        db.session.commit()
        return True
