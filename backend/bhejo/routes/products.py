# Overview: Flask API routes for products; parses input and returns JSON responses.

"""
Product routes.

Capabilities per route and verb come from PRODUCT_PERMISSIONS. The origin
gate (cors.py) has already run for every request that reaches a view here.

Store failures on update and delete are answered locally with
400 {"success": false}; every other failure goes to the app-level error
handlers.
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import route_authorizer
from ..permissions import PRODUCT_PERMISSIONS
from ..services import products_service
from ..services.product_store import StoreError
from ..services.upload_service import IMAGE_FIELD, get_image_storage

products_bp = Blueprint("products", __name__, url_prefix="/api/products")
authorize = route_authorizer(PRODUCT_PERMISSIONS)

COLLECTION_PATH = "/api/products"


def _not_supported(method: str, path: str):
    return current_app.response_class(
        f"{method} operation not supported on {path}",
        status=403,
        mimetype="text/plain",
    )


def _creation_body() -> dict:
    if request.form:
        # Repeated fields keep every value; single fields stay scalar
        return {
            key: values[0] if len(values) == 1 else values
            for key, values in request.form.to_dict(flat=False).items()
        }
    return request.get_json(silent=True) or {}


@products_bp.get("/", strict_slashes=False)
@authorize("/")
def list_products_route():
    """List products matching the query string, most viewed first."""
    return jsonify(products_service.list_products(request.args.to_dict()))


@products_bp.post("/", strict_slashes=False)
@authorize("/")
def create_product_route():
    """
    Create a product from multipart form fields plus up to four files
    under the `images` field. The caller becomes the owner.
    """
    created = products_service.create_product(
        body=_creation_body(),
        owner_id=g.current_user.id,
        uploads=request.files.getlist(IMAGE_FIELD),
        storage=get_image_storage(),
        placeholder=current_app.config["PLACEHOLDER_IMAGE_URI"],
    )
    return jsonify(created), 200


@products_bp.put("/", strict_slashes=False)
@authorize("/")
def replace_products_route():
    return _not_supported("PUT", COLLECTION_PATH)


@products_bp.delete("/", strict_slashes=False)
@authorize("/")
def delete_products_route():
    return _not_supported("DELETE", COLLECTION_PATH)


@products_bp.get("/<product_id>")
@authorize("/<product_id>")
def get_product_route(product_id: str):
    """A single product, or null when the id matches nothing."""
    return jsonify(products_service.get_product(product_id))


@products_bp.post("/<product_id>")
@authorize("/<product_id>")
def post_product_route(product_id: str):
    return _not_supported("POST", f"{COLLECTION_PATH}/{product_id}")


@products_bp.put("/<product_id>")
@authorize("/<product_id>")
def update_product_route(product_id: str):
    """Merge the JSON body's fields into the product."""
    try:
        updated = products_service.update_product(product_id, request.get_json(silent=True))
    except StoreError:
        current_app.logger.warning("Failed to update product %s", product_id, exc_info=True)
        return jsonify({"success": False}), 400

    return jsonify(updated), 200


@products_bp.delete("/<product_id>")
@authorize("/<product_id>")
def delete_product_route(product_id: str):
    try:
        result = products_service.delete_product(product_id)
    except StoreError:
        current_app.logger.warning("Failed to delete product %s", product_id, exc_info=True)
        return jsonify({"success": False}), 400

    return jsonify(result), 200


@products_bp.post("/approve/<product_id>")
@authorize("/approve/<product_id>")
def approve_product_route(product_id: str):
    return jsonify(products_service.approve_product(product_id)), 200


@products_bp.post("/views/<product_id>")
@authorize("/views/<product_id>")
def record_views_route(product_id: str):
    """Overwrite the view count with body["views"]."""
    payload = request.get_json(silent=True) or {}
    views = payload.get("views") if isinstance(payload, dict) else None
    current_app.logger.info("Recording views=%r for product %s", views, product_id)
    return jsonify(products_service.record_views(product_id, views)), 200
