from __future__ import annotations
from ..extensions import db
from ..time_utils import to_utc_z


IMAGE_SLOTS = 4


class Product(db.Model):
    """
    A listed product.

    Fixed columns hold the fields this service makes decisions about
    (owner, images, approval, views). Everything else the client sends is
    kept verbatim in `attributes` and flattened back out on serialization.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_views", "views"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Set once at creation to the authenticated requester
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Always IMAGE_SLOTS entries: URI or ""
    images = db.Column(db.JSON, nullable=False, default=lambda: [""] * IMAGE_SLOTS)

    approved = db.Column(db.Boolean, nullable=False, default=False)
    views = db.Column(db.Integer, nullable=False, default=0)

    attributes = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    owner = db.relationship("User", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} owner_id={self.owner_id} approved={self.approved} views={self.views}>"

    def to_dict(self) -> dict:
        data = dict(self.attributes or {})
        data.update({
            "id": self.id,
            "owner": self.owner.to_public_dict() if self.owner is not None else None,
            "images": list(self.images or []),
            "approved": self.approved,
            "views": self.views,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        })
        return data
