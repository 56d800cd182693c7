"""
Store-level tests for the product persistence layer.
"""

import pytest
from sqlalchemy.exc import OperationalError

from bhejo.extensions import db
from bhejo.services import product_store
from bhejo.services.product_store import InvalidValueError, StoreError


class TestCasting:

    @pytest.mark.parametrize("raw,expected", [(7, 7), ("7", 7), (" 12 ", 12), (3.0, 3)])
    def test_product_ids(self, raw, expected):
        assert product_store.parse_product_id(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["abc", "", None, True, 1.5, "1e3", "--5", "²", "١٢", "1_000",
         "99999999999999999999999", 2 ** 63, -(2 ** 63) - 1, 10 ** 30, 1e30],
    )
    def test_bad_product_ids(self, raw):
        with pytest.raises(InvalidValueError):
            product_store.parse_product_id(raw)

    @pytest.mark.parametrize("raw", [2 ** 63 - 1, -(2 ** 63), str(2 ** 63 - 1)])
    def test_signed_64_bit_bounds_are_accepted(self, raw):
        assert product_store.parse_product_id(raw) == int(raw)


class TestOperations:

    def test_create_then_find(self, app, user):
        new_id = product_store.create(owner_id=user.id, images=["a", "", "", ""], attributes={"name": "x"})
        product = product_store.find_by_id(new_id)
        assert product.attributes == {"name": "x"}
        assert product.images == ["a", "", "", ""]
        assert product.owner.username == "alice"

    def test_update_is_shallow(self, app, make_product):
        product_id = make_product(name="a", specs={"cpu": "x", "ram": 8}).id

        product = product_store.find_by_id_and_update(product_id, {"specs": {"ram": 16}})

        assert product.attributes == {"name": "a", "specs": {"ram": 16}}

    def test_update_casts_columns(self, app, make_product):
        product_id = make_product(name="a").id
        product = product_store.find_by_id_and_update(product_id, {"views": "9", "approved": "true"})
        assert product.views == 9
        assert product.approved is True

    @pytest.mark.parametrize("views", [10 ** 30, "99999999999999999999999", "--5"])
    def test_update_rejects_views_outside_integer_column(self, app, make_product, views):
        product_id = make_product(name="a", views=4).id

        with pytest.raises(InvalidValueError):
            product_store.find_by_id_and_update(product_id, {"views": views})

        assert product_store.find_by_id(product_id).views == 4

    def test_filter_rejects_out_of_range_number(self, app):
        with pytest.raises(InvalidValueError):
            product_store.find({"views": "99999999999999999999999"})

    def test_remove_reports_whether_anything_was_removed(self, app, make_product):
        product_id = make_product(name="a").id
        assert product_store.find_by_id_and_remove(product_id) is True
        assert product_store.find_by_id_and_remove(product_id) is False

    def test_database_errors_become_store_errors(self, app, monkeypatch):
        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db.session, "commit", broken_commit)
        with pytest.raises(StoreError) as excinfo:
            product_store.create(owner_id=1, images=["", "", "", ""], attributes={})
        assert excinfo.value.status_code == 500
