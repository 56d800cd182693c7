"""
Cross-origin gate tests.

Verifies:
- Only exact allow-list matches receive Access-Control-Allow-Origin
- OPTIONS is answered with an empty 200 without reaching any view
- Requests from other origins never reach a view
"""

import pytest

from bhejo.cors import OriginPolicy
from bhejo.extensions import db
from bhejo.models import Product

from conftest import ALLOWED_ORIGIN


class TestOriginPolicy:

    def test_exact_match_is_allowed_and_echoed(self):
        policy = OriginPolicy.from_origins(["http://localhost:3000"])
        decision = policy.evaluate("http://localhost:3000")
        assert decision.allowed
        assert decision.origin == "http://localhost:3000"

    @pytest.mark.parametrize(
        "origin",
        [
            None,
            "",
            "http://LOCALHOST:3000",
            "http://localhost:3000/",
            "http://localhost:30001",
            "http://localhost",
            "https://localhost:3000",
            "*",
        ],
    )
    def test_anything_else_is_denied(self, origin):
        policy = OriginPolicy.from_origins(["http://localhost:3000"])
        decision = policy.evaluate(origin)
        assert not decision.allowed
        assert decision.origin is None

    def test_policy_is_immutable(self):
        policy = OriginPolicy.from_origins(["http://localhost:3000"])
        assert isinstance(policy.allowed_origins, frozenset)
        with pytest.raises(AttributeError):
            policy.allowed_origins = frozenset()

    def test_app_policy_comes_from_config(self, app):
        policy = app.extensions["origin_policy"]
        assert policy.allowed_origins == frozenset({ALLOWED_ORIGIN, "http://localhost:5000"})


class TestOriginGate:

    @pytest.mark.parametrize(
        "path",
        ["/api/products", "/api/products/1", "/api/products/approve/1", "/api/products/views/1"],
    )
    def test_options_is_bare_success_for_allowed_origin(self, client, path):
        resp = client.options(path, headers={"Origin": ALLOWED_ORIGIN})
        assert resp.status_code == 200
        assert resp.data == b""
        assert resp.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN

    def test_options_for_unlisted_origin_has_no_permission(self, client):
        resp = client.options("/api/products", headers={"Origin": "http://evil.example"})
        assert resp.status_code == 200
        assert resp.data == b""
        assert "Access-Control-Allow-Origin" not in resp.headers

    def test_options_skips_authorization(self, client):
        # approve requires admin; preflight must still succeed without a token
        resp = client.options("/api/products/approve/1", headers={"Origin": ALLOWED_ORIGIN})
        assert resp.status_code == 200

    def test_allowed_origin_is_echoed(self, client, make_product):
        make_product(name="lamp")
        resp = client.get("/api/products", headers={"Origin": ALLOWED_ORIGIN})
        assert resp.status_code == 200
        assert resp.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
        assert resp.headers["Vary"] == "Origin"

    def test_unlisted_origin_gets_no_header_and_no_body(self, client, make_product):
        make_product(name="lamp")
        resp = client.get("/api/products", headers={"Origin": "http://evil.example"})
        assert "Access-Control-Allow-Origin" not in resp.headers
        assert resp.status_code == 403
        assert resp.data == b""

    def test_unlisted_origin_never_reaches_handler(self, client, make_product):
        product_id = make_product(name="lamp", views=5).id

        resp = client.post(
            f"/api/products/views/{product_id}",
            json={"views": 99},
            headers={"Origin": "http://evil.example"},
        )

        assert resp.status_code == 403
        db.session.expire_all()
        assert db.session.get(Product, product_id).views == 5

    def test_request_without_origin_passes_without_header(self, client):
        resp = client.get("/api/products")
        assert resp.status_code == 200
        assert "Access-Control-Allow-Origin" not in resp.headers

    def test_denial_responses_still_carry_header_for_allowed_origin(self, client):
        resp = client.post("/api/products", headers={"Origin": ALLOWED_ORIGIN})
        assert resp.status_code == 401
        assert resp.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
