"""
In-memory admin backend for integration tests.

Speaks the same envelope contract as the real REST backend
({message, status, data}) and is served in-process through
httpx.ASGITransport.
"""
import itertools
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse, Response

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "secret"
ADMIN_TOKEN = "token-123"
RECEIPT_BYTES = b"%PDF-1.4 fake receipt"

RESOURCES = ("attributes", "attribute-values", "categories", "products", "orders", "users")


def envelope(data: Any, message: str = "OK") -> Dict[str, Any]:
    return {"message": message, "status": "success", "data": data}


def fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, "status": "error", "data": None})


def require_admin(authorization: Optional[str] = Header(None)) -> None:
    if authorization != f"Bearer {ADMIN_TOKEN}":
        raise HTTPException(status_code=401, detail="Not authenticated")


class BackendState:
    """Tables keyed by resource name, then id"""

    def __init__(self):
        self.tables: Dict[str, Dict[int, Dict[str, Any]]] = {name: {} for name in RESOURCES}
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def table(self, resource: str) -> Dict[int, Dict[str, Any]]:
        if resource not in self.tables:
            raise HTTPException(status_code=404, detail=f"Unknown resource {resource}")
        return self.tables[resource]

    def render(self, resource: str, record: Dict[str, Any]) -> Dict[str, Any]:
        if resource == "categories":
            count = sum(1 for p in self.tables["products"].values() if p["categoryId"] == record["id"])
            return {**record, "_count": {"products": count}}
        return record

    def slug_taken(self, resource: str, slug: str, exclude: Optional[int] = None) -> bool:
        return any(r.get("slug") == slug and r["id"] != exclude for r in self.tables[resource].values())

    def sku_taken(self, sku: str, exclude_product: Optional[int] = None) -> bool:
        for product in self.tables["products"].values():
            if product["id"] == exclude_product:
                continue
            if any(v["sku"] == sku for v in product["variants"]):
                return True
        return False

    def build_variants(self, product_id: int, payload: list, existing: Optional[list] = None) -> list:
        current = {v["id"]: v for v in existing or []}
        variants = []
        for item in payload:
            variant_id = item.get("id") or self.next_id()
            base = current.get(variant_id, {"isActive": True, "isDeleted": False})
            variants.append({
                **base,
                **{k: v for k, v in item.items() if k != "id"},
                "id": variant_id,
                "productId": product_id,
            })
        return variants


def create_backend() -> FastAPI:
    app = FastAPI()
    state = BackendState()
    app.state.backend = state

    @app.post("/auth/admin/login")
    async def login(payload: Dict[str, Any] = Body(...)):
        if payload.get("email") != ADMIN_EMAIL or payload.get("password") != ADMIN_PASSWORD:
            return fail(401, "Invalid email or password")
        return envelope({"token": ADMIN_TOKEN, "user": {"id": 1, "email": ADMIN_EMAIL, "role": "ADMIN"}})

    router = APIRouter(dependencies=[Depends(require_admin)])

    @router.post("/auth/admin/logout")
    async def logout():
        return envelope(None, "Logged out")

    # -------------------------------------------------------------------------
    # Resource-specific routes (registered before the generic ones)
    # -------------------------------------------------------------------------

    @router.get("/attributes/{attribute_id}/values")
    async def attribute_values(attribute_id: int):
        values = [v for v in state.tables["attribute-values"].values() if v["attributeId"] == attribute_id]
        return envelope(values)

    @router.patch("/{resource}/{entity_id}/toggle-active")
    async def toggle_active(resource: str, entity_id: int):
        record = state.table(resource).get(entity_id)
        if record is None:
            return fail(404, f"{resource} {entity_id} not found")
        record["isActive"] = not record.get("isActive", True)
        return envelope(state.render(resource, record))

    @router.patch("/products/{product_id}/variants/{variant_id}/toggle-active")
    async def toggle_variant(product_id: int, variant_id: int):
        product = state.tables["products"].get(product_id)
        if product is None:
            return fail(404, "Product not found")
        for variant in product["variants"]:
            if variant["id"] == variant_id:
                variant["isActive"] = not variant["isActive"]
                return envelope(product)
        return fail(404, "Variant not found")

    @router.delete("/products/{product_id}/variants/{variant_id}")
    async def delete_variant(product_id: int, variant_id: int):
        product = state.tables["products"].get(product_id)
        if product is None:
            return fail(404, "Product not found")
        product["variants"] = [v for v in product["variants"] if v["id"] != variant_id]
        return envelope(None, "Variant deleted")

    @router.patch("/orders/{order_id}/status")
    async def order_status(order_id: int, payload: Dict[str, Any] = Body(...)):
        order = state.tables["orders"].get(order_id)
        if order is None:
            return fail(404, "Order not found")
        order["status"] = payload["status"]
        return envelope(order)

    @router.get("/orders/{order_id}/receipt")
    async def receipt(order_id: int):
        if order_id not in state.tables["orders"]:
            return fail(404, "Order not found")
        return Response(content=RECEIPT_BYTES, media_type="application/pdf")

    # -------------------------------------------------------------------------
    # Generic CRUD
    # -------------------------------------------------------------------------

    @router.get("/{resource}")
    async def list_records(resource: str):
        return envelope([state.render(resource, r) for r in state.table(resource).values()])

    @router.get("/{resource}/{entity_id}")
    async def get_record(resource: str, entity_id: int):
        record = state.table(resource).get(entity_id)
        if record is None:
            return fail(404, f"{resource} {entity_id} not found")
        return envelope(state.render(resource, record))

    @router.post("/{resource}")
    async def create_record(resource: str, payload: Dict[str, Any] = Body(...)):
        table = state.table(resource)
        if resource in ("categories", "products") and state.slug_taken(resource, payload.get("slug")):
            return fail(409, "Slug already exists")
        if resource == "attribute-values" and payload.get("attributeId") not in state.tables["attributes"]:
            return fail(400, "Attribute does not exist")

        entity_id = state.next_id()
        record = {**payload, "id": entity_id}
        if resource == "products":
            if any(state.sku_taken(v["sku"]) for v in payload.get("variants", [])):
                return fail(409, "SKU already exists")
            record.setdefault("isActive", True)
            record["variants"] = state.build_variants(entity_id, payload.get("variants", []))
        if resource == "categories":
            record.setdefault("isActive", True)
        table[entity_id] = record
        return JSONResponse(status_code=201, content=envelope(state.render(resource, record), "Created"))

    @router.patch("/{resource}/{entity_id}")
    async def update_record(resource: str, entity_id: int, payload: Dict[str, Any] = Body(...)):
        table = state.table(resource)
        record = table.get(entity_id)
        if record is None:
            return fail(404, f"{resource} {entity_id} not found")
        if "slug" in payload and state.slug_taken(resource, payload["slug"], exclude=entity_id):
            return fail(409, "Slug already exists")
        if resource == "products" and "variants" in payload:
            if any(state.sku_taken(v["sku"], exclude_product=entity_id) for v in payload["variants"]):
                return fail(409, "SKU already exists")
            payload = {**payload, "variants": state.build_variants(entity_id, payload["variants"], record["variants"])}
        record.update(payload)
        return envelope(state.render(resource, record))

    @router.delete("/{resource}/{entity_id}")
    async def delete_record(resource: str, entity_id: int):
        table = state.table(resource)
        if table.pop(entity_id, None) is None:
            return fail(404, f"{resource} {entity_id} not found")
        if resource == "attributes":
            values = state.tables["attribute-values"]
            for value_id in [i for i, v in values.items() if v["attributeId"] == entity_id]:
                del values[value_id]
        return Response(status_code=204)

    app.include_router(router)
    return app
