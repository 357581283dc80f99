from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from recordmapper import Repository
from recordmapper.errors import RecordNotFoundError, RowOperationError
from models import Product, Purchase
from deps import get_repository

router = APIRouter()


class ProductIn(BaseModel):
    id: str | None = None
    name: str
    price: float = 0
    in_stock: bool = True


class PurchaseCreate(BaseModel):
    customer_id: str | None = None
    note: str | None = None
    quantity: int = 1
    products: list[ProductIn] = []


class PurchaseUpdate(BaseModel):
    customer_id: str | None = None
    note: str | None = None
    quantity: int | None = None


def _purchase_out(p):
    return {
        "purchase_id": p.id,
        "customer_id": p.customer,
        "note": p.note,
        "quantity": p.quantity,
    }


def _product_out(p):
    return {
        "product_id": p.id,
        "name": p.name,
        "price": p.price,
        "in_stock": bool(p.in_stock),
    }


def _get_purchase(repository, purchase_id):
    try:
        return repository.take(Purchase, purchase_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Purchase not found")


@router.post("/api/purchases")
def create_purchase(purchase: PurchaseCreate, repository: Repository = Depends(get_repository)):
    new_purchase = Purchase(
        customer=purchase.customer_id,
        note=purchase.note,
        quantity=purchase.quantity,
        products=[Product(**p.model_dump()) for p in purchase.products],
    )
    try:
        repository.save_graph(new_purchase)
    except RowOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        **_purchase_out(new_purchase),
        "products": [_product_out(p) for p in new_purchase.products],
        "message": "Purchase created",
    }


@router.get("/api/purchases/{purchase_id}")
def get_purchase(purchase_id: str, repository: Repository = Depends(get_repository)):
    return _purchase_out(_get_purchase(repository, purchase_id))


@router.get("/api/purchases/{purchase_id}/products")
def get_purchase_products(purchase_id: str, repository: Repository = Depends(get_repository)):
    purchase = _get_purchase(repository, purchase_id)
    return [_product_out(p) for p in repository.get_children(purchase, Product)]


@router.patch("/api/purchases/{purchase_id}")
def update_purchase(purchase_id: str, purchase: PurchaseUpdate, repository: Repository = Depends(get_repository)):
    _get_purchase(repository, purchase_id)
    updates = purchase.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="Nothing to update")
    try:
        repository.update(Purchase, purchase_id, updates)
    except RowOperationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {**_purchase_out(_get_purchase(repository, purchase_id)), "message": "Purchase updated"}


@router.delete("/api/purchases/{purchase_id}")
def delete_purchase(purchase_id: str, repository: Repository = Depends(get_repository)):
    existing = _get_purchase(repository, purchase_id)
    repository.delete(existing)
    return {"message": "Purchase deleted"}
