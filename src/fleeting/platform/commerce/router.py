"""
Storefront resource router.

Every mutation consults the entitlement engine before persisting and fails
with 403 QUOTA_EXCEEDED or ACCESS_DENIED carrying the evaluator's message.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fleeting.platform.billing.dependencies import TenantId, get_entitlement_guard
from fleeting.platform.billing.entitlements.guard import EntitlementGuard
from fleeting.platform.commerce.models import (
    Category,
    CategoryCreate,
    Order,
    OrderCreate,
    Product,
    ProductCreate,
    ProductUpdate,
    Subcategory,
    SubcategoryCreate,
)
from fleeting.platform.commerce.service import CommerceService
from fleeting.platform.db import get_async_session

router = APIRouter()


def get_commerce_service(
    db: Annotated[AsyncSession, Depends(get_async_session)],
    guard: Annotated[EntitlementGuard, Depends(get_entitlement_guard)],
) -> CommerceService:
    return CommerceService(db, guard)


Commerce = Annotated[CommerceService, Depends(get_commerce_service)]


@router.post("/categories", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(data: CategoryCreate, tenant_id: TenantId, svc: Commerce) -> Category:
    return await svc.create_category(tenant_id, data)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, tenant_id: TenantId, svc: Commerce) -> None:
    await svc.delete_category(tenant_id, category_id)


@router.post("/subcategories", response_model=Subcategory, status_code=status.HTTP_201_CREATED)
async def create_subcategory(
    data: SubcategoryCreate, tenant_id: TenantId, svc: Commerce
) -> Subcategory:
    return await svc.create_subcategory(tenant_id, data)


@router.delete("/subcategories/{subcategory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subcategory(subcategory_id: str, tenant_id: TenantId, svc: Commerce) -> None:
    await svc.delete_subcategory(tenant_id, subcategory_id)


@router.post("/products", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(data: ProductCreate, tenant_id: TenantId, svc: Commerce) -> Product:
    return await svc.create_product(tenant_id, data)


@router.patch("/products/{product_id}", response_model=Product)
async def update_product(
    product_id: str, data: ProductUpdate, tenant_id: TenantId, svc: Commerce
) -> Product:
    return await svc.update_product(tenant_id, product_id, data)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, tenant_id: TenantId, svc: Commerce) -> None:
    await svc.delete_product(tenant_id, product_id)


@router.post("/orders", response_model=Order, status_code=status.HTTP_201_CREATED)
async def create_order(data: OrderCreate, tenant_id: TenantId, svc: Commerce) -> Order:
    return await svc.create_order(tenant_id, data)


__all__ = ["router"]
