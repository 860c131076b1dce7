"""FastAPI endpoints for browsing and managing products."""

from fastapi import APIRouter, Depends, Query

from gamezone.api.schemas import (
    CreateProductRequest,
    MessageResponse,
    ProductMutationResponse,
    ProductPageResponse,
    ProductResponse,
    UpdateProductRequest,
)
from gamezone.api.security import current_principal, get_services
from gamezone.catalogue.listing import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ProductFilters
from gamezone.identity.access import Principal
from gamezone.services import Services

product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=ProductPageResponse)
def list_products(
    platform: str | None = None,
    condition: str | None = None,
    category: str | None = None,
    min_price: float | None = Query(None, alias="minPrice"),
    max_price: float | None = Query(None, alias="maxPrice"),
    search: str | None = None,
    sort: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    featured: bool = False,
    deals: bool = False,
    services: Services = Depends(get_services),
) -> ProductPageResponse:
    result = services.catalogue.search(
        ProductFilters(
            platform=platform,
            condition=condition,
            category=category,
            featured=featured,
            deals=deals,
            min_price=min_price,
            max_price=max_price,
            search=search,
            sort=sort,
            page=page,
            limit=limit,
        )
    )
    return ProductPageResponse(
        products=[ProductResponse.from_product(p) for p in result.products],
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_products=result.total_products,
    )


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, services: Services = Depends(get_services)) -> ProductResponse:
    return ProductResponse.from_product(services.catalogue.get(product_id))


@product_router.post("", status_code=201, response_model=ProductMutationResponse)
def create_product(
    body: CreateProductRequest,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> ProductMutationResponse:
    product = services.catalogue.create(principal, **body.model_dump())
    return ProductMutationResponse(message="Product listed!", product=ProductResponse.from_product(product))


@product_router.put("/{product_id}", response_model=ProductMutationResponse)
def update_product(
    product_id: str,
    body: UpdateProductRequest,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> ProductMutationResponse:
    product = services.catalogue.update(principal, product_id, **body.model_dump(exclude_unset=True))
    return ProductMutationResponse(message="Product updated!", product=ProductResponse.from_product(product))


@product_router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: str,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> MessageResponse:
    services.catalogue.delete(principal, product_id)
    return MessageResponse(message="Product deleted!")
