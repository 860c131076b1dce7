"""FastAPI endpoints for registration, login, profile and wishlist."""

from fastapi import APIRouter, Depends

from gamezone.api.schemas import (
    AuthResponse,
    LoginRequest,
    ProfileUpdateResponse,
    RegisterRequest,
    UpdateProfileRequest,
    UserResponse,
    WishlistResponse,
)
from gamezone.api.security import current_principal, get_services
from gamezone.identity.access import Principal
from gamezone.services import Services

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register", status_code=201, response_model=AuthResponse)
def register(body: RegisterRequest, services: Services = Depends(get_services)) -> AuthResponse:
    result = services.accounts.register(
        name=body.name,
        email=body.email,
        phone=body.phone,
        password=body.password,
    )
    return AuthResponse(
        message="Registration successful!",
        token=result.token,
        user=UserResponse.from_account(result.account),
    )


@auth_router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, services: Services = Depends(get_services)) -> AuthResponse:
    result = services.accounts.login(body.email, body.password)
    return AuthResponse(
        message="Login successful!",
        token=result.token,
        user=UserResponse.from_account(result.account),
    )


@auth_router.get("/profile", response_model=UserResponse)
def profile(
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> UserResponse:
    return UserResponse.from_account(services.accounts.profile(principal.user_id))


@auth_router.put("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    body: UpdateProfileRequest,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> ProfileUpdateResponse:
    account = services.accounts.update_profile(
        principal.user_id,
        name=body.name,
        phone=body.phone,
        address=body.address.model_dump() if body.address else None,
    )
    return ProfileUpdateResponse(message="Profile updated!", user=UserResponse.from_account(account))


@auth_router.post("/wishlist/{product_id}", response_model=WishlistResponse)
def toggle_wishlist(
    product_id: str,
    principal: Principal = Depends(current_principal),
    services: Services = Depends(get_services),
) -> WishlistResponse:
    change = services.accounts.toggle_wishlist(principal.user_id, product_id)
    message = "Added to wishlist" if change.added else "Removed from wishlist"
    return WishlistResponse(message=message, wishlist=change.wishlist)
