from fastapi import APIRouter, Body, Depends, status

from app.schemas.auth.user import LoginUser, UserCreate
from app.services.shares.auth import AuthService

router = APIRouter(tags=["Auth"])


def get_auth_service(auth: AuthService = Depends(AuthService)) -> AuthService:
    return auth


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    schema: UserCreate = Body(),
    auth_service: AuthService = Depends(get_auth_service),
):
    return await auth_service.register_async(schema)


@router.post("/login", status_code=status.HTTP_200_OK)
async def login(
    schema: LoginUser = Body(),
    auth_service: AuthService = Depends(get_auth_service),
):
    return await auth_service.login_async(schema)
