import logging
from fastapi import APIRouter, Depends, Request
from ..core.deps import SESSION_USER_KEY, current_user, get_store
from ..core.errors import Conflict, Unauthenticated
from ..core.models import LoginRequest, MessageResponse, NewUser, PublicUser, RegisterRequest, User
from ..core.security import hash_password, verify_password
from ..store.base import GalleryStore

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)


def _public(user: User) -> PublicUser:
    # The password hash never leaves the server
    return PublicUser(**user.model_dump(exclude={"password"}))


@router.post("/register", response_model=PublicUser, status_code=201, responses={400: {"model": MessageResponse}})
def register(body: RegisterRequest, request: Request, store: GalleryStore = Depends(get_store)):
    if store.get_user_by_username(body.username):
        raise Conflict("Username already exists")
    user = store.create_user(
        NewUser(
            username=body.username,
            password=hash_password(body.password),
            full_name=body.full_name,
            email=body.email,
        )
    )
    request.session[SESSION_USER_KEY] = user.id
    logger.info("Registered user %s", user.id)
    return _public(user)


@router.post("/login", response_model=PublicUser, responses={401: {"model": MessageResponse}})
def login(body: LoginRequest, request: Request, store: GalleryStore = Depends(get_store)):
    user = store.get_user_by_username(body.username)
    if user is None or not verify_password(body.password, user.password):
        raise Unauthenticated("Invalid username or password")
    request.session[SESSION_USER_KEY] = user.id
    return _public(user)


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"status": "ok"}


@router.get("/user", response_model=PublicUser, responses={401: {"model": MessageResponse}})
def get_current_user(user: User = Depends(current_user)):
    return _public(user)
