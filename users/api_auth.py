"""
This file contains the API endpoints for registration, login and token
management.
"""

import logging

from ninja import Router
from ninja.responses import codes_4xx

from socialhub.schemas import EmptyEnvelope, ErrorOut, respond
from users.auth import JWTAuth
from users.schemas import (
    AuthEnvelope,
    LoginIn,
    RefreshIn,
    RegisterIn,
    TokensEnvelope,
    UserEnvelope,
    UserOut,
)
from users.services import UserService, issue_tokens

router = Router(tags=["Auth"])

# Module-level logger
logger = logging.getLogger(__name__)


@router.post("/register", response={201: AuthEnvelope, codes_4xx: ErrorOut})
def register(request, payload: RegisterIn):
    user = UserService.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        full_name=payload.fullName,
    )
    data = {"user": UserOut.from_model(user), **issue_tokens(user)}
    return respond(201, "User registered successfully", data)


@router.post("/login", response={200: AuthEnvelope, codes_4xx: ErrorOut})
def login(request, payload: LoginIn):
    user = UserService.login(payload.email, payload.password)
    logger.info(f"User {user.id} logged in")
    data = {"user": UserOut.from_model(user), **issue_tokens(user)}
    return respond(200, "Login successful", data)


@router.post("/refresh", response={200: TokensEnvelope, codes_4xx: ErrorOut})
def refresh(request, payload: RefreshIn):
    tokens = UserService.refresh(payload.refreshToken)
    return respond(200, "Token refreshed successfully", tokens)


@router.post(
    "/logout", response={200: EmptyEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth()
)
def logout(request, payload: RefreshIn):
    UserService.logout(payload.refreshToken)
    logger.info(f"User {request.auth.id} logged out")
    return respond(200, "Logout successful")


@router.get("/me", response={200: UserEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth())
def me(request):
    return respond(
        200, "User retrieved successfully", {"user": UserOut.from_model(request.auth)}
    )
