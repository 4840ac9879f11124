#!/usr/bin/env python3
"""
RecipeBox - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the application context at startup
3. Exposes the HTTP routes

All business logic is in the modules, following black box principles.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Callable, List, Optional, Union

import redis.asyncio as redis
import uvicorn
from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from recipebox.config.provider import ConfigProvider, EnvConfigProvider
from recipebox.context import AppContext, build_context
from recipebox.exceptions import DependencyError, RecipeBoxError
from recipebox.logging_config import configure_logging, get_logging_config
from recipebox.modules.api import (
    Credentials,
    ErrorResponse,
    MessageResponse,
    MutationResponse,
    Recipe,
    RecipeInput,
    SessionIssuedResponse,
    TokenResponse,
)
from recipebox.modules.middleware import MUTATING_METHODS, AuthGate

logger = logging.getLogger(__name__)

CredentialResponse = Union[TokenResponse, SessionIssuedResponse]


def get_context(request: Request) -> AppContext:
    """Dependency returning the context built at startup."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise DependencyError("Service not initialized")
    return context


def _strategy_for(request: Request):
    context = getattr(request.app.state, "context", None)
    return context.strategy if context else None


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    client_factory: Optional[Callable[..., Any]] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config_provider: Configuration provider (defaults to environment variables)
        client_factory: Optional Redis client factory, used by tests
        clock: Optional clock for credential expiry, used by tests
    """
    config_provider = config_provider or EnvConfigProvider()
    api_config = config_provider.get_api_config()
    configure_logging(api_config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - initialize and cleanup resources.
        """
        logger.info("Starting RecipeBox API...")
        app.state.context = await build_context(config_provider, client_factory, clock)
        logger.info(f"RecipeBox API started with '{app.state.context.strategy.name}' credentials")

        yield

        logger.info("Shutting down RecipeBox API...")
        await app.state.context.close()
        app.state.context = None
        logger.info("RecipeBox API shutdown complete")

    app = FastAPI(
        title="RecipeBox API",
        description="Recipe management with cached listings",
        version="1.0.0",
        lifespan=lifespan,
        responses={status: {"model": ErrorResponse} for status in (400, 401, 409, 503)},
    )
    app.state.context = None

    # Reads are public; every mutation of the collection needs a credential
    auth_gate = AuthGate(
        strategy_resolver=_strategy_for,
        protected_paths={"/recipes": MUTATING_METHODS},
    )

    @app.middleware("http")
    async def gate(request: Request, call_next):
        return await auth_gate(request, call_next)

    _register_error_handlers(app)
    _register_auth_routes(app)
    _register_recipe_routes(app)
    _register_health_routes(app)

    return app


# Authentication Endpoints


def _register_auth_routes(app: FastAPI) -> None:
    @app.post("/signup", response_model=CredentialResponse, status_code=201)
    async def signup(
        payload: Credentials,
        response: Response,
        context: AppContext = Depends(get_context),
    ):
        """
        Create an account and sign it in.

        Returns:
            201: Account created, credential issued
            400: Malformed username or password
            409: Username already taken
        """
        credential = await context.auth.signup(payload.username, payload.password)
        return context.strategy.transport.deliver(response, credential)

    @app.post("/signin", response_model=CredentialResponse)
    async def signin(
        payload: Credentials,
        response: Response,
        context: AppContext = Depends(get_context),
    ):
        """
        Exchange username and password for a credential.

        Returns:
            200: Credential issued
            401: Invalid username or password
        """
        credential = await context.auth.signin(payload.username, payload.password)
        return context.strategy.transport.deliver(response, credential)

    @app.post("/refresh", response_model=CredentialResponse)
    async def refresh(
        request: Request,
        response: Response,
        context: AppContext = Depends(get_context),
    ):
        """
        Renew the presented credential.

        Returns:
            200: Successor credential issued
            400: Signed token not yet close enough to expiry
            401: Missing, invalid or expired credential
        """
        presented = context.strategy.transport.extract(request)
        credential = await context.auth.refresh(presented)
        return context.strategy.transport.deliver(response, credential)

    @app.post("/signout", response_model=MessageResponse)
    async def signout(
        request: Request,
        response: Response,
        context: AppContext = Depends(get_context),
    ):
        """
        End the caller's session.

        Returns:
            200: Session state cleared
            400: Active credentials cannot be revoked (signed tokens)
        """
        presented = context.strategy.transport.extract(request)
        await context.auth.signout(presented)
        context.strategy.transport.clear(response)
        return {"message": "Signed out"}


# Recipe Endpoints


def _register_recipe_routes(app: FastAPI) -> None:
    @app.get("/recipes", response_model=List[Recipe])
    async def list_recipes(context: AppContext = Depends(get_context)):
        """Return every recipe, from cache when possible."""
        return await context.recipes.list_recipes()

    @app.get("/recipes/search", response_model=List[Recipe])
    async def search_recipes(
        tag: str = Query(..., min_length=1, description="Tag to match"),
        context: AppContext = Depends(get_context),
    ):
        """Return recipes carrying the given tag."""
        return await context.recipes.search(tag)

    @app.post("/recipes", response_model=Recipe, status_code=201)
    async def create_recipe(
        payload: RecipeInput,
        request: Request,
        context: AppContext = Depends(get_context),
    ):
        """
        Add a recipe.

        Returns:
            201: Recipe created
            401: Missing or invalid credential
        """
        recipe = await context.recipes.create(payload)
        logger.info(f"Recipe {recipe.id} added by {request.state.principal.username}")
        return recipe

    @app.put("/recipes/{recipe_id}", response_model=MutationResponse)
    async def update_recipe(
        recipe_id: uuid.UUID,
        payload: RecipeInput,
        context: AppContext = Depends(get_context),
    ):
        """
        Update an existing recipe.

        Returns:
            200: Recipe updated, or not present (found=false)
            400: Invalid input or recipe id
            401: Missing or invalid credential
        """
        recipe_id = str(recipe_id)
        if await context.recipes.update(recipe_id, payload) is None:
            return MutationResponse(
                message=f"Recipe not present with given id {recipe_id}", id=recipe_id, found=False
            )
        return MutationResponse(message="Recipe has been updated", id=recipe_id, found=True)

    @app.delete("/recipes/{recipe_id}", response_model=MutationResponse)
    async def delete_recipe(
        recipe_id: uuid.UUID,
        context: AppContext = Depends(get_context),
    ):
        """
        Delete a recipe.

        Returns:
            200: Recipe deleted, or not present (found=false)
            400: Invalid recipe id
            401: Missing or invalid credential
        """
        recipe_id = str(recipe_id)
        if not await context.recipes.delete(recipe_id):
            return MutationResponse(
                message=f"Recipe not present with given id {recipe_id}", id=recipe_id, found=False
            )
        return MutationResponse(message=f"Recipe deleted with id {recipe_id}", id=recipe_id, found=True)


# Health/Monitoring Endpoints


def _register_health_routes(app: FastAPI) -> None:
    @app.get("/healthz")
    async def healthz():
        """
        Minimal liveness check. Unauthenticated.

        Returns:
            200: Service is running
        """
        return {"status": "ok"}

    @app.get("/health")
    async def health_check(request: Request):
        """
        Readiness check covering both Redis connections.

        Returns:
            200: Service healthy
            503: Service unhealthy
        """
        context = getattr(request.app.state, "context", None)
        if context is None:
            return JSONResponse(status_code=503, content={"status": "unhealthy", "modules": "not initialized"})

        status = {}
        for name, client in (("store", context.store_client), ("cache", context.cache_client)):
            try:
                await client.ping()
                status[name] = "connected"
            except redis.RedisError as e:
                logger.error(f"Health check: {name} unreachable: {e}")
                status[name] = "disconnected"

        healthy = all(value == "connected" for value in status.values())
        body = {
            "status": "healthy" if healthy else "unhealthy",
            "credentials": context.strategy.name,
            "version": "1.0.0",
            **status,
        }
        return JSONResponse(status_code=200 if healthy else 503, content=body)


# Error handlers


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecipeBoxError)
    async def recipebox_error_handler(request: Request, exc: RecipeBoxError):
        """Report domain errors with their own status."""
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(redis.RedisError)
    async def redis_error_handler(request: Request, exc: redis.RedisError):
        """Handle Redis errors."""
        logger.error(f"Redis error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"error": "Storage backend unavailable"})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle malformed input."""
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


def main() -> None:
    config_provider = EnvConfigProvider()
    api_config = config_provider.get_api_config()

    uvicorn.run(
        "recipebox.main:create_app",
        factory=True,
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    main()
