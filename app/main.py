"""Jokes API — main application."""

import json
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError as PydanticValidationError
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.auth import AccessGate, KeyStore, require_api_key
from app.config import (
    HOST,
    KEY_RATE_LIMIT,
    LOG_LEVEL,
    PORT,
    RATE_LIMIT,
    SEED_JOKES,
)
from app.errors import InternalFault, JokesAPIError, Unauthorized, ValidationError
from app.logging_config import setup_logging
from app.middleware import RequestLoggingMiddleware
from app.schemas import (
    APIKeyResponse,
    ErrorResponse,
    HealthResponse,
    JokeCreate,
    JokeMessageResponse,
    JokeResponse,
    JokeUpdate,
    MessageResponse,
    RandomJokeResponse,
    RegisterRequest,
)
from app.seed_data import SEED_JOKES as SAMPLE_JOKES
from app.state import get_joke_store, get_key_store, get_user_registry
from app.store import JokeStore
from app.users import UserRegistry

logger = setup_logging(LOG_LEVEL)

# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------
limiter = Limiter(key_func=get_remote_address)

router = APIRouter()

KEY_ERRORS = {403: {"model": ErrorResponse}}


# ---------------------------------------------------------------------------
# Lifespan: seed sample jokes on startup
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the joke store on startup when SEED_JOKES is enabled."""
    store: JokeStore = app.state.joke_store
    if SEED_JOKES and len(store) == 0:
        for joke in SAMPLE_JOKES:
            store.add(**joke)
        logger.info(
            "Seeded joke store",
            extra={"event_type": "store_seed", "joke_count": len(store)},
        )

    yield


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
async def jokes_api_error_handler(request: Request, exc: JokesAPIError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={"event_type": "internal_fault", "path": request.url.path},
    )
    return await jokes_api_error_handler(request, InternalFault())


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("/", tags=["General"])
@limiter.limit(RATE_LIMIT)
def root(request: Request):
    """Welcome message with API overview."""
    return {
        "message": "Welcome to the Jokes API!",
        "docs": "/docs",
        "endpoints": {
            "random_joke": "GET /jokes/random",
            "joke_by_id": "GET /jokes/{id}",
            "all_jokes": "GET /jokes",
            "jokes_by_genre": "GET /jokes/genre/{genre}",
            "add_joke": "POST /jokes/add",
            "edit_joke": "PUT /jokes/edit/{id}",
            "delete_joke": "DELETE /jokes/delete/{id}",
            "api_key": "POST /apikeys",
            "register": "POST /register",
            "health": "GET /health",
        },
    }


@router.get("/health", response_model=HealthResponse, tags=["General"])
def health_check(
    jokes: JokeStore = Depends(get_joke_store),
    keys: KeyStore = Depends(get_key_store),
    users: UserRegistry = Depends(get_user_registry),
):
    """Health check endpoint for monitoring."""
    return HealthResponse(
        status="ok",
        jokes=len(jokes),
        api_keys=len(keys),
        users=len(users),
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/jokes/random",
    response_model=RandomJokeResponse,
    tags=["Jokes"],
    responses={**KEY_ERRORS, 404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMIT)
def get_random_joke(
    request: Request,
    _key: str = Depends(require_api_key),
    jokes: JokeStore = Depends(get_joke_store),
):
    """Return a random joke."""
    return RandomJokeResponse(joke=JokeResponse.model_validate(jokes.pick_random()))


@router.get(
    "/jokes/genre/{genre}",
    response_model=list[JokeResponse],
    tags=["Jokes"],
    responses={**KEY_ERRORS, 404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMIT)
def get_jokes_by_genre(
    genre: str,
    request: Request,
    _key: str = Depends(require_api_key),
    jokes: JokeStore = Depends(get_joke_store),
):
    """Return every joke of a genre. Matching is exact and case-sensitive."""
    return jokes.filter_by_genre(genre)


@router.get(
    "/jokes/{joke_id}",
    response_model=JokeResponse,
    tags=["Jokes"],
    responses={**KEY_ERRORS, 404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMIT)
def get_joke_by_id(
    joke_id: int,
    request: Request,
    _key: str = Depends(require_api_key),
    jokes: JokeStore = Depends(get_joke_store),
):
    """Return a specific joke by its ID."""
    return jokes.get(joke_id)


@router.get(
    "/jokes",
    response_model=list[JokeResponse],
    tags=["Jokes"],
    responses=KEY_ERRORS,
)
@limiter.limit(RATE_LIMIT)
def list_jokes(
    request: Request,
    _key: str = Depends(require_api_key),
    jokes: JokeStore = Depends(get_joke_store),
):
    """List all jokes in the order they were added."""
    return jokes.list_all()


@router.post(
    "/jokes/add",
    response_model=JokeMessageResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Jokes"],
    responses={**KEY_ERRORS, 400: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMIT)
def add_joke(
    request: Request,
    payload: Optional[JokeCreate] = None,
    _key: str = Depends(require_api_key),
    jokes: JokeStore = Depends(get_joke_store),
):
    """Add a new joke. Question, answer and genre are all required."""
    payload = payload or JokeCreate()
    joke = jokes.add(payload.question, payload.answer, payload.genre)
    return JokeMessageResponse(
        message="Joke added successfully.",
        joke=JokeResponse.model_validate(joke),
    )


@router.put(
    "/jokes/edit/{joke_id}",
    response_model=JokeMessageResponse,
    tags=["Jokes"],
    responses={
        **KEY_ERRORS,
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
@limiter.limit(RATE_LIMIT)
def edit_joke(
    joke_id: int,
    request: Request,
    payload: Optional[JokeUpdate] = None,
    _key: str = Depends(require_api_key),
    jokes: JokeStore = Depends(get_joke_store),
):
    """Edit a joke. Only the fields given a value are changed."""
    payload = payload or JokeUpdate()
    joke = jokes.update(
        joke_id,
        question=payload.question,
        answer=payload.answer,
        genre=payload.genre,
    )
    return JokeMessageResponse(
        message="Joke edited successfully.",
        joke=JokeResponse.model_validate(joke),
    )


@router.delete(
    "/jokes/delete/{joke_id}",
    response_model=MessageResponse,
    tags=["Jokes"],
    responses={**KEY_ERRORS, 404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMIT)
def delete_joke(
    joke_id: int,
    request: Request,
    _key: str = Depends(require_api_key),
    jokes: JokeStore = Depends(get_joke_store),
):
    """Delete a joke. The ids of the remaining jokes do not change."""
    jokes.remove(joke_id)
    return MessageResponse(message="Joke deleted successfully.")


@router.post("/apikeys", response_model=APIKeyResponse, tags=["Authentication"])
@limiter.limit(KEY_RATE_LIMIT)
def create_api_key(request: Request, keys: KeyStore = Depends(get_key_store)):
    """Issue a new API key. No credentials are required."""
    return APIKeyResponse(api_key=keys.issue_key())


FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def registration_payload(request: Request) -> RegisterRequest:
    """Read the registration fields from an HTML form post or a JSON body.

    Raises:
        ValidationError: If the body is neither a form nor a JSON object of
            string fields.
    """
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(FORM_CONTENT_TYPES):
            data = dict(await request.form())
        else:
            body = await request.body()
            data = json.loads(body) if body else {}
        return RegisterRequest.model_validate(data)
    except (ValueError, PydanticValidationError):
        raise ValidationError("Username and password are required.")


@router.post(
    "/register",
    status_code=status.HTTP_302_FOUND,
    tags=["Authentication"],
    openapi_extra={
        "requestBody": {
            "content": {
                content_type: {"schema": RegisterRequest.model_json_schema()}
                for content_type in ("application/json", FORM_CONTENT_TYPES[0])
            }
        }
    },
    responses={
        302: {"description": "Redirect to the key retrieval endpoint"},
        400: {"model": ErrorResponse},
    },
)
@limiter.limit(KEY_RATE_LIMIT)
def register(
    request: Request,
    payload: RegisterRequest = Depends(registration_payload),
    users: UserRegistry = Depends(get_user_registry),
):
    """Register a user and redirect to the page showing their new API key.

    Accepts the registration form as well as a JSON body.
    """
    api_key = users.register(payload.username, payload.password)
    return RedirectResponse(
        url=f"/get-api-key?{urlencode({'apiKey': api_key})}",
        status_code=status.HTTP_302_FOUND,
    )


@router.get(
    "/get-api-key",
    response_model=APIKeyResponse,
    tags=["Authentication"],
    responses=KEY_ERRORS,
)
@limiter.limit(RATE_LIMIT)
def get_api_key(
    request: Request,
    api_key: Optional[str] = Query(None, alias="apiKey"),
    keys: KeyStore = Depends(get_key_store),
):
    """Show an API key handed out by registration."""
    if not keys.is_valid(api_key):
        raise Unauthorized()
    return APIKeyResponse(api_key=api_key)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------
def create_app() -> FastAPI:
    """Build an application with its own, empty stores."""
    application = FastAPI(
        title="Jokes API",
        description=(
            "A RESTful API serving question-and-answer jokes. "
            "Every joke endpoint requires an API key in the API-Key header; "
            "get one from POST /apikeys or by registering."
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        responses={429: {"model": ErrorResponse}},
    )

    key_store = KeyStore()
    application.state.key_store = key_store
    application.state.access_gate = AccessGate(key_store)
    application.state.joke_store = JokeStore()
    application.state.user_registry = UserRegistry(key_store)

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    application.add_exception_handler(JokesAPIError, jokes_api_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)
    application.add_middleware(RequestLoggingMiddleware)
    application.include_router(router)
    return application


app = create_app()


def run():
    """Serve the application with uvicorn (``jokes-api`` console script)."""
    uvicorn.run("app.main:app", host=HOST, port=PORT)


if __name__ == "__main__":
    run()
