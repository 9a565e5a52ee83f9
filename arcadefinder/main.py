"""
Arcade Finder: FastAPI application.
JSON API under /api, health probes, and the single-page client for every other path.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List

from fastapi import Depends, FastAPI, Path as PathParam, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

from . import crud, schemas
from .auth import create_access_token, get_current_user_id
from .config import settings
from .db import Base, check_db_connectivity, engine, get_db
from .exceptions import ArcadeFinderError, Internal, NotFound, Unauthenticated, ValidationError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(settings.static_dir) if settings.static_dir else Path(__file__).parent / "static"
# Largest id a BIGINT column can hold; anything above is rejected as a bad request
MAX_ID = 2**63 - 1
RowId = Annotated[int, PathParam(le=MAX_ID)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables if not existing; there is no migration tooling
    Base.metadata.create_all(bind=engine)
    if check_db_connectivity():
        logger.info("Database connectivity verified.")
    else:
        logger.error("Database connectivity check FAILED at startup.")
    yield
    logger.info("Shutting down.")
    engine.dispose()


app = FastAPI(title="Arcade Finder", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------- Error handling --------------------
def _error_response(exc: ArcadeFinderError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(ArcadeFinderError)
async def arcadefinder_error_handler(request: Request, exc: ArcadeFinderError):
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        # drop the leading "body"/"path" marker from the location
        loc = [str(p) for p in err.get("loc", ())[1:]] or [str(p) for p in err.get("loc", ())]
        problems.append(f"{'.'.join(loc)}: {err.get('msg')}")
    return _error_response(ValidationError("; ".join(problems) or None))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # framework-level errors (unknown route, wrong method) share the {"msg"} body
    return JSONResponse(status_code=exc.status_code, content={"msg": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_response(Internal())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(Internal())


# -------------------- Probes --------------------
@app.get("/health", response_class=PlainTextResponse)
async def health():
    return "OK"


@app.get("/ready")
def ready():
    db_ok = check_db_connectivity()
    return JSONResponse(content={"db": "ok" if db_ok else "error"}, status_code=200 if db_ok else 503)


# -------------------- Auth --------------------
@app.post("/api/auth/register", response_model=schemas.AuthResponse, status_code=201)
def register(payload: schemas.UserRegister, db: Session = Depends(get_db)):
    user = crud.register_user(db, payload)
    return {"token": create_access_token(user.id), "user": user}


@app.post("/api/auth/login", response_model=schemas.AuthResponse)
def login(payload: schemas.UserLogin, db: Session = Depends(get_db)):
    user = crud.authenticate_user(db, payload)
    logger.info("user id=%s logged in", user.id)
    return {"token": create_access_token(user.id), "user": user}


# -------------------- Arcades --------------------
@app.post("/api/arcades", response_model=schemas.ArcadeRead, dependencies=[Depends(get_current_user_id)])
def create_arcade(payload: schemas.ArcadeIn, db: Session = Depends(get_db)):
    return crud.create_arcade(db, payload)


@app.get("/api/arcades", response_model=List[schemas.ArcadeWithRating])
def list_arcades(db: Session = Depends(get_db)):
    return [
        schemas.ArcadeWithRating(**schemas.ArcadeRead.model_validate(arcade).model_dump(), average_rating=avg)
        for arcade, avg in crud.list_arcades_with_rating(db)
    ]


@app.get("/api/arcades/{arcade_id}", response_model=schemas.ArcadeRead)
def get_arcade(arcade_id: RowId, db: Session = Depends(get_db)):
    return crud.get_arcade(db, arcade_id)


@app.put("/api/arcades/{arcade_id}", response_model=schemas.ArcadeRead, dependencies=[Depends(get_current_user_id)])
def update_arcade(arcade_id: RowId, payload: schemas.ArcadeIn, db: Session = Depends(get_db)):
    return crud.update_arcade(db, arcade_id, payload)


@app.delete("/api/arcades/{arcade_id}", response_model=schemas.ArcadeDeleted, dependencies=[Depends(get_current_user_id)])
def delete_arcade(arcade_id: RowId, db: Session = Depends(get_db)):
    deleted = crud.delete_arcade(db, arcade_id)
    return {"message": "Arcade deleted successfully", "arcade": deleted}


# -------------------- Comments --------------------
@app.get("/api/arcades/{arcade_id}/comments", response_model=List[schemas.CommentWithUsername])
def list_arcade_comments(arcade_id: RowId, db: Session = Depends(get_db)):
    return crud.list_arcade_comments(db, arcade_id)


@app.post("/api/arcades/{arcade_id}/comments", response_model=schemas.CommentWithUsername)
def create_comment(
    arcade_id: RowId,
    payload: schemas.CommentIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return crud.create_comment(db, arcade_id, user_id, payload)


@app.get("/api/profile", response_model=schemas.ProfileResponse)
def profile(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return {"comments": crud.list_user_comments(db, user_id)}


@app.put("/api/comments/{comment_id}", response_model=schemas.CommentRead)
def update_comment(
    comment_id: RowId,
    payload: schemas.CommentIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return crud.update_comment(db, comment_id, user_id, payload)


@app.delete("/api/comments/{comment_id}", response_model=schemas.CommentDeleted)
def delete_comment(
    comment_id: RowId,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    deleted = crud.delete_comment(db, comment_id, user_id)
    return {"message": "Comment deleted successfully", "comment": deleted}


# -------------------- Fallbacks --------------------
API_FALLBACK_PATH = "/api/{path:path}"


@app.api_route(
    API_FALLBACK_PATH,
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
async def api_not_found(request: Request, path: str):
    # a known API path hit with the wrong verb stays a 405
    for route in app.router.routes:
        route_path = getattr(route, "path", "")
        if route_path.startswith("/api/") and route_path != API_FALLBACK_PATH:
            match, _ = route.matches(request.scope)
            if match == Match.PARTIAL:
                raise StarletteHTTPException(status_code=405)
    raise NotFound("Route not found")


# Registered last so every route above wins the match
@app.get("/{full_path:path}", include_in_schema=False)
async def spa(full_path: str):
    if full_path == "api" or full_path.startswith("api/"):
        raise NotFound("Route not found")
    root = STATIC_DIR.resolve()
    if full_path:
        candidate = (root / full_path).resolve()
        if candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
    index = root / "index.html"
    if not index.is_file():
        raise NotFound("Client bundle not found")
    return FileResponse(index)
