"""
Tastebook Web - FastAPI application.

JSON API for the recipe book, planner, shopping list and dashboard.
Uses Supabase Auth bearer tokens for authentication.
"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tastebook import __version__
from tastebook.config import settings
from tastebook.errors import TastebookError
from tastebook.web.achievement_routes import router as achievement_router
from tastebook.web.auth import AuthenticatedUser, get_current_user
from tastebook.web.auth_routes import router as auth_router
from tastebook.web.dashboard_routes import router as dashboard_router
from tastebook.web.favorite_routes import router as favorite_router
from tastebook.web.matcher_routes import router as matcher_router
from tastebook.web.meal_plan_routes import router as meal_plan_router
from tastebook.web.notifications import error_body
from tastebook.web.profile_routes import router as profile_router
from tastebook.web.recipe_routes import router as recipe_router
from tastebook.web.review_routes import router as review_router
from tastebook.web.shopping_routes import router as shopping_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Tastebook", version=__version__)


@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    logger.info("Tastebook starting up...")
    logger.info(f"  Environment: {settings.tastebook_env}")
    logger.info(f"  Supabase: {settings.supabase_url}")


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error Handlers
# =============================================================================


@app.exception_handler(TastebookError)
async def tastebook_error_handler(request: Request, exc: TastebookError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    body = error_body(message)
    body["errors"] = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
        for err in errors
    ]
    return JSONResponse(status_code=422, content=body)


# =============================================================================
# Routes
# =============================================================================

app.include_router(auth_router, prefix="/api")
app.include_router(recipe_router, prefix="/api")
app.include_router(review_router, prefix="/api")
app.include_router(favorite_router, prefix="/api")
app.include_router(meal_plan_router, prefix="/api")
app.include_router(shopping_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(achievement_router, prefix="/api")
app.include_router(matcher_router, prefix="/api")
app.include_router(profile_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/me")
async def get_me(user: AuthenticatedUser = Depends(get_current_user)):
    return {"id": user.id, "email": user.email}
