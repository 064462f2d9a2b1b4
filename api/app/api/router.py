"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import auth, billetweb, public

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(billetweb.router, prefix="/billetweb", tags=["billetweb"])
api_router.include_router(public.router, tags=["public"])
