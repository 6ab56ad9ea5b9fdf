"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from routers.convert import router as convert_router
from routers.upload import router as upload_router

app = FastAPI(
    title=settings.app_name,
    description="Converts FPB.JS process models to AutomationML (CAEX 3.0) and back",
    version=settings.app_version,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["Content-Type"],
)


app.include_router(convert_router, prefix=settings.api_prefix)
app.include_router(upload_router, prefix=settings.api_prefix)


@app.get(f"{settings.api_prefix}/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
