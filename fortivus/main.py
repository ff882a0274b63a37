from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fortivus.core.config import settings
from fortivus.core.errors import FortivusError
from fortivus.core.logging import setup_logging
from fortivus.routers.admin import router as admin_router
from fortivus.routers.auth import router as auth_router
from fortivus.routers.exercises import router as exercises_router
from fortivus.routers.me import router as me_router
from fortivus.routers.notifications import router as notifications_router
from fortivus.routers.plans import router as plans_router
from fortivus.routers.templates import router as templates_router
from fortivus.routers.workouts import router as workouts_router

logger = setup_logging()

app = FastAPI(title="Fortivus API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FortivusError)
async def fortivus_error_handler(request: Request, exc: FortivusError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(auth_router)
app.include_router(me_router)
app.include_router(exercises_router)
app.include_router(templates_router)
app.include_router(workouts_router)
app.include_router(plans_router)
app.include_router(notifications_router)
app.include_router(admin_router)


@app.get("/health")
def health():
    return {"ok": True}
