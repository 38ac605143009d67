from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from launchpad.api.admin_routes import router as admin_router
from launchpad.api.deps import get_director, shutdown_director
from launchpad.api.routes import classic_router, router
from launchpad.observability.logging import log
from launchpad.settings import settings


@asynccontextmanager
async def lifespan(_app: FastAPI):
    director = get_director()
    log(event="boot", stage=director.stage, storeBackend=settings.STORE_BACKEND)
    yield
    shutdown_director()


app = FastAPI(title="Launch Director API", lifespan=lifespan)

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(classic_router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Launch Director is running. Read GET /launch/state and post events to /launch/events/*.",
    }


@app.get("/health")
def health():
    return {"status": "ok"}
