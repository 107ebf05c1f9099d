from fastapi import FastAPI
from placement.api.v1.endpoints import resumes, profile
from placement.db.database import connect_to_mongo, close_mongo_connection
from contextlib import asynccontextmanager
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    yield
    await close_mongo_connection()

app = FastAPI(title="Placement Resume API", version="0.1.0", lifespan=lifespan)
app.include_router(resumes.router, prefix="/api/v1/resumes", tags=["resumes"])
app.include_router(profile.router, prefix="/api/v1/profile", tags=["profile"])

@app.get("/health", tags=["health"])
async def health():
    """Health check endpoint returning service status."""
    return {"status": "ok"}
