import logging
from contextlib import asynccontextmanager

import asyncpg
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from categories import router as categories_router
from core import config, db, errors, schema
from movies import router as movies_router

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pool per process, handed to handlers through db.get_pool.
    app.state.pool = await db.create_pool()
    try:
        await schema.ensure_schema(app.state.pool)
        yield
    finally:
        await db.close_pool(app.state.pool)
        app.state.pool = None


app = FastAPI(title="crud-movies-api", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

errors.register_exception_handlers(app)

app.include_router(movies_router.router, tags=["movies"])
app.include_router(categories_router.router, tags=["categories"])


@app.get("/health")
async def health(pool: asyncpg.Pool = Depends(db.get_pool)) -> dict:
    try:
        await db.ping(pool)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
        logger.warning("health_check_failed error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database connection failed",
        ) from exc
    return {"status": "healthy"}


@app.get("/")
def root() -> dict:
    return {"message": "crud-movies api"}


if __name__ == "__main__":
    logger.info("server_start host=%s port=%s", config.host(), config.port())
    uvicorn.run(app, host=config.host(), port=config.port())
