"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Démarre le fournisseur du catalogue (chargement initial + abonnements) et l'arrête au shutdown.
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
Variables d’environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback mémoire si l’init échoue
  - CATALOG_AUTOSTART=0: ne charge pas le catalogue au démarrage (tests, scripts)
"""
import os
import logging
import redis.asyncio as aioredis
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from laundry.catalog import CatalogProvider, ChangeFeed

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except ImportError:
    FakeRedis = None


async def _init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            if not FakeRedis:
                raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    await _init_rate_limiter(app, logger)

    catalog = getattr(app.state, "catalog", None)
    if catalog is None:
        catalog = CatalogProvider(feed=ChangeFeed())
        app.state.catalog = catalog
    if os.getenv("CATALOG_AUTOSTART", "1") != "0":
        catalog.start()
        if catalog.error:
            logger.warning("Catalog loaded with error: %s", catalog.error)
    try:
        yield
    finally:
        catalog.stop()
        logger.info("Catalog provider stopped")
