"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn -k uvicorn.workers.UvicornWorker) importe `laundry.asgi:app`.
- Toute la configuration FastAPI (routes, middlewares, lifespan) est centralisée dans laundry.app_setup.
"""

from laundry.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "laundry.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
