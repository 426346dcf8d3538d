"""api/ -- HTTP layer: FastAPI app, transport models, and routers."""
