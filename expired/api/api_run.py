import logging

from fastapi import FastAPI

from expired.api.routes import products
from expired.utilities.config import DEBUG, PRODUCTS_FILE

# Logging
logger = logging.getLogger("expired_app")

# Initialize FastAPI app
app = FastAPI(title="Expired - Product Expiry Tracker", debug=DEBUG)

# Include routers
app.include_router(products.router)


@app.on_event("startup")
def _startup_product_store():
    """Open the product store when the app starts so file problems show up early."""
    products.get_list_view()
    logger.info("Product store ready (%s)", PRODUCTS_FILE)


@app.get("/health")
def health():
    return {"status": "ok"}
