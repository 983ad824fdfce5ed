# tienda/product_service/main.py
import uvicorn

from tienda.api import create_service_app
from tienda.api.routers import brands, categories, products
from tienda.data.models import CATALOG_TABLES


def create_app():
    return create_service_app(
        "Product Service",
        routers=[
            products.statistics_router,
            products.public_router,
            categories.router,
            brands.router,
            products.router,
        ],
        tables=CATALOG_TABLES,
    )


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8082)
