# tienda/cart_service/main.py
import uvicorn

from tienda.api import create_service_app
from tienda.api.routers import carts
from tienda.data.models import CART_TABLES


def create_app():
    return create_service_app("Cart Service", routers=[carts.router], tables=CART_TABLES)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8083)
