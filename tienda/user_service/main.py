# tienda/user_service/main.py
import uvicorn

from tienda.api import create_service_app
from tienda.api.routers import auth, roles, users
from tienda.data.models import USER_TABLES
from tienda.data.seed import seed


def create_app():
    return create_service_app(
        "User Service",
        routers=[auth.router, roles.router, users.router],
        tables=USER_TABLES,
        on_startup=seed,
    )


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8081)
