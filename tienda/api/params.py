# tienda/api/params.py
from fastapi import Query


class PageParams:
    def __init__(
        self,
        page: int = Query(0, ge=0, description="Numero de pagina (desde 0)"),
        size: int = Query(20, ge=1, le=100, description="Elementos por pagina"),
    ):
        self.page = page
        self.size = size
