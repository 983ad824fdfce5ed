# tienda/gateway/routes.py
from typing import Mapping, NamedTuple

API_PREFIX = "/api"


class Target(NamedTuple):
    base_url: str
    path: str

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.path}"


def resolve(path: str, routes: Mapping[str, str]) -> Target | None:
    """
    /api/<service>/<rest> -> (routes[<service>], /<service>/<rest>).
    Exactly one leading segment (/api) is stripped; unknown services resolve to None.
    """
    if not (path == API_PREFIX or path.startswith(API_PREFIX + "/")):
        return None
    downstream = path[len(API_PREFIX):] or "/"
    service = downstream.lstrip("/").split("/", 1)[0]
    base_url = routes.get(service)
    if not service or base_url is None:
        return None
    return Target(base_url, downstream)
