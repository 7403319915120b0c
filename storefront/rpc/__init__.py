from .server import build_server, serve
from .servicers import AdminServicer, ShopServicer

__all__ = ["AdminServicer", "ShopServicer", "build_server", "serve"]
