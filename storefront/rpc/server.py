import asyncio

import grpc
import structlog

from storefront import models  # noqa: F401
from storefront.core import config
from storefront.core.database import AsyncSessionLocal, create_tables
from storefront.core.observability import configure_logging, configure_tracing

from . import codec
from .servicers import AdminServicer, ShopServicer

logger = structlog.get_logger(__name__)


def generic_handler(servicer):
    """Expose every method listed on the servicer as a unary JSON RPC."""
    return grpc.method_handlers_generic_handler(
        servicer.SERVICE_NAME,
        {
            name: grpc.unary_unary_rpc_method_handler(
                getattr(servicer, name),
                request_deserializer=codec.decode,
                response_serializer=codec.encode,
            )
            for name in servicer.METHODS
        },
    )


def build_server(session_factory=AsyncSessionLocal) -> grpc.aio.Server:
    server = grpc.aio.server()
    server.add_generic_rpc_handlers((
        generic_handler(ShopServicer(session_factory)),
        generic_handler(AdminServicer(session_factory)),
    ))
    return server


async def serve(port: int = config.GRPC_PORT):
    configure_logging()
    configure_tracing(f"{config.SERVICE_NAME}_grpc")
    await create_tables()

    server = build_server()
    bound_port = server.add_insecure_port(f"0.0.0.0:{port}")
    await server.start()
    logger.info("gRPC server running", port=bound_port)
    await server.wait_for_termination()


def main():
    asyncio.run(serve())


if __name__ == "__main__":
    main()
