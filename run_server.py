#!/usr/bin/env python3
import argparse
import logging
import os
import sys

import uvicorn

from app.core.config import settings


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("run_server")

SERVICES = {
    "card": ("app.main:create_card_app", settings.CARD_SERVICE_PORT),
    "charge": ("app.main:create_charge_app", settings.CHARGE_SERVICE_PORT),
}


def get_ssl_params() -> dict:
    key = settings.SSL_KEYFILE
    cert = settings.SSL_CERTFILE
    if not (key and cert and os.path.exists(key) and os.path.exists(cert)):
        logger.warning("Iniciando en HTTP (sin certificados SSL encontrados).")
        return {}
    logger.info("Usando certificados SSL para HTTPS.")
    return {"ssl_keyfile": key, "ssl_certfile": cert}


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Arranca el card service o el charge service")
    parser.add_argument("service", choices=sorted(SERVICES))
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args(argv)

    factory, default_port = SERVICES[args.service]
    port = args.port or default_port
    params = get_ssl_params()
    protocolo = "https" if params else "http"

    logger.info(f"Levantando {args.service} service en {protocolo}://{args.host}:{port}")
    uvicorn.run(
        factory,
        factory=True,
        host=args.host,
        port=port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
        **params,
    )


if __name__ == "__main__":
    main()
