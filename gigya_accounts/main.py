#!/usr/bin/env python3
"""
Gigya Accounts - Extension Endpoint

Thin orchestration layer that:
1. Loads configuration
2. Builds the accounts client and the extension gateway
3. Serves verified extension calls

All business logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import click
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from gigya_accounts import __version__
from gigya_accounts.config.provider import ConfigProvider, EnvConfigProvider
from gigya_accounts.logging_config import get_logging_config
from gigya_accounts.modules.accounts import AccountsClient
from gigya_accounts.modules.errors import (
    AuthError,
    DecodeError,
    FormatError,
    KeyUnavailableError,
    TokenExpiredError,
    VerificationError,
)
from gigya_accounts.modules.extensions import ExtensionGateway, ExtensionResponse

logger = logging.getLogger(__name__)


class JWSEnvelope(BaseModel):
    """Body of an inbound extension call."""

    jws: str


def create_app(
    gateway: Optional[ExtensionGateway] = None,
    config_provider: Optional[ConfigProvider] = None,
) -> FastAPI:
    """
    Create the extension endpoint application.

    Args:
        gateway: Prebuilt gateway; built from configuration at startup if omitted
        config_provider: Configuration source (environment if omitted)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        if app.state.gateway is None:
            config = (config_provider or EnvConfigProvider()).get_client_config()
            client = AccountsClient(config)
            app.state.gateway = ExtensionGateway(
                client.get_jwt_public_key, max_exponent_bits=config.max_exponent_bits
            )
            logger.info(f"Extension gateway initialized for {config.api_domain}")

        yield

        if client:
            client.close()
        logger.info("Extension endpoint shutdown complete")

    app = FastAPI(
        title="Gigya Accounts Extensions",
        description="Verified extension endpoint for the identity service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.gateway = gateway

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post(
        "/extensions",
        response_model=ExtensionResponse,
        response_model_exclude_none=True,
    )
    def handle_extension(envelope: JWSEnvelope, request: Request):
        """
        Verify and dispatch an extension call.

        Returns:
            200: Handler decision
            400: Malformed token or unknown extension point
            401: Token not signed by the service, or expired
            503: Signing key unavailable
        """
        extension_gateway: Optional[ExtensionGateway] = request.app.state.gateway
        if extension_gateway is None:
            raise HTTPException(503, "Service not initialized")

        try:
            return extension_gateway.process(envelope.jws)
        except KeyUnavailableError as e:
            logger.error(f"Could not fetch signing key: {e}")
            raise HTTPException(503, "Signing key unavailable")
        except TokenExpiredError:
            raise HTTPException(401, "Token expired")
        except (VerificationError, AuthError):
            raise HTTPException(401, "Invalid token signature")
        except (FormatError, DecodeError) as e:
            raise HTTPException(400, e.message)

    return app


app = create_app()


@click.command()
@click.option("--host", "host", default="0.0.0.0")
@click.option("--port", "port", default=8080)
@click.option("--log-level", "log_level", default="INFO")
def main(host: str, port: int, log_level: str):
    load_dotenv()
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=log_level.lower(),
        log_config=get_logging_config(log_level.upper()),
    )


if __name__ == "__main__":
    main()
