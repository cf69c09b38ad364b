"""Prompt Enhancer HTTP service.

Exposes the enhancement operation over HTTP:

- GET  /health       liveness probe
- POST /api/enhance  {"prompt": "..."} -> enhanced prompt
"""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from prompt_enhancer import __app_name__, __version__
from prompt_enhancer.config.schema import CompletionConfig, EnhancerConfig
from prompt_enhancer.enhancement.errors import EnhancementError
from prompt_enhancer.enhancement.openai_enhancer import (
    PromptEnhancer,
    create_enhancer_from_config,
    pin_api_key,
    preview,
    resolve_api_key,
)
from prompt_enhancer.enhancement.result import iso_timestamp
from prompt_enhancer.enhancement.validation import validate_prompt

from .schemas import EnhanceRequest, EnhanceResponse, ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

EnhancerFactory = Callable[[CompletionConfig], PromptEnhancer]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def create_app(
    config: Optional[EnhancerConfig] = None,
    enhancer_factory: EnhancerFactory = create_enhancer_from_config,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration. Defaults are used if omitted.
        enhancer_factory: Builds a PromptEnhancer from completion settings.
            Called per request so every request is handled independently;
            the API key is resolved once when the app is built.
    """
    config = config or EnhancerConfig()
    completion = pin_api_key(config.completion)
    base_url = f"http://localhost:{config.service.port}"

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(f"{__app_name__} service running on {base_url}")
        logger.info(f"Health check: {base_url}/health")
        logger.info(f"Enhancement endpoint: {base_url}/api/enhance")

        if resolve_api_key(completion.api_key, completion.api_key_helper, completion.api_key_env_var):
            logger.info("OpenAI API key configured")
        else:
            logger.warning(
                f"WARNING: no API key configured (set {completion.api_key_env_var or 'api_key'}). "
                "Please set it before making enhancement requests."
            )
        yield
        logger.info("Shutting down server gracefully...")

    app = FastAPI(
        title=__app_name__,
        description="Rewrites rough prompts into clear, structured prompts using an LLM.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.service.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request: Request, _exc: RequestValidationError):
        return error_response(400, "Prompt is required and must be a string")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
        # Unknown paths and wrong methods both mean "no such endpoint"
        if exc.status_code in (404, 405):
            return error_response(404, "Endpoint not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception):
        logger.error(f"Unhandled error: {exc}", exc_info=exc)
        return error_response(500, "Internal server error")

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(timestamp=iso_timestamp())

    @app.post(
        "/api/enhance",
        response_model=EnhanceResponse,
        responses={400: {"model": ErrorResponse}, 408: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def enhance(body: EnhanceRequest):
        # Validation and configuration are settled before any network call
        try:
            prompt = validate_prompt(body.prompt)
            enhancer = enhancer_factory(completion)
            try:
                enhanced = enhancer.enhance(prompt)
            finally:
                enhancer.close()
        except EnhancementError as e:
            if e.http_status >= 500:
                logger.error(f"Enhancement error: {e.category.value}: {e.message}")
            else:
                logger.info(f"Rejected request: {e.message}")
            return error_response(e.http_status, e.message)

        logger.debug(f'Enhanced "{preview(prompt, 40)}" -> "{preview(enhanced, 40)}"')
        return EnhanceResponse(
            enhanced_prompt=enhanced,
            original_prompt=prompt,
            timestamp=iso_timestamp(),
        )

    return app


def run_server(config: EnhancerConfig) -> None:
    """Run the service with uvicorn until interrupted."""
    import uvicorn

    app = create_app(config)
    logger.info(f"Starting {__app_name__} service at {config.service.host}:{config.service.port}")
    uvicorn.run(
        app,
        host=config.service.host,
        port=config.service.port,
        log_level=config.log_level.lower(),
    )
