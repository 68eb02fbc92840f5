from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from referral_advisor.config import AppSettings, get_services
from referral_advisor.core.error_mapping import build_fallback_envelope
from referral_advisor.core.logging_utils import log_event

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_event(component="app", event="startup")
    get_services(app.state.settings)  # Trigger loading
    yield
    log_event(component="app", event="shutdown")


def _fallback_response(error: str, llm_status: str, llm_explanation: str) -> JSONResponse:
    # The boundary always answers 200 with an envelope-shaped body.
    return JSONResponse(
        status_code=200,
        content=build_fallback_envelope(
            error,
            llm_status=llm_status,
            llm_explanation=llm_explanation,
        ),
    )


def create_app(settings: AppSettings | None = None) -> FastAPI:
    resolved = settings or AppSettings.from_env()

    app = FastAPI(
        title="Referral Advisor API",
        description="Two-step genetic referral triage support (educational use only)",
        lifespan=lifespan,
    )
    app.state.settings = resolved

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(resolved.cors_allowed_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > resolved.max_body_bytes:
            log_event(
                component="http",
                event="body_too_large",
                level="WARNING",
                details={"content_length": int(declared), "limit": resolved.max_body_bytes},
            )
            return _fallback_response(
                "Request body too large.",
                "error",
                "Request body exceeded the size limit. Returning fallback response.",
            )
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        log_event(
            component="http",
            event="invalid_body",
            level="WARNING",
            details={"path": request.url.path, "errors": len(exc.errors())},
        )
        return _fallback_response(
            "Invalid JSON body (cannot parse).",
            "error",
            "Request body was not valid JSON. Returning fallback response.",
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log_event(
            component="http",
            event="unhandled_error",
            level="ERROR",
            details={"path": request.url.path, "error": str(exc)},
        )
        return _fallback_response(
            str(exc) or exc.__class__.__name__,
            "error",
            "Unhandled server error. Returning fallback response.",
        )

    return app
