import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.auth.auth import auth_backend, fastapi_users
from src.config import DB_URI
from src.database.db import sessionmanager
from src.routing.partner import router as partner_routing, partner_tag_metadata
from src.routing.revenue import router as revenue_routing, revenue_tag_metadata
from src.utils.exceptions import BadRequestException, ValidationException, NotFoundException, DBException, \
    DBDuplicateException
from src.utils.loggers import logger

LOCATION_PREFIXES = ('body', 'query', 'path')


def error_content(message: str, errors=None):
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return content


def validation_errors(exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = [str(item) for item in error.get("loc", ()) if item not in LOCATION_PREFIXES]
        errors.append({"field": ".".join(location), "message": error.get("msg", "")})
    return errors


def init_app(dsn: str, tests: bool = False):
    sessionmanager.init(dsn, tests)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        logger.info('APP START')
        yield
        logger.info('APP SHUTDOWN')
        await sessionmanager.close()

    tags_metadata = [
        {
            "name": "auth",
            "description": 'Autentikasi pengguna.',
        },
        revenue_tag_metadata,
        partner_tag_metadata,
    ]

    app = FastAPI(
        title="Airport Revenue API",
        lifespan=lifespan,
        openapi_tags=tags_metadata,
        root_path="/api",
        docs_url="/doc",
        redoc_url=None,
        openapi_url="/openapi.json",
        swagger_ui_parameters={
            "defaultModelsExpandDepth": -1,
            "defaultModelExpandDepth": 4
        }
    )

    @app.get("/")
    async def read_root():
        return {"message": "Airport Revenue API"}

    app.include_router(revenue_routing)
    app.include_router(partner_routing)
    app.include_router(
        fastapi_users.get_auth_router(auth_backend),
        prefix="/auth/jwt",
        tags=["auth"],
    )

    for route in app.routes:
        if route.__dict__['path'] == '/auth/jwt/login':
            route.__dict__['summary'] = 'Masuk'

        if route.__dict__['path'] == '/auth/jwt/logout':
            route.__dict__['summary'] = 'Keluar'

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(request: Request, exc: ValidationException):
        return JSONResponse(
            status_code=400,
            content=error_content(exc.message, exc.errors),
        )

    @app.exception_handler(BadRequestException)
    async def bad_request_exception_handler(request: Request, exc: BadRequestException):
        return JSONResponse(
            status_code=400,
            content=error_content(exc.message),
        )

    @app.exception_handler(NotFoundException)
    async def not_found_exception_handler(request: Request, exc: NotFoundException):
        return JSONResponse(
            status_code=404,
            content=error_content(exc.message),
        )

    @app.exception_handler(DBDuplicateException)
    async def db_duplicate_exception_handler(request: Request, exc: DBDuplicateException):
        return JSONResponse(
            status_code=400,
            content=error_content(exc.message),
        )

    @app.exception_handler(DBException)
    async def db_exception_handler(request: Request, exc: DBException):
        return JSONResponse(
            status_code=500,
            content=error_content(exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = validation_errors(exc)
        logger.warning(f"{request.method} {request.url.path}: {errors}")
        return JSONResponse(
            status_code=400,
            content=error_content('Validation error', errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_content(str(exc.detail)),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path}: {exc!r}")
        logger.error(''.join(traceback.format_exception(exc)))
        return JSONResponse(
            status_code=500,
            content=error_content('Server error'),
        )

    return app


app = init_app(DB_URI)
