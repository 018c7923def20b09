import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from readme_generator import config, core, github, llm, models

logging.basicConfig(
    level=config.get_config().log_level.upper(),
    format="%(asctime)s %(levelname)s [%(module)s]: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
for _noisy in ("httpx", "openai"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


app = FastAPI(title="GitHub README Generator")


@app.exception_handler(github.ResolutionError)
async def resolution_error_handler(request: Request, exc: github.ResolutionError) -> JSONResponse:
    logger.error(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.message},
    )


@app.exception_handler(llm.LLMError)
async def llm_error_handler(request: Request, exc: llm.LLMError) -> JSONResponse:
    logger.error(f"LLM error: {exc}")
    return JSONResponse(
        status_code=502,
        content={"status": "error", "message": f"Failed to generate README: {exc}"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = "; ".join(
        f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in exc.errors()
    )
    return JSONResponse(
        status_code=422,
        content={"status": "error", "message": messages},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error")
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "An unknown error occurred during README generation."},
    )


@app.get("/")
async def root():
    return {
        "service": "GitHub README Generator",
        "usage": 'POST /generate with {"user_name": "owner", "repo_name": "repo", "prompt": "..."}',
        "docs": "/docs",
    }


@app.post(
    "/generate",
    response_model=models.ReadmeResponse,
    responses={
        403: {"model": models.ErrorResponse},
        404: {"model": models.ErrorResponse},
        422: {"model": models.ErrorResponse},
        429: {"model": models.ErrorResponse},
        502: {"model": models.ErrorResponse},
        504: {"model": models.ErrorResponse},
    },
)
async def generate(request: models.GenerateReadmeRequest) -> models.ReadmeResponse:
    return await core.generate_readme(request)
