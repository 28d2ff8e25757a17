import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.errors import BucketError
from app.core.logging_config import setup_logging
from app.routes import bucket_routes, image_routes

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.API_TITLE)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["Content-Type"],
)

app.include_router(bucket_routes.router)
app.include_router(image_routes.router)

@app.exception_handler(BucketError)
async def bucket_error_handler(request: Request, exc: BucketError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "INVALID_REQUEST", "message": "Malformed request body or query."},
    )

@app.get("/api/health")
def health():
    return {"ok": True}

def run():
    import uvicorn

    setup_logging(settings.LOG_LEVEL)
    logger.info("[image-sort] server running on http://localhost:%s", settings.PORT)
    logger.info("[image-sort] IMAGE_ROOT=%s", settings.IMAGE_ROOT or "(not set)")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())

if __name__ == "__main__":
    run()
