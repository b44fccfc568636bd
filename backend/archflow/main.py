from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .routers import analysis, codes, exports
from . import config
import logging
from datetime import datetime

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ArchFlow Layout Analysis API",
    version="1.0.0",
    description="Performance metrics, building-code compliance and CAD export for floor plan layouts"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global error handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": jsonable_errors(exc),
            "message": "Validation error - please check your input"
        }
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "message": "An internal error occurred. Please try again later.",
            "error": str(exc) if config.ENVIRONMENT == "development" else "Internal server error"
        }
    )

def jsonable_errors(exc: RequestValidationError):
    # validator ValueErrors land in 'ctx' as exception objects
    errors = []
    for error in exc.errors():
        error = dict(error)
        if 'ctx' in error:
            error['ctx'] = {k: str(v) for k, v in error['ctx'].items()}
        errors.append(error)
    return errors

# Include routers
app.include_router(analysis.router)
app.include_router(codes.router)
app.include_router(exports.router)

@app.get("/")
async def root():
    return {
        "message": "ArchFlow Layout Analysis API",
        "version": "1.0.0",
        "status": "running",
        "environment": config.ENVIRONMENT
    }

@app.get("/health")
async def health():
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}
