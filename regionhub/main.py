# regionhub/main.py
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

from regionhub.config import settings
from regionhub.database import init_db
from regionhub.utils.errors import InternalError, ServiceError, ValidationFailed

from regionhub.routes.auth import router as auth_router
from regionhub.routes.admin import router as admin_router
from regionhub.routes.logs import router as logs_router
from regionhub.routes.addresses import router as addresses_router
from regionhub.routes.vendors import router as vendors_router
from regionhub.routes.products import router as products_router
from regionhub.routes.stock import router as stock_router
from regionhub.routes.reviews import router as reviews_router
from regionhub.routes.cart import router as cart_router
from regionhub.routes.orders import router as orders_router
from regionhub.routes.delivery import router as delivery_router
from regionhub.routes.complaints import router as complaints_router
from regionhub.routes.reports import router as reports_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("regionhub")

init_db()

app = FastAPI(title="RegionHub API", version="1.0.0")

# Uploaded photos and proof documents
upload_path = Path(settings.UPLOAD_DIR)
upload_path.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(upload_path)), name="uploads")

# CORS Configuration
origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every failure leaves the API as {"kind", "message", "errors"}
@app.exception_handler(ServiceError)
def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.setdefault(".".join(loc) or "request", err.get("msg", "Invalid value"))
    error = ValidationFailed("Invalid request", errors)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(SQLAlchemyError)
def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    error = InternalError("Internal storage error")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(logs_router)
app.include_router(addresses_router)
app.include_router(vendors_router)
app.include_router(products_router)
app.include_router(stock_router)
app.include_router(reviews_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(delivery_router)
app.include_router(complaints_router)
app.include_router(reports_router)


@app.get("/")
def read_root():
    return {"message": "RegionHub API is running"}
