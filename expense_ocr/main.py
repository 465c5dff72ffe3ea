import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from expense_ocr import __version__
from expense_ocr.config import settings
from expense_ocr.routers import analyze, currency

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Receipt analysis for expense reimbursement",
    version=__version__
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


app.include_router(analyze.router)
app.include_router(currency.router)
