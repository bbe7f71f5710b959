import logging

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from services.user_management.api.auth_router import router as auth_router
from services.user_management.api.admin_router import router as admin_router
from services.user_management.api.school_router import router as school_router
from services.assessment_management.api.assessment_router import router as assessment_router
from services.notification_management.api.notification_router import router as notification_router
from shared.config import CORS_ORIGINS, LOG_LEVEL
from shared.exceptions import AppError, app_error_handler

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Assessment Tracker Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)


@app.get("/")
def health_check():
    return {"status": "Assessment Tracker Backend is running ✅"}


app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(school_router)
app.include_router(assessment_router)
app.include_router(notification_router)
