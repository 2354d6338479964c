"""
Club Ledger: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

import logging

from fastapi import FastAPI

from club_ledger.config import get_settings
from club_ledger.api.health import router as health_router
from club_ledger.api.members import router as members_router
from club_ledger.api.transactions import router as transactions_router
from club_ledger.api.reports import router as reports_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Member credit ledger: balances, adjustments, reconciliation",
    debug=settings.DEBUG,
)

# Register routers
app.include_router(health_router)
app.include_router(members_router)
app.include_router(transactions_router)
app.include_router(reports_router)
