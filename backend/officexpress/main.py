from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from officexpress.config import settings
from officexpress.middleware.exceptions import register_exception_handlers
from officexpress.routers import admin, auth, employees, health

app = FastAPI(
    title="OfficeXpress",
    description="Transport booking admin: employees, section permissions, admin navigation",
    version="0.1.0",
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
app.include_router(employees.router, prefix="/api/employees", tags=["employees"])
