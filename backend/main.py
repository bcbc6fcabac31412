from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()
from fastapi.middleware.cors import CORSMiddleware
from database import Base, engine
from datetime import datetime
import os
import models  # noqa: F401  registers every table on Base.metadata
import routers.companies as companies
import routers.accounts as accounts
import routers.products as products
import routers.sales_orders as sales_orders
import routers.purchase_orders as purchase_orders
import routers.invoices as invoices
import routers.bills as bills
import routers.receipts as receipts
import routers.payments as payments
import routers.credit_notes as credit_notes
import routers.debit_notes as debit_notes
import routers.journal_entry as journal_entry
import routers.financial_reports as financial_reports
import routers.intercompany as intercompany
import logging
from fastapi.openapi.utils import get_openapi


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = logging.DEBUG if APP_ENV == "development" else logging.INFO
LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True) # Create 'logs' directory if it doesn't exist

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE, # Log to a file
    filemode='a' # Append to the file if it exists
)

# Also log to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(LOG_LEVEL)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler) # Add to the root logger

logger = logging.getLogger(__name__)
logger.info(f"Application starting up ({APP_ENV})...")
# --- End Logging Configuration ---


# Create database tables
Base.metadata.create_all(bind=engine)


app = FastAPI()


allowed_origins_str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"
)

# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(',')]

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Intercompany Accounting API",
        version="1.0.0",
        description="Multi-company ledger with intercompany order, invoice and payment flows",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "TenantHeader": {
            "type": "apiKey",
            "in": "header",
            "name": "X-Tenant-ID",
        }
    }
    # Every endpoint is scoped by tenant
    openapi_schema["security"] = [{"TenantHeader": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(companies.router, prefix="/api")
app.include_router(accounts.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(sales_orders.router, prefix="/api")
app.include_router(purchase_orders.router, prefix="/api")
app.include_router(invoices.router, prefix="/api")
app.include_router(bills.router, prefix="/api")
app.include_router(receipts.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
app.include_router(credit_notes.router, prefix="/api")
app.include_router(debit_notes.router, prefix="/api")
app.include_router(journal_entry.router, prefix="/api")
app.include_router(financial_reports.router, prefix="/api")
app.include_router(intercompany.router, prefix="/api")

@app.on_event("startup")
def start_scheduler():
    if os.getenv("ENABLE_SCHEDULER", "false").lower() in ("1", "true", "yes"):
        from scheduler import scheduler
        scheduler.start()
        logger.info("Nightly reconciliation scheduler started.")

@app.on_event("shutdown")
def stop_scheduler():
    from scheduler import scheduler
    if scheduler.running:
        scheduler.shutdown(wait=False)

@app.get("/")
async def test_route():
    return {"message": "Welcome to the Intercompany Accounting API!"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=APP_ENV == "development")
