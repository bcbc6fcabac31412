import os
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from models.audit_mixin import APP_TIMEZONE
from tasks.reconciliation_tasks import run_reconciliation_scan

RECONCILIATION_CRON_HOUR = int(os.getenv("RECONCILIATION_CRON_HOUR", "23"))

scheduler = BackgroundScheduler()

# Nightly receivable/payable scan across every tenant
scheduler.add_job(
    run_reconciliation_scan,
    CronTrigger(hour=RECONCILIATION_CRON_HOUR, minute=0, timezone=APP_TIMEZONE),
    id='reconciliation_scan_job'
)
