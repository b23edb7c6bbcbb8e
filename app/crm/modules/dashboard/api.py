from flask import Blueprint, jsonify

from app.crm.db import get_store
from app.crm.rbac import require_auth
from app.crm.stats import customer_growth, customer_stats, report_summary, task_stats

bp = Blueprint("dashboard", __name__)


@bp.get("/stats")
@require_auth
def stats():
    store = get_store()
    cs = customer_stats(store)
    ts = task_stats(store)
    return jsonify(
        {
            "totalCustomers": cs.total_customers,
            "activeCustomers": cs.active_customers,
            "monthlyNewCustomers": cs.monthly_new_customers,
            "pendingTasks": ts.pending_tasks,
            "completedTasks": ts.completed_tasks,
            "postponedTasks": ts.postponed_tasks,
        }
    )


@bp.get("/stats/customer-growth")
@require_auth
def stats_customer_growth():
    return jsonify(customer_growth(get_store()))


@bp.get("/stats/reports")
@require_auth
def stats_reports():
    return jsonify(report_summary(get_store()))
