from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from library_ledger.services.lending_service import LendingService
from library_ledger.services.notification_service import NotificationService
from library_ledger.services.reporting_service import ReportingService
from library_ledger.utils.clock import utcnow
from library_ledger.utils.decorators import role_required
from library_ledger.utils.serializers import overdue_loan_json

admin_bp = Blueprint("admin", __name__)


@admin_bp.get("/overdue")
@jwt_required()
@role_required("admin")
def overdue_books():
    now = utcnow()
    rows = LendingService.overdue_loans(now)
    return jsonify({"success": True, "data": [overdue_loan_json(r, b, u, now) for r, b, u in rows]})


@admin_bp.get("/analytics")
@jwt_required()
@role_required("admin")
def analytics():
    return jsonify({"success": True, "data": ReportingService.analytics()})


@admin_bp.get("/notifications")
@jwt_required()
@role_required("admin")
def notifications():
    return jsonify({"success": True, "data": NotificationService.notifications()})
