from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from library_ledger.errors import LedgerError
from library_ledger.repositories.borrow_repo import BorrowRepo
from library_ledger.services.lending_service import LendingService
from library_ledger.utils.auth import current_identity
from library_ledger.utils.clock import utcnow
from library_ledger.utils.decorators import role_required
from library_ledger.utils.serializers import active_loan_json, record_json
from library_ledger.utils.validation import id_field, json_object

borrow_bp = Blueprint("borrow", __name__)


def _book_id_from_body() -> int:
    return id_field(json_object(), "book_id")


@borrow_bp.post("/")
@jwt_required()
def borrow_book():
    user_id, _role = current_identity()
    try:
        book_id = _book_id_from_body()
        r = LendingService.borrow_book(user_id, book_id)
        return jsonify({"success": True, "data": record_json(r)}), 201
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code


@borrow_bp.post("/return")
@jwt_required()
def return_book():
    user_id, _role = current_identity()
    try:
        book_id = _book_id_from_body()
        r = LendingService.return_book(user_id, book_id)
        return jsonify({"success": True, "data": record_json(r)})
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code


@borrow_bp.get("/my")
@jwt_required()
def my_borrows():
    user_id, _role = current_identity()
    now = utcnow()
    rows = LendingService.active_loans(user_id)
    return jsonify({"success": True, "data": [active_loan_json(r, b, now) for r, b in rows]})


@borrow_bp.get("/")
@jwt_required()
@role_required("admin")
def all_borrows_admin_only():
    records = BorrowRepo.list_all()
    return jsonify({"success": True, "data": [record_json(r) for r in records]})
