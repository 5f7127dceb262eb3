from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from library_ledger.errors import LedgerError
from library_ledger.services.book_service import BookService
from library_ledger.utils.decorators import role_required
from library_ledger.utils.serializers import book_json
from library_ledger.utils.validation import MAX_ID, json_object

book_bp = Blueprint("books", __name__)


@book_bp.get("/")
def list_books():
    books = BookService.list_books(
        search=request.args.get("search"),
        category=request.args.get("category"),
    )
    return jsonify({"success": True, "data": [book_json(b) for b in books]})


@book_bp.get("/categories")
def list_categories():
    return jsonify({"success": True, "data": BookService.list_categories()})


@book_bp.get(f"/<int(max={MAX_ID}):book_id>")
def get_book(book_id: int):
    try:
        b = BookService.get_book(book_id)
        return jsonify({"success": True, "data": book_json(b)})
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code


@book_bp.post("/")
@jwt_required()
@role_required("admin")
def create_book():
    try:
        b = BookService.create_book(json_object())
        return jsonify({"success": True, "data": book_json(b)}), 201
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
