from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from library_ledger.errors import LedgerError, ValidationError
from library_ledger.services.auth_service import AuthService
from library_ledger.repositories.user_repo import UserRepo
from library_ledger.models.user import ROLE_USER
from library_ledger.utils.auth import current_identity, json_error
from library_ledger.utils.serializers import user_json
from library_ledger.utils.validation import json_object, text_field

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register", endpoint="auth_register")
def register():
    try:
        data = json_object()
        name = text_field(data, "name")
        email = text_field(data, "email")
        password = text_field(data, "password")

        if not name or not email or not password:
            raise ValidationError("Missing required fields")

        user = AuthService.register(
            name=name,
            email=email,
            password=password,
            role=ROLE_USER  # never taken from the request
        )
        return jsonify({"success": True, "data": user_json(user)}), 201
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code


@auth_bp.post("/login", endpoint="auth_login")
def login():
    try:
        data = json_object()
        token, user = AuthService.login(
            text_field(data, "email"),
            text_field(data, "password")
        )
        return jsonify({
            "success": True,
            "access_token": token,
            "user": user_json(user)
        })
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code


@auth_bp.get("/me", endpoint="auth_me")
@jwt_required()
def me():
    user_id, role = current_identity()
    user = UserRepo.get_by_id(user_id)
    if not user:
        return json_error("unauthenticated", "Unknown user", 401)

    data = user_json(user)
    data["role"] = role or user.role
    data["borrowed_book_ids"] = sorted(user.borrowed_book_ids)
    return jsonify({"success": True, "data": data})
