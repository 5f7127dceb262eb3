from flask import current_app, jsonify
from flask_jwt_extended import get_jwt_identity, get_jwt

from library_ledger.extensions import jwt


def current_identity():
    """(user_id, role) of the verified bearer token."""
    user_id = int(get_jwt_identity())
    role = (get_jwt() or {}).get("role")
    return user_id, role


def json_error(code: str, message: str, status: int):
    return jsonify({"success": False, "error": code, "message": message}), status


def _unauthenticated(message: str):
    return json_error("unauthenticated", message, 401)


@jwt.unauthorized_loader
def _missing_token(reason):
    return _unauthenticated("Unauthorized")


@jwt.invalid_token_loader
def _invalid_token(reason):
    current_app.logger.info(f"[auth] invalid token: {reason}")
    return _unauthenticated("Invalid token")


@jwt.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    return _unauthenticated("Token has expired")
