from werkzeug.security import generate_password_hash, check_password_hash
from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError

from library_ledger.errors import EmailTaken, InvalidCredentials, ValidationError
from library_ledger.extensions import db
from library_ledger.models.user import User, ROLE_USER, ROLE_ADMIN
from library_ledger.repositories.user_repo import UserRepo
from library_ledger.utils.clock import utcnow


class AuthService:
    @staticmethod
    def register(name: str, email: str, password: str, role: str = ROLE_USER):
        if not name or not email or not password:
            raise ValidationError("Missing required fields")
        if role not in (ROLE_USER, ROLE_ADMIN):
            raise ValidationError(f"Unknown role: {role}")

        email = email.lower()
        if UserRepo.get_by_email(email):
            raise EmailTaken()

        user = User(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            created_at=utcnow(),
        )
        try:
            UserRepo.create(user)
        except IntegrityError:
            db.session.rollback()
            raise EmailTaken()

        current_app.logger.info(f"[auth] registered user={user.id} role={user.role}")
        return user

    @staticmethod
    def login(email: str, password: str):
        user = UserRepo.get_by_email((email or "").lower())
        if not user or not check_password_hash(user.password_hash, password or ""):
            current_app.logger.info("[auth] failed login attempt")
            raise InvalidCredentials()

        token = AuthService.issue_token(user)
        return token, user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "name": user.name}
        )
