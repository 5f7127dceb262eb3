from library_ledger.models.user import User
from library_ledger.extensions import db


class UserRepo:
    @staticmethod
    def get_by_email(email: str):
        return User.query.filter_by(email=email).first()

    @staticmethod
    def get_by_id(user_id: int):
        return db.session.get(User, user_id)

    @staticmethod
    def list_by_role(role: str):
        return User.query.filter_by(role=role).all()

    @staticmethod
    def create(user: User):
        db.session.add(user)
        db.session.commit()
        return user
