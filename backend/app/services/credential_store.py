"""Persistence access for user credentials."""
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, defer

from app.errors import ConflictError
from app.models.user import User
from app.services.passwords import get_password_hash

logger = logging.getLogger(__name__)


class UserRepository:
    """Lookups and writes against the users table.

    Writes come in two flavours. A full write loads the user and assigns
    attributes through the ORM, so identifier normalization runs and a
    ``password`` field is hashed before it is stored. A relaxed write issues a
    single UPDATE straight at the table and skips all of that; token rotation
    uses it.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: str, sanitized: bool = False) -> User | None:
        """Get a user by id; ``sanitized`` leaves the secret columns unloaded."""
        query = self.db.query(User).filter(User.id == user_id)
        if sanitized:
            query = query.options(defer(User.password_hash), defer(User.refresh_token))
        return query.first()

    def find_by_username_or_email(
        self,
        username: str | None = None,
        email: str | None = None,
    ) -> User | None:
        """Get the first user matching either identifier."""
        conditions = []
        if username:
            conditions.append(User.username == username.strip().lower())
        if email:
            conditions.append(User.email == email.strip().lower())
        if not conditions:
            return None
        return self.db.query(User).filter(or_(*conditions)).first()

    def create(
        self,
        *,
        username: str,
        email: str,
        full_name: str,
        password: str,
        avatar: str,
        cover_image: str = "",
    ) -> User:
        """Insert a new user and commit.

        Raises ConflictError when username or email is already taken.
        """
        user = User(
            username=username,
            email=email,
            full_name=full_name.strip(),
            avatar=avatar,
            cover_image=cover_image or "",
            password_hash=get_password_hash(password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(f"Rejected duplicate registration for {user.username}")
            raise ConflictError("User with given username or email already exists") from exc
        self.db.refresh(user)
        return user

    def update_fields(self, user_id: str, relaxed: bool = False, **fields) -> bool:
        """Update columns on one user. Returns False if no such user.

        Does not commit; call ``commit`` once the surrounding operation is done.
        """
        # Relaxed writes never hash, so they only accept raw columns
        allowed = set(User.__table__.columns.keys())
        if not relaxed:
            allowed.add("password")
        unknown = [key for key in fields if key not in allowed]
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(unknown)}")

        if relaxed:
            matched = (
                self.db.query(User)
                .filter(User.id == user_id)
                .update(fields, synchronize_session="fetch")
            )
            return matched > 0

        user = self.find_by_id(user_id)
        if user is None:
            return False
        if "password" in fields:
            fields["password_hash"] = get_password_hash(fields.pop("password"))
        for key, value in fields.items():
            setattr(user, key, value)
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("User with given username or email already exists") from exc
        return True

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
