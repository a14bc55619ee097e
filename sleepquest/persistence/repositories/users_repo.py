# sleepquest/persistence/repositories/users_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select
from sleepquest.persistence.db import get_session
from sleepquest.persistence.errors import NotFoundError
from sleepquest.persistence.models import User

class UserRepository:
    def create(self, email: str, username: str | None = None, display_name: str | None = None) -> User:
        email = email.strip().lower()
        username = username or email.split("@")[0]
        with get_session() as s:
            u = User(email=email, username=username, display_name=display_name or username)
            s.add(u)
            s.flush(); s.refresh(u); s.expunge(u)
            return u

    def get(self, user_id: int) -> User:
        with get_session() as s:
            u = s.get(User, user_id)
            if not u:
                raise NotFoundError(f"Utilisateur introuvable: id={user_id}")
            s.expunge(u)
            return u

    def get_by_email(self, email: str) -> User | None:
        with get_session() as s:
            u = s.scalar(select(User).where(User.email == email.strip().lower()))
            if not u:
                return None
            s.expunge(u)
            return u

    def get_or_create(self, email: str, username: str | None = None, display_name: str | None = None) -> User:
        u = self.get_by_email(email)
        return u or self.create(email=email, username=username, display_name=display_name)

    def display_names(self, user_ids) -> dict:
        """{user_id: display_name} pour les ids connus."""
        ids = list(user_ids)
        if not ids:
            return {}
        with get_session() as s:
            rows = s.execute(select(User.id, User.display_name).where(User.id.in_(ids))).all()
            return {uid: name for uid, name in rows}
