# sleepquest/persistence/repositories/friends_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select, delete, and_, or_
from sleepquest.persistence.db import get_session
from sleepquest.persistence.errors import NotFoundError
from sleepquest.persistence.models import Friendship, User
from sleepquest.services.score_engine import ValidationError
import logging

logger = logging.getLogger(__name__)


class FriendRepository:
    """
    Liste d'amis persistée. L'amitié est symétrique : `add` crée les deux sens,
    `remove` les supprime tous les deux. Les deux opérations sont idempotentes.
    """

    def add(self, user_id: int, friend_id: int) -> None:
        if user_id == friend_id:
            raise ValidationError("Impossible de s'ajouter soi-même en ami")
        with get_session() as s:
            for uid in (user_id, friend_id):
                if s.get(User, uid) is None:
                    raise NotFoundError(f"Utilisateur introuvable: id={uid}")

            existing = set(s.execute(
                select(Friendship.user_id, Friendship.friend_id).where(or_(
                    and_(Friendship.user_id == user_id, Friendship.friend_id == friend_id),
                    and_(Friendship.user_id == friend_id, Friendship.friend_id == user_id),
                ))
            ).all())
            for a, b in ((user_id, friend_id), (friend_id, user_id)):
                if (a, b) not in existing:
                    s.add(Friendship(user_id=a, friend_id=b))
        logger.info("Amitié ajoutée user=%s friend=%s", user_id, friend_id)

    def remove(self, user_id: int, friend_id: int) -> None:
        with get_session() as s:
            s.execute(delete(Friendship).where(or_(
                and_(Friendship.user_id == user_id, Friendship.friend_id == friend_id),
                and_(Friendship.user_id == friend_id, Friendship.friend_id == user_id),
            )))
        logger.info("Amitié supprimée user=%s friend=%s", user_id, friend_id)

    def list_friend_ids(self, user_id: int) -> list[int]:
        """Ids des amis, dans l'ordre d'ajout."""
        with get_session() as s:
            return list(s.scalars(
                select(Friendship.friend_id)
                .where(Friendship.user_id == user_id)
                .order_by(Friendship.id)
            ))
