from typing import Any, Dict

from ..db import db
from .base import iso, new_id, utcnow

FRIEND_STATUSES = ("pending", "accepted", "blocked")


class Friend(db.Model):
    """
    Freundschaftsbeziehung als eine Zeile.
    pending/blocked sind gerichtet: user_id hat angefragt bzw. blockiert.
    """

    __tablename__ = "friend"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(
        db.String(36), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    friend_id = db.Column(
        db.String(36), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = db.Column(db.String(10), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("status IN ('pending', 'accepted', 'blocked')", name="ck_friend_status"),
    )

    user = db.relationship("User", foreign_keys=[user_id])
    friend = db.relationship("User", foreign_keys=[friend_id])

    def other(self, user_id: str) -> str:
        return self.friend_id if self.user_id == user_id else self.user_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "friend_id": self.friend_id,
            "status": self.status,
            "created_at": iso(self.created_at),
        }
