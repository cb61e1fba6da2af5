from datetime import datetime

from app import db


class Friendship(db.Model):
    """
    One row per undirected friend edge. The pair is always stored with the
    smaller user id first, so each friendship has exactly one row.
    """
    __tablename__ = 'friendship'

    id = db.Column(db.Integer, primary_key=True)
    user_low_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    user_high_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user_low = db.relationship('User', foreign_keys=[user_low_id])
    user_high = db.relationship('User', foreign_keys=[user_high_id])

    __table_args__ = (
        db.UniqueConstraint('user_low_id', 'user_high_id', name='uq_friendship_pair'),
        db.CheckConstraint('user_low_id < user_high_id', name='ck_friendship_ordered'),
        db.Index('ix_friendship_user_high', 'user_high_id'),
    )

    @staticmethod
    def normalize(user_id, other_id):
        return (user_id, other_id) if user_id < other_id else (other_id, user_id)

    def other_id(self, user_id):
        return self.user_high_id if self.user_low_id == user_id else self.user_low_id

    def __repr__(self):
        return f'<Friendship {self.user_low_id} <-> {self.user_high_id}>'
