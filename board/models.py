"""
Board Service Database Models
게시글, 댓글, 게시글 투표 데이터 구조입니다.
"""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import false, func, select, true
from sqlalchemy.orm import column_property
from datetime import datetime, timezone

db = SQLAlchemy()


def utc_now():
    """UTC 현재 시간 반환"""
    return datetime.now(timezone.utc)


def isoformat(value):
    return value.isoformat() if value else None


class PostVote(db.Model):
    """게시글 투표 (한 사용자당 한 게시글에 하나, negative=True면 비추천)"""
    __tablename__ = 'post_votes'

    post_id = db.Column(db.Integer, db.ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True)
    author = db.Column(db.Integer, primary_key=True)  # 인증 서비스 사용자 ID
    negative = db.Column(db.Boolean, nullable=False, default=False)


class Post(db.Model):
    """게시글 (expiration이 있으면 임시 게시글)"""
    __tablename__ = 'posts'
    __resource_name__ = 'post'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    author = db.Column(db.Integer, nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    ts = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now)
    expiration = db.Column(db.DateTime(timezone=True), nullable=True)

    # 투표 수는 post_votes에서 계산
    upvotes = column_property(
        select(func.count(PostVote.author))
        .where(PostVote.post_id == id, PostVote.negative == false())
        .correlate_except(PostVote)
        .scalar_subquery()
    )
    downvotes = column_property(
        select(func.count(PostVote.author))
        .where(PostVote.post_id == id, PostVote.negative == true())
        .correlate_except(PostVote)
        .scalar_subquery()
    )

    def to_dict(self, preview=None):
        """게시글 정보를 딕셔너리로 변환 (preview: 내용 최대 길이)"""
        content = self.content
        if preview is not None:
            content = content[:preview]
        return {
            "post_id": self.id,
            "author": self.author,
            "title": self.title,
            "content": content,
            "ts": isoformat(self.ts),
            "upvotes": self.upvotes or 0,
            "downvotes": self.downvotes or 0,
            "expiration": isoformat(self.expiration)
        }


class Comment(db.Model):
    """게시글 댓글"""
    __tablename__ = 'comments'
    __resource_name__ = 'comment'

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False, index=True)
    author = db.Column(db.Integer, nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    ts = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now)

    def to_dict(self):
        return {
            "comment_id": self.id,
            "post": self.post_id,
            "author": self.author,
            "content": self.content,
            "ts": isoformat(self.ts)
        }
