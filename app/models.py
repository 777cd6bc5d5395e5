import hashlib
import secrets
from datetime import datetime, timezone

from flask_login import UserMixin
from sqlalchemy.orm import declared_attr
from werkzeug.security import check_password_hash, generate_password_hash

from app.extensions import db, login_manager


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


bookmark_tags = db.Table(
    "bookmark_tags",
    db.Column(
        "bookmark_id", db.Integer, db.ForeignKey("bookmarks.id"), primary_key=True
    ),
    db.Column("tag_id", db.Integer, db.ForeignKey("tags.id"), primary_key=True),
)

bookmark_categories = db.Table(
    "bookmark_categories",
    db.Column(
        "bookmark_id", db.Integer, db.ForeignKey("bookmarks.id"), primary_key=True
    ),
    db.Column(
        "category_id", db.Integer, db.ForeignKey("categories.id"), primary_key=True
    ),
)


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    companies = db.relationship(
        "Company", backref="owner", lazy=True, order_by="Company.created_at"
    )
    bookmarks = db.relationship("Bookmark", backref="user", lazy=True)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def as_public_dict(self):
        return {"id": self.id, "name": self.name, "email": self.email}


@login_manager.user_loader
def load_user(user_id: str):
    return db.session.get(User, int(user_id))


class ApiToken(db.Model):
    __tablename__ = "api_tokens"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    name = db.Column(db.String(120), nullable=False)
    token_hash = db.Column(db.String(128), nullable=False, unique=True)
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    user = db.relationship("User", backref="api_tokens")

    @staticmethod
    def issue_token(prefix="ld"):
        token = f"{prefix}_{secrets.token_urlsafe(32)}"
        token_hash = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return token, token_hash


class Company(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    logo = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        db.UniqueConstraint("owner_id", "name", name="uq_company_owner_name"),
    )

    def as_dict(self, counts=None):
        payload = {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "logo": self.logo,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if counts is not None:
            payload["counts"] = counts
        return payload


class CategoryFolder(db.Model):
    __tablename__ = "category_folders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    categories = db.relationship("Category", backref="folder", lazy=True)

    __table_args__ = (
        db.UniqueConstraint("user_id", "name", name="uq_category_folder_user_name"),
    )

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "category_count": len(self.categories),
            "created_at": self.created_at.isoformat(),
        }


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    company_id = db.Column(
        db.Integer, db.ForeignKey("companies.id"), nullable=True, index=True
    )
    folder_id = db.Column(
        db.Integer, db.ForeignKey("category_folders.id"), nullable=True, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    color = db.Column(db.String(32), nullable=False, default="#3B82F6")
    icon = db.Column(db.String(64), nullable=False, default="folder")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "icon": self.icon,
            "folder_id": self.folder_id,
            "company_id": self.company_id,
            "bookmark_count": len(self.bookmarks),
        }


class Tag(db.Model):
    __tablename__ = "tags"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    company_id = db.Column(
        db.Integer, db.ForeignKey("companies.id"), nullable=True, index=True
    )
    name = db.Column(db.String(64), nullable=False)
    color = db.Column(db.String(32), nullable=False, default="#10B981")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint(
            "user_id", "company_id", "name", name="uq_tag_user_company_name"
        ),
    )

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "company_id": self.company_id,
            "bookmark_count": len(self.bookmarks),
        }


class Bookmark(db.Model):
    __tablename__ = "bookmarks"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    company_id = db.Column(
        db.Integer, db.ForeignKey("companies.id"), nullable=True, index=True
    )

    title = db.Column(db.String(512), nullable=False)
    url = db.Column(db.Text, nullable=False)
    normalized_url = db.Column(db.Text, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    favicon = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    priority = db.Column(db.String(16), nullable=False, default="MEDIUM")
    is_favorite = db.Column(db.Boolean, nullable=False, default=False)

    total_visits = db.Column(db.Integer, nullable=False, default=0)
    time_spent = db.Column(db.Integer, nullable=False, default=0)
    engagement_score = db.Column(db.Integer, nullable=False, default=0)
    last_visited = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    tags = db.relationship("Tag", secondary=bookmark_tags, backref="bookmarks")
    categories = db.relationship(
        "Category", secondary=bookmark_categories, backref="bookmarks"
    )
    history = db.relationship(
        "BookmarkHistory",
        backref="bookmark",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="BookmarkHistory.created_at.desc()",
    )

    __table_args__ = (
        db.Index("ix_bookmark_user_company", "user_id", "company_id"),
    )

    def as_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "normalized_url": self.normalized_url,
            "description": self.description,
            "favicon": self.favicon,
            "notes": self.notes,
            "priority": self.priority,
            "is_favorite": self.is_favorite,
            "company_id": self.company_id,
            "categories": [
                {"id": category.id, "name": category.name}
                for category in self.categories
            ],
            "tags": [{"id": tag.id, "name": tag.name} for tag in self.tags],
            "visit_count": self.total_visits,
            "time_spent": self.time_spent,
            "engagement_score": self.engagement_score,
            "last_visited": _iso(self.last_visited),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class BookmarkHistory(db.Model):
    __tablename__ = "bookmark_history"

    id = db.Column(db.Integer, primary_key=True)
    bookmark_id = db.Column(
        db.Integer, db.ForeignKey("bookmarks.id"), nullable=False, index=True
    )
    action = db.Column(db.String(32), nullable=False)
    details = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "action": self.action,
            "details": self.details,
            "created_at": self.created_at.isoformat(),
        }


class DailyAnalytics(db.Model):
    __tablename__ = "daily_analytics"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    date = db.Column(db.Date, nullable=False)
    total_visits = db.Column(db.Integer, nullable=False, default=0)
    bookmarks_viewed = db.Column(db.Integer, nullable=False, default=0)
    time_spent = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="uq_analytics_user_date"),
    )

    def as_dict(self):
        return {
            "date": self.date.isoformat(),
            "total_visits": self.total_visits,
            "bookmarks_viewed": self.bookmarks_viewed,
            "time_spent": self.time_spent,
        }


class BookmarkShare(db.Model):
    __tablename__ = "bookmark_shares"

    id = db.Column(db.Integer, primary_key=True)
    bookmark_id = db.Column(
        db.Integer, db.ForeignKey("bookmarks.id"), nullable=False, index=True
    )
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    shared_with_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    permission = db.Column(db.String(16), nullable=False, default="VIEW")
    message = db.Column(db.Text, nullable=True)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    bookmark = db.relationship(
        "Bookmark",
        backref=db.backref("shares", cascade="all, delete-orphan"),
    )
    owner = db.relationship("User", foreign_keys=[owner_id])
    shared_with = db.relationship("User", foreign_keys=[shared_with_id])

    __table_args__ = (
        db.UniqueConstraint(
            "bookmark_id", "shared_with_id", name="uq_share_bookmark_recipient"
        ),
    )

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "owner_id": self.owner_id,
            "shared_with_id": self.shared_with_id,
            "permission": self.permission,
            "message": self.message,
            "expires_at": _iso(self.expires_at),
            "created_at": self.created_at.isoformat(),
        }


class BookmarkToolMixin:
    """Rows that hang off a bookmark and carry no owner of their own."""

    @declared_attr
    def bookmark_id(cls):
        return db.Column(
            db.Integer, db.ForeignKey("bookmarks.id"), nullable=False, index=True
        )

    @declared_attr
    def bookmark(cls):
        return db.relationship("Bookmark")


class Habit(BookmarkToolMixin, db.Model):
    __tablename__ = "habits"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    color = db.Column(db.String(32), nullable=False, default="#3B82F6")
    frequency = db.Column(db.String(16), nullable=False, default="DAILY")
    target_count = db.Column(db.Integer, nullable=False, default=1)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    checkins = db.relationship(
        "HabitCheckIn",
        backref="habit",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="HabitCheckIn.date.desc()",
    )

    def as_dict(self, checkin_limit=None):
        checkins = self.checkins
        if checkin_limit is not None:
            checkins = checkins[:checkin_limit]
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "frequency": self.frequency,
            "target_count": self.target_count,
            "is_active": self.is_active,
            "checkins": [checkin.as_dict() for checkin in checkins],
            "created_at": self.created_at.isoformat(),
        }


class HabitCheckIn(db.Model):
    __tablename__ = "habit_checkins"

    id = db.Column(db.Integer, primary_key=True)
    habit_id = db.Column(
        db.Integer, db.ForeignKey("habits.id"), nullable=False, index=True
    )
    date = db.Column(db.Date, nullable=False)
    completed = db.Column(db.Boolean, nullable=False, default=True)
    count = db.Column(db.Integer, nullable=False, default=1)
    note = db.Column(db.Text, nullable=True)

    __table_args__ = (
        db.UniqueConstraint("habit_id", "date", name="uq_checkin_habit_date"),
    )

    def as_dict(self):
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "date": self.date.isoformat(),
            "completed": self.completed,
            "count": self.count,
            "note": self.note,
        }


class TodoItem(BookmarkToolMixin, db.Model):
    __tablename__ = "todo_items"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(512), nullable=False)
    description = db.Column(db.Text, nullable=True)
    priority = db.Column(db.String(16), nullable=False, default="MEDIUM")
    due_date = db.Column(db.DateTime(timezone=True), nullable=True)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "due_date": _iso(self.due_date),
            "completed": self.completed,
            "completed_at": _iso(self.completed_at),
            "order": self.order,
            "created_at": self.created_at.isoformat(),
        }


class QuickNote(BookmarkToolMixin, db.Model):
    __tablename__ = "quick_notes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(512), nullable=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "title": self.title,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class BookmarkComment(BookmarkToolMixin, db.Model):
    __tablename__ = "bookmark_comments"

    id = db.Column(db.Integer, primary_key=True)
    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_pinned = db.Column(db.Boolean, nullable=False, default=False)
    is_resolved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    replies = db.relationship(
        "CommentReply",
        backref="comment",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="CommentReply.created_at.asc()",
    )

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "author_id": self.author_id,
            "content": self.content,
            "is_pinned": self.is_pinned,
            "is_resolved": self.is_resolved,
            "replies": [reply.as_dict() for reply in self.replies],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class CommentReply(db.Model):
    __tablename__ = "comment_replies"

    id = db.Column(db.Integer, primary_key=True)
    comment_id = db.Column(
        db.Integer, db.ForeignKey("bookmark_comments.id"), nullable=False, index=True
    )
    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "comment_id": self.comment_id,
            "author_id": self.author_id,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }


class WebHighlight(BookmarkToolMixin, db.Model):
    __tablename__ = "web_highlights"

    id = db.Column(db.Integer, primary_key=True)
    highlighted_text = db.Column(db.Text, nullable=False)
    context = db.Column(db.Text, nullable=True)
    personal_note = db.Column(db.Text, nullable=True)
    color = db.Column(db.String(32), nullable=False, default="#FCD34D")
    position = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "highlighted_text": self.highlighted_text,
            "context": self.context,
            "personal_note": self.personal_note,
            "color": self.color,
            "position": self.position,
            "created_at": self.created_at.isoformat(),
        }


class MediaItem(BookmarkToolMixin, db.Model):
    __tablename__ = "media_items"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(512), nullable=False)
    url = db.Column(db.Text, nullable=False)
    media_type = db.Column(db.String(64), nullable=False, default="file")
    size_bytes = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "name": self.name,
            "url": self.url,
            "media_type": self.media_type,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at.isoformat(),
        }


class CodeSnippet(BookmarkToolMixin, db.Model):
    __tablename__ = "code_snippets"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(512), nullable=False)
    code = db.Column(db.Text, nullable=False)
    language = db.Column(db.String(64), nullable=False, default="javascript")
    description = db.Column(db.Text, nullable=True)
    line_number = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "title": self.title,
            "code": self.code,
            "language": self.language,
            "description": self.description,
            "line_number": self.line_number,
            "created_at": self.created_at.isoformat(),
        }


class TaskList(BookmarkToolMixin, db.Model):
    __tablename__ = "task_lists"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    color = db.Column(db.String(32), nullable=False, default="#3B82F6")
    order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    items = db.relationship(
        "TaskListItem",
        backref="task_list",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="TaskListItem.order.asc()",
    )

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "order": self.order,
            "items": [item.as_dict() for item in self.items],
            "created_at": self.created_at.isoformat(),
        }


class TaskListItem(db.Model):
    __tablename__ = "task_list_items"

    id = db.Column(db.Integer, primary_key=True)
    task_list_id = db.Column(
        db.Integer, db.ForeignKey("task_lists.id"), nullable=False, index=True
    )
    todo_item_id = db.Column(
        db.Integer, db.ForeignKey("todo_items.id"), nullable=False, index=True
    )
    order = db.Column(db.Integer, nullable=False, default=0)

    todo_item = db.relationship("TodoItem")

    def as_dict(self):
        return {
            "id": self.id,
            "order": self.order,
            "todo_item": self.todo_item.as_dict(),
        }


class NotificationSchedule(BookmarkToolMixin, db.Model):
    __tablename__ = "notification_schedules"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    reminder_date = db.Column(db.DateTime(timezone=True), nullable=False)
    reminder_time = db.Column(db.String(5), nullable=False)
    frequency = db.Column(db.String(16), nullable=False, default="ONCE")
    notify_via = db.Column(db.JSON, nullable=False, default=lambda: ["app"])
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    history = db.relationship(
        "NotificationHistory",
        backref="schedule",
        lazy=True,
        cascade="all, delete-orphan",
    )

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "title": self.title,
            "description": self.description,
            "reminder_date": self.reminder_date.isoformat(),
            "reminder_time": self.reminder_time,
            "frequency": self.frequency,
            "notify_via": list(self.notify_via or []),
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
        }


class NotificationHistory(db.Model):
    __tablename__ = "notification_history"

    id = db.Column(db.Integer, primary_key=True)
    schedule_id = db.Column(
        db.Integer,
        db.ForeignKey("notification_schedules.id"),
        nullable=False,
        index=True,
    )
    channel = db.Column(db.String(32), nullable=False, default="app")
    status = db.Column(db.String(32), nullable=False, default="sent")
    message = db.Column(db.Text, nullable=True)
    sent_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "schedule_id": self.schedule_id,
            "schedule_title": self.schedule.title,
            "channel": self.channel,
            "status": self.status,
            "message": self.message,
            "sent_at": self.sent_at.isoformat(),
        }


class NotificationPreference(BookmarkToolMixin, db.Model):
    __tablename__ = "notification_preferences"

    id = db.Column(db.Integer, primary_key=True)
    email_enabled = db.Column(db.Boolean, nullable=False, default=True)
    app_enabled = db.Column(db.Boolean, nullable=False, default=True)
    push_enabled = db.Column(db.Boolean, nullable=False, default=False)
    quiet_hours_start = db.Column(db.String(5), nullable=True)
    quiet_hours_end = db.Column(db.String(5), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("bookmark_id", name="uq_notification_pref_bookmark"),
    )

    def as_dict(self):
        return {
            "id": self.id,
            "bookmark_id": self.bookmark_id,
            "email_enabled": self.email_enabled,
            "app_enabled": self.app_enabled,
            "push_enabled": self.push_enabled,
            "quiet_hours_start": self.quiet_hours_start,
            "quiet_hours_end": self.quiet_hours_end,
        }
