"""Per-bookmark tools: habits, todos, notes, comments, highlights, media,
code snippets and task lists.

Every route loads the parent bookmark through the scope before touching a
tool row, so a tool id alone never grants access.
"""

from __future__ import annotations

from flask import current_app, jsonify, request

from app.api import api_bp
from app.api.helpers import current_scope, json_payload, require_text
from app.extensions import db
from app.models import (
    BookmarkComment,
    CodeSnippet,
    CommentReply,
    Habit,
    HabitCheckIn,
    MediaItem,
    QuickNote,
    TaskList,
    TaskListItem,
    TodoItem,
    WebHighlight,
    utcnow,
)
from app.services.authorization import get_owned_bookmark_or_404, get_tool_or_404
from app.services.common import (
    clean_text,
    parse_choice,
    parse_date,
    parse_datetime,
    parse_int,
    to_bool,
)
from app.services.errors import Conflict
from app.services.security import api_auth_required


HABIT_FREQUENCIES = {"DAILY", "WEEKLY", "MONTHLY"}
TODO_PRIORITIES = {"LOW", "MEDIUM", "HIGH", "URGENT"}


def _set_optional_text(entity, payload: dict, fields) -> None:
    for field in fields:
        if field in payload:
            setattr(entity, field, clean_text(payload.get(field), field))


def _set_required_text(entity, payload: dict, fields) -> None:
    for field in fields:
        if field in payload:
            setattr(entity, field, require_text(payload, field))


def _set_non_blank(entity, payload: dict, fields) -> None:
    for field in fields:
        value = clean_text(payload.get(field), field)
        if value:
            setattr(entity, field, value)


def _next_order(model, bookmark_id: int) -> int:
    last = (
        model.query.filter_by(bookmark_id=bookmark_id)
        .order_by(model.order.desc())
        .first()
    )
    return (last.order + 1) if last else 0


def _delete_tool(model, bookmark_id: int, tool_id: int, entity_name: str):
    tool = get_tool_or_404(current_scope(), model, bookmark_id, tool_id, entity_name)
    db.session.delete(tool)
    db.session.commit()
    return jsonify({"status": "deleted"})


# Habits


@api_bp.route("/habits/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def habits_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    habits = (
        Habit.query.filter_by(bookmark_id=bookmark.id, is_active=True)
        .order_by(Habit.created_at.desc())
        .all()
    )
    limit = current_app.config["HABIT_CHECKIN_HISTORY_DAYS"]
    return jsonify({"items": [habit.as_dict(checkin_limit=limit) for habit in habits]})


@api_bp.route("/habits/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def habits_create(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    habit = Habit(
        bookmark_id=bookmark.id,
        name=require_text(payload, "name"),
        description=clean_text(payload.get("description"), "description"),
        color=clean_text(payload.get("color"), "color") or "#3B82F6",
        frequency=parse_choice(
            payload.get("frequency"), "frequency", HABIT_FREQUENCIES, default="DAILY"
        ),
        target_count=parse_int(payload.get("target_count"), "target_count", minimum=1)
        or 1,
    )
    db.session.add(habit)
    db.session.commit()
    return jsonify(habit.as_dict()), 201


@api_bp.route("/habits/<int:bookmark_id>/<int:habit_id>", methods=["PATCH"])
@api_auth_required
def habits_update(bookmark_id: int, habit_id: int):
    habit = get_tool_or_404(current_scope(), Habit, bookmark_id, habit_id, "habit")
    payload = json_payload()

    _set_required_text(habit, payload, ["name"])
    _set_optional_text(habit, payload, ["description"])
    _set_non_blank(habit, payload, ["color"])
    if "frequency" in payload:
        habit.frequency = parse_choice(
            payload.get("frequency"),
            "frequency",
            HABIT_FREQUENCIES,
            default=habit.frequency,
        )
    if "target_count" in payload:
        habit.target_count = (
            parse_int(payload.get("target_count"), "target_count", minimum=1)
            or habit.target_count
        )
    if "is_active" in payload:
        habit.is_active = to_bool(payload.get("is_active"))
    db.session.commit()
    return jsonify(habit.as_dict())


@api_bp.route("/habits/<int:bookmark_id>/<int:habit_id>", methods=["DELETE"])
@api_auth_required
def habits_delete(bookmark_id: int, habit_id: int):
    habit = get_tool_or_404(current_scope(), Habit, bookmark_id, habit_id, "habit")
    # Check-ins stay attached to the deactivated habit.
    habit.is_active = False
    db.session.commit()
    return jsonify({"status": "deactivated", "id": habit.id})


@api_bp.route("/habits/<int:bookmark_id>/<int:habit_id>/checkin", methods=["POST"])
@api_auth_required
def habits_checkin(bookmark_id: int, habit_id: int):
    """Create today's check-in, or toggle/update an existing one.

    With no row for the date a completed check-in with ``count=1`` is created.
    An existing row is toggled when ``completed`` is missing or null;
    otherwise the supplied values are applied.
    """
    habit = get_tool_or_404(current_scope(), Habit, bookmark_id, habit_id, "habit")
    payload = json_payload()
    day = parse_date(payload.get("date"), "date") or utcnow().date()
    count = parse_int(payload.get("count"), "count", minimum=0)

    checkin = HabitCheckIn.query.filter_by(habit_id=habit.id, date=day).first()
    if checkin is None:
        checkin = HabitCheckIn(
            habit_id=habit.id,
            date=day,
            completed=to_bool(payload.get("completed"), default=True),
            count=1 if count is None else count,
            note=clean_text(payload.get("note"), "note"),
        )
        db.session.add(checkin)
        status_code = 201
    else:
        if payload.get("completed") is not None:
            checkin.completed = to_bool(payload.get("completed"))
        else:
            checkin.completed = not checkin.completed
        if count is not None:
            checkin.count = count
        if "note" in payload:
            checkin.note = clean_text(payload.get("note"), "note")
        status_code = 200
    db.session.commit()
    return jsonify(checkin.as_dict()), status_code


# Todos


def _apply_todo_completion(todo: TodoItem, completed: bool) -> None:
    if completed and not todo.completed:
        todo.completed_at = utcnow()
    elif not completed:
        todo.completed_at = None
    todo.completed = completed


@api_bp.route("/todos/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def todos_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    todos = (
        TodoItem.query.filter_by(bookmark_id=bookmark.id)
        .order_by(TodoItem.order.asc(), TodoItem.created_at.asc())
        .all()
    )
    return jsonify({"items": [todo.as_dict() for todo in todos]})


@api_bp.route("/todos/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def todos_create(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    order = parse_int(payload.get("order"), "order", minimum=0)
    todo = TodoItem(
        bookmark_id=bookmark.id,
        title=require_text(payload, "title"),
        description=clean_text(payload.get("description"), "description"),
        priority=parse_choice(
            payload.get("priority"), "priority", TODO_PRIORITIES, default="MEDIUM"
        ),
        due_date=parse_datetime(payload.get("due_date"), "due_date"),
        order=_next_order(TodoItem, bookmark.id) if order is None else order,
    )
    _apply_todo_completion(todo, to_bool(payload.get("completed"), default=False))
    db.session.add(todo)
    db.session.commit()
    return jsonify(todo.as_dict()), 201


@api_bp.route("/todos/<int:bookmark_id>/<int:todo_id>", methods=["PATCH"])
@api_auth_required
def todos_update(bookmark_id: int, todo_id: int):
    todo = get_tool_or_404(current_scope(), TodoItem, bookmark_id, todo_id, "todo")
    payload = json_payload()

    _set_required_text(todo, payload, ["title"])
    _set_optional_text(todo, payload, ["description"])
    if "priority" in payload:
        todo.priority = parse_choice(
            payload.get("priority"), "priority", TODO_PRIORITIES, default=todo.priority
        )
    if "due_date" in payload:
        todo.due_date = parse_datetime(payload.get("due_date"), "due_date")
    if "order" in payload:
        order = parse_int(payload.get("order"), "order", minimum=0)
        if order is not None:
            todo.order = order
    if "completed" in payload:
        _apply_todo_completion(todo, to_bool(payload.get("completed")))
    db.session.commit()
    return jsonify(todo.as_dict())


@api_bp.route("/todos/<int:bookmark_id>/<int:todo_id>", methods=["DELETE"])
@api_auth_required
def todos_delete(bookmark_id: int, todo_id: int):
    todo = get_tool_or_404(current_scope(), TodoItem, bookmark_id, todo_id, "todo")
    TaskListItem.query.filter_by(todo_item_id=todo.id).delete()
    db.session.delete(todo)
    db.session.commit()
    return jsonify({"status": "deleted"})


# Quick notes


@api_bp.route("/quick-notes/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def quick_notes_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    notes = (
        QuickNote.query.filter_by(bookmark_id=bookmark.id)
        .order_by(QuickNote.updated_at.desc(), QuickNote.id.desc())
        .all()
    )
    return jsonify({"items": [note.as_dict() for note in notes]})


@api_bp.route("/quick-notes/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def quick_notes_create(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    note = QuickNote(
        bookmark_id=bookmark.id,
        title=clean_text(payload.get("title"), "title"),
        content=require_text(payload, "content"),
    )
    db.session.add(note)
    db.session.commit()
    return jsonify(note.as_dict()), 201


@api_bp.route("/quick-notes/<int:bookmark_id>/<int:note_id>", methods=["PATCH"])
@api_auth_required
def quick_notes_update(bookmark_id: int, note_id: int):
    note = get_tool_or_404(current_scope(), QuickNote, bookmark_id, note_id, "note")
    payload = json_payload()
    _set_optional_text(note, payload, ["title"])
    _set_required_text(note, payload, ["content"])
    db.session.commit()
    return jsonify(note.as_dict())


@api_bp.route("/quick-notes/<int:bookmark_id>/<int:note_id>", methods=["DELETE"])
@api_auth_required
def quick_notes_delete(bookmark_id: int, note_id: int):
    return _delete_tool(QuickNote, bookmark_id, note_id, "note")


# Comments


@api_bp.route("/comments/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def comments_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    query = BookmarkComment.query.filter_by(bookmark_id=bookmark.id)
    if not to_bool(request.args.get("showResolved"), default=False):
        query = query.filter(BookmarkComment.is_resolved.is_(False))
    comments = query.order_by(
        BookmarkComment.is_pinned.desc(), BookmarkComment.created_at.desc()
    ).all()
    return jsonify({"items": [comment.as_dict() for comment in comments]})


@api_bp.route("/comments/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def comments_create(bookmark_id: int):
    scope = current_scope()
    bookmark = get_owned_bookmark_or_404(scope, bookmark_id)
    payload = json_payload()
    comment = BookmarkComment(
        bookmark_id=bookmark.id,
        author_id=scope.principal_id,
        content=require_text(payload, "content"),
        is_pinned=to_bool(payload.get("is_pinned"), default=False),
    )
    db.session.add(comment)
    db.session.commit()
    return jsonify(comment.as_dict()), 201


@api_bp.route("/comments/<int:bookmark_id>/<int:comment_id>", methods=["PATCH"])
@api_auth_required
def comments_update(bookmark_id: int, comment_id: int):
    comment = get_tool_or_404(
        current_scope(), BookmarkComment, bookmark_id, comment_id, "comment"
    )
    payload = json_payload()
    _set_required_text(comment, payload, ["content"])
    for field in ["is_pinned", "is_resolved"]:
        if field in payload:
            setattr(comment, field, to_bool(payload.get(field)))
    db.session.commit()
    return jsonify(comment.as_dict())


@api_bp.route("/comments/<int:bookmark_id>/<int:comment_id>", methods=["DELETE"])
@api_auth_required
def comments_delete(bookmark_id: int, comment_id: int):
    return _delete_tool(BookmarkComment, bookmark_id, comment_id, "comment")


@api_bp.route(
    "/comments/<int:bookmark_id>/<int:comment_id>/replies", methods=["POST"]
)
@api_auth_required
def comments_reply(bookmark_id: int, comment_id: int):
    scope = current_scope()
    comment = get_tool_or_404(
        scope, BookmarkComment, bookmark_id, comment_id, "comment"
    )
    payload = json_payload()
    reply = CommentReply(
        comment_id=comment.id,
        author_id=scope.principal_id,
        content=require_text(payload, "content"),
    )
    db.session.add(reply)
    db.session.commit()
    return jsonify(reply.as_dict()), 201


# Highlights


@api_bp.route("/highlights/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def highlights_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    highlights = (
        WebHighlight.query.filter_by(bookmark_id=bookmark.id)
        .order_by(WebHighlight.created_at.desc())
        .all()
    )
    return jsonify({"items": [item.as_dict() for item in highlights]})


@api_bp.route("/highlights/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def highlights_create(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    highlight = WebHighlight(
        bookmark_id=bookmark.id,
        highlighted_text=require_text(payload, "highlighted_text", "highlighted text"),
        context=clean_text(payload.get("context"), "context"),
        personal_note=clean_text(payload.get("personal_note"), "personal_note"),
        color=clean_text(payload.get("color"), "color") or "#FCD34D",
        position=parse_int(payload.get("position"), "position"),
    )
    db.session.add(highlight)
    db.session.commit()
    return jsonify(highlight.as_dict()), 201


@api_bp.route("/highlights/<int:bookmark_id>/<int:highlight_id>", methods=["PATCH"])
@api_auth_required
def highlights_update(bookmark_id: int, highlight_id: int):
    highlight = get_tool_or_404(
        current_scope(), WebHighlight, bookmark_id, highlight_id, "highlight"
    )
    payload = json_payload()
    _set_required_text(highlight, payload, ["highlighted_text"])
    _set_optional_text(highlight, payload, ["context", "personal_note"])
    _set_non_blank(highlight, payload, ["color"])
    if "position" in payload:
        highlight.position = parse_int(payload.get("position"), "position")
    db.session.commit()
    return jsonify(highlight.as_dict())


@api_bp.route("/highlights/<int:bookmark_id>/<int:highlight_id>", methods=["DELETE"])
@api_auth_required
def highlights_delete(bookmark_id: int, highlight_id: int):
    return _delete_tool(WebHighlight, bookmark_id, highlight_id, "highlight")


# Media


@api_bp.route("/media/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def media_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    items = (
        MediaItem.query.filter_by(bookmark_id=bookmark.id)
        .order_by(MediaItem.created_at.desc())
        .all()
    )
    return jsonify({"items": [item.as_dict() for item in items]})


@api_bp.route("/media/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def media_create(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    item = MediaItem(
        bookmark_id=bookmark.id,
        name=require_text(payload, "name"),
        url=require_text(payload, "url"),
        media_type=clean_text(payload.get("media_type"), "media_type") or "file",
        size_bytes=parse_int(payload.get("size_bytes"), "size_bytes", minimum=0),
    )
    db.session.add(item)
    db.session.commit()
    return jsonify(item.as_dict()), 201


@api_bp.route("/media/<int:bookmark_id>/<int:media_id>", methods=["PATCH"])
@api_auth_required
def media_update(bookmark_id: int, media_id: int):
    item = get_tool_or_404(current_scope(), MediaItem, bookmark_id, media_id, "media")
    payload = json_payload()
    _set_required_text(item, payload, ["name", "url"])
    _set_non_blank(item, payload, ["media_type"])
    if "size_bytes" in payload:
        item.size_bytes = parse_int(payload.get("size_bytes"), "size_bytes", minimum=0)
    db.session.commit()
    return jsonify(item.as_dict())


@api_bp.route("/media/<int:bookmark_id>/<int:media_id>", methods=["DELETE"])
@api_auth_required
def media_delete(bookmark_id: int, media_id: int):
    return _delete_tool(MediaItem, bookmark_id, media_id, "media")


# Code snippets


@api_bp.route("/code-snippets/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def code_snippets_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    snippets = (
        CodeSnippet.query.filter_by(bookmark_id=bookmark.id)
        .order_by(CodeSnippet.created_at.desc())
        .all()
    )
    return jsonify({"items": [snippet.as_dict() for snippet in snippets]})


@api_bp.route("/code-snippets/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def code_snippets_create(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    snippet = CodeSnippet(
        bookmark_id=bookmark.id,
        title=require_text(payload, "title"),
        code=require_text(payload, "code"),
        language=clean_text(payload.get("language"), "language") or "javascript",
        description=clean_text(payload.get("description"), "description"),
        line_number=parse_int(payload.get("line_number"), "line_number", minimum=1),
    )
    db.session.add(snippet)
    db.session.commit()
    return jsonify(snippet.as_dict()), 201


@api_bp.route("/code-snippets/<int:bookmark_id>/<int:snippet_id>", methods=["PATCH"])
@api_auth_required
def code_snippets_update(bookmark_id: int, snippet_id: int):
    snippet = get_tool_or_404(
        current_scope(), CodeSnippet, bookmark_id, snippet_id, "code snippet"
    )
    payload = json_payload()
    _set_required_text(snippet, payload, ["title", "code"])
    _set_non_blank(snippet, payload, ["language"])
    _set_optional_text(snippet, payload, ["description"])
    if "line_number" in payload:
        snippet.line_number = parse_int(
            payload.get("line_number"), "line_number", minimum=1
        )
    db.session.commit()
    return jsonify(snippet.as_dict())


@api_bp.route(
    "/code-snippets/<int:bookmark_id>/<int:snippet_id>", methods=["DELETE"]
)
@api_auth_required
def code_snippets_delete(bookmark_id: int, snippet_id: int):
    return _delete_tool(CodeSnippet, bookmark_id, snippet_id, "code snippet")


# Task lists


@api_bp.route("/task-lists/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def task_lists_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    task_lists = (
        TaskList.query.filter_by(bookmark_id=bookmark.id)
        .order_by(TaskList.order.asc(), TaskList.created_at.asc())
        .all()
    )
    return jsonify({"items": [task_list.as_dict() for task_list in task_lists]})


@api_bp.route("/task-lists/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def task_lists_create(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    order = parse_int(payload.get("order"), "order", minimum=0)
    task_list = TaskList(
        bookmark_id=bookmark.id,
        name=require_text(payload, "name"),
        description=clean_text(payload.get("description"), "description"),
        color=clean_text(payload.get("color"), "color") or "#3B82F6",
        order=_next_order(TaskList, bookmark.id) if order is None else order,
    )
    db.session.add(task_list)
    db.session.commit()
    return jsonify(task_list.as_dict()), 201


@api_bp.route("/task-lists/<int:bookmark_id>/<int:list_id>", methods=["PATCH"])
@api_auth_required
def task_lists_update(bookmark_id: int, list_id: int):
    task_list = get_tool_or_404(
        current_scope(), TaskList, bookmark_id, list_id, "task list"
    )
    payload = json_payload()
    _set_required_text(task_list, payload, ["name"])
    _set_optional_text(task_list, payload, ["description"])
    _set_non_blank(task_list, payload, ["color"])
    if "order" in payload:
        order = parse_int(payload.get("order"), "order", minimum=0)
        if order is not None:
            task_list.order = order
    db.session.commit()
    return jsonify(task_list.as_dict())


@api_bp.route("/task-lists/<int:bookmark_id>/<int:list_id>", methods=["DELETE"])
@api_auth_required
def task_lists_delete(bookmark_id: int, list_id: int):
    return _delete_tool(TaskList, bookmark_id, list_id, "task list")


@api_bp.route("/task-lists/<int:bookmark_id>/<int:list_id>/items", methods=["POST"])
@api_auth_required
def task_lists_add_item(bookmark_id: int, list_id: int):
    scope = current_scope()
    task_list = get_tool_or_404(scope, TaskList, bookmark_id, list_id, "task list")
    payload = json_payload()
    todo_id = parse_int(payload.get("todo_item_id"), "todo_item_id")
    todo = get_tool_or_404(scope, TodoItem, bookmark_id, todo_id, "todo")

    if TaskListItem.query.filter_by(
        task_list_id=task_list.id, todo_item_id=todo.id
    ).first():
        raise Conflict("todo is already in this task list")

    order = parse_int(payload.get("order"), "order", minimum=0)
    if order is None:
        order = len(task_list.items)
    item = TaskListItem(task_list_id=task_list.id, todo_item_id=todo.id, order=order)
    db.session.add(item)
    db.session.commit()
    return jsonify(task_list.as_dict()), 201
