"""
Chronos — Telegram Bot.

Telegram is the only user interface. Every interaction (registering
activities, marking them done, stats, backups and the AI coach) flows
through this bot into a single TaskSession.

Security-first: unauthorized users are silently ignored.
"""

from __future__ import annotations

import io
import logging
from functools import wraps
from typing import Any, Callable, Coroutine

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from chronos.bot.views import (
    format_activity,
    format_dashboard,
    format_timeline,
    md,
    parse_add_args,
)
from chronos.config import settings
from chronos.core.advisor import RESET, get_advice
from chronos.core.clock import today_in
from chronos.core.persistence import MSG_IMPORT_OK, BackupImportError, backup_filename
from chronos.core.session import TaskSession
from chronos.data.models import CATEGORIES

logger = logging.getLogger(__name__)

_MAX_BUTTON_LABEL = 32


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, None]],
) -> Callable[..., Coroutine[Any, Any, None]]:
    """Decorator that silently ignores messages from unauthorized users.

    Does NOT send any response to strangers — the bot must not reveal
    its existence to unauthorized users.
    """

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user = update.effective_user
        if user is None or user.id not in settings.ALLOWED_USER_IDS:
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return  # Silent ignore
        return await func(update, context)

    return wrapper


def _session(context: ContextTypes.DEFAULT_TYPE) -> TaskSession:
    return context.bot_data["session"]


def _timeline_keyboard(session: TaskSession) -> InlineKeyboardMarkup | None:
    """One row per task: toggle button with the title, delete button."""
    tasks = session.timeline()
    if not tasks:
        return None
    rows = []
    for task in tasks:
        label = task.title
        if len(label) > _MAX_BUTTON_LABEL:
            label = label[: _MAX_BUTTON_LABEL - 1] + "…"
        rows.append([
            InlineKeyboardButton(f"✔ {label}", callback_data=f"toggle:{task.id}"),
            InlineKeyboardButton("🗑", callback_data=f"delete:{task.id}"),
        ])
    return InlineKeyboardMarkup(rows)


def _timeline_text(session: TaskSession) -> str:
    today = today_in(session.tz_name)
    return format_timeline(session.timeline(), today, session.tz_name)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message."""
    await update.message.reply_text(
        "Welcome to *Chronos* — your precision routine engine.\n\n"
        "• Use /add to register a one-off or daily activity\n"
        "• Use /tasks to see your timeline and mark activities done\n"
        "• Use /stats and /graph to review your consistency\n"
        "• Send any message to talk to the AI coach\n\n"
        "Type /help for the full command list.",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "*Available commands:*\n"
        "/add title | YYYY-MM-DD HH:MM | [daily|normal] | [low|medium|high] | [category]\n"
        f"    categories: {', '.join(CATEGORIES)}\n"
        "/tasks — Timeline with done/delete buttons\n"
        "/stats — Efficiency and per-category stats\n"
        "/graph — Activity over the last 24 weeks\n"
        "/export — Download a backup file\n"
        "Send a .json backup file to import it (replaces all activities)\n"
        "/reset — Restart the coach conversation\n"
        "/help — Show this message",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add — register an activity from pipe-separated fields."""
    session = _session(context)
    args_text = update.message.text.partition(" ")[2]

    draft = parse_add_args(args_text)
    if draft is None:
        await update.message.reply_text(
            "Usage: /add title | YYYY-MM-DD HH:MM | [daily|normal] | [priority] | [category]"
        )
        return

    task = session.add(draft)
    if task is None:
        await update.message.reply_text(
            "Couldn't register that activity. Check the title and the time "
            "(e.g. 2025-03-01 09:30)."
        )
        return

    await update.message.reply_text(
        f"✅ Registered *{md(task.title)}* "
        f"({task.task_type.value}, {task.priority.value}, {md(task.category)}).",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_tasks(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /tasks — show the timeline with toggle/delete buttons."""
    session = _session(context)
    await update.message.reply_text(
        _timeline_text(session),
        parse_mode="Markdown",
        reply_markup=_timeline_keyboard(session),
    )


@authorized_only
async def cmd_stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /stats — efficiency, consistency and per-category numbers."""
    session = _session(context)
    await update.message.reply_text(format_dashboard(session.dashboard()), parse_mode="Markdown")


@authorized_only
async def cmd_graph(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /graph — the 24-week activity matrix."""
    session = _session(context)
    await update.message.reply_text(format_activity(session.activity()), parse_mode="Markdown")


@authorized_only
async def cmd_export(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export — send the backup document as a file."""
    session = _session(context)
    payload = session.export_backup().encode("utf-8")
    await update.message.reply_document(
        document=io.BytesIO(payload),
        filename=backup_filename(),
        caption=f"Backup of {len(session.tasks)} activities.",
    )


@authorized_only
async def cmd_reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reset — restart the coach conversation."""
    await update.message.reply_text(RESET)


# ---------------------------------------------------------------------------
# Callback handlers
# ---------------------------------------------------------------------------


async def _handle_task_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Handle the inline toggle/delete buttons under the timeline."""
    query = update.callback_query
    await query.answer()

    # Verify the user is authorized
    user = query.from_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    action, _, task_id = query.data.partition(":")
    session = _session(context)

    if action == "toggle":
        changed = session.toggle(task_id)
    else:
        changed = session.delete(task_id)

    if changed is None:
        logger.info("%s callback for unknown task %s", action, task_id)

    try:
        await query.edit_message_text(
            _timeline_text(session),
            parse_mode="Markdown",
            reply_markup=_timeline_keyboard(session),
        )
    except TelegramError as exc:
        # Raised when the rendered timeline did not change
        logger.debug("Timeline not re-rendered: %s", exc)


# ---------------------------------------------------------------------------
# Message handlers
# ---------------------------------------------------------------------------


@authorized_only
async def handle_document(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle an uploaded backup file — replaces every activity on success."""
    session = _session(context)
    doc = update.message.document

    try:
        tg_file = await context.bot.get_file(doc.file_id)
        data = await tg_file.download_as_bytearray()
    except TelegramError as exc:
        logger.error("Backup download failed: %s", exc)
        await update.message.reply_text("Couldn't download that file. Please try again.")
        return

    try:
        count = session.import_backup(bytes(data))
    except BackupImportError as exc:
        await update.message.reply_text(str(exc))
        return

    await update.message.reply_text(f"{MSG_IMPORT_OK} ({count} activities)")


@authorized_only
async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages — ask the AI coach."""
    session = _session(context)
    prompt = update.message.text or ""
    if not prompt.strip():
        return

    thinking_msg = await update.message.reply_text("Thinking...")
    advice = await get_advice(prompt, session.tasks)
    await update.message.reply_text(advice)
    try:
        await thinking_msg.delete()
    except TelegramError as exc:
        logger.debug("Couldn't delete placeholder message: %s", exc)


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def build_app(session: TaskSession | None = None) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        session: Task session to serve. Defaults to one backed by the
                 SQLite store at DATABASE_PATH.
    """
    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    if session is None:
        from chronos.core.persistence import PersistenceGateway
        from chronos.data.db import KeyValueDB

        gateway = PersistenceGateway(KeyValueDB())
        session = TaskSession.open(gateway, tz_name=settings.TIMEZONE)

    app.bot_data["session"] = session

    # Commands
    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("add", cmd_add))
    app.add_handler(CommandHandler("tasks", cmd_tasks))
    app.add_handler(CommandHandler("stats", cmd_stats))
    app.add_handler(CommandHandler("graph", cmd_graph))
    app.add_handler(CommandHandler("export", cmd_export))
    app.add_handler(CommandHandler("reset", cmd_reset))
    app.add_handler(CallbackQueryHandler(_handle_task_callback, pattern=r"^(toggle|delete):"))

    # Backup uploads
    app.add_handler(MessageHandler(filters.Document.ALL, handle_document))

    # Text messages (non-command) go to the coach
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))

    logger.info(
        "Telegram bot application built with %d handlers, %d tasks loaded",
        len(app.handlers[0]), len(session.tasks),
    )
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Chronos bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
