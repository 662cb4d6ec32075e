"""
LifeTune — Telegram Bot.

Telegram is the user interface: profile setup, habit logging, goals, the
life countdown and the AI coach are all plain commands. Handlers only parse
arguments, call the LifeDataManager / AdviceClient and format the reply.

Security-first: unauthorized users are silently ignored.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
)
from telegram.helpers import escape_markdown

from src.bot.display import (
    HABIT_DISPLAY,
    format_hours,
    format_remaining_time,
    format_value,
    parse_habit_type,
)
from src.config import settings
from src.core.habits import VALID_RANGES, HabitType
from src.core.prompts import build_chat_context

if TYPE_CHECKING:
    from src.core.life_manager import LifeDataManager, OperationResult
    from src.integrations.advice_client import AdviceClient

logger = logging.getLogger(__name__)

_COACH_UNAVAILABLE = "Sorry, the AI coach is unavailable right now. Please try again later."


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, None]],
) -> Callable[..., Coroutine[Any, Any, None]]:
    """Decorator that silently ignores messages from unauthorized users."""

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user = update.effective_user
        if user is None or user.id not in settings.ALLOWED_USER_IDS:
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return  # Silent ignore
        return await func(update, context)

    return wrapper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _manager(context: ContextTypes.DEFAULT_TYPE) -> LifeDataManager:
    return context.bot_data["manager"]


def _advice(context: ContextTypes.DEFAULT_TYPE) -> AdviceClient:
    return context.bot_data["advice"]


def _parse_date(text: str) -> datetime | None:
    """Parse YYYY-MM-DD into a UTC midnight datetime; None if malformed."""
    try:
        return datetime.strptime(text.strip(), "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _parse_number(text: str) -> float | None:
    try:
        return float(text.replace(",", ""))
    except ValueError:
        return None


def _failure_text(result: OperationResult) -> str:
    return f"⚠️ {result.error_message}"


def _persistence_note(result: OperationResult) -> str:
    if result.persistence_error is None:
        return ""
    return "\n(Saved in memory only: writing to disk failed.)"


def _habit_names() -> str:
    return ", ".join(t.value for t in HabitType)


def _md(text: str) -> str:
    """Escape user-typed text for legacy Markdown replies."""
    return escape_markdown(text, version=1)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message."""
    manager = _manager(context)
    intro = (
        "Welcome to *LifeTune*!\n\n"
        "Log your daily habits and watch your projected lifetime change.\n"
    )
    if manager.profile is None:
        intro += "\nStart with /setup <YYYY-MM-DD> <male|female|other> <country>."
    else:
        intro += "\nUse /log to record a habit, /timer to see your countdown."
    intro += "\nType /help for the full command list."
    await update.message.reply_text(intro, parse_mode="Markdown")


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "*Available commands:*\n"
        "/setup <YYYY-MM-DD> <gender> <country> — Create your profile\n"
        "/name <nickname> — Set your nickname\n"
        "/log <habit> <value> — Record a habit\n"
        "/timer — Remaining lifetime countdown\n"
        "/stats — Totals and recent records\n"
        "/addgoal <habit> <target> <YYYY-MM-DD> <title> — Add a goal\n"
        "/goals — List goals\n"
        "/progress <goal id> <value> — Update goal progress\n"
        "/advice — Today's advice from the AI coach\n"
        "/review — AI review of your goals\n"
        "/ask <question> — Ask the AI coach\n"
        "/reset — Delete all data\n\n"
        f"Habits: {_habit_names()}",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_setup(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /setup <birth date> <gender> <country> — create the profile."""
    args = context.args or []
    if len(args) < 3:
        await update.message.reply_text(
            "Usage: /setup <YYYY-MM-DD> <male|female|other> <country>\n"
            "Example: /setup 1990-04-01 female Japan"
        )
        return

    birth_date = _parse_date(args[0])
    if birth_date is None:
        await update.message.reply_text("Invalid birth date. Use the YYYY-MM-DD format.")
        return

    result = _manager(context).initialize_profile(
        birth_date=birth_date,
        gender=args[1].lower(),
        country=" ".join(args[2:]),
        nickname=update.effective_user.first_name or "",
    )
    if not result.success:
        await update.message.reply_text(_failure_text(result))
        return

    profile = result.value
    await update.message.reply_text(
        f"✅ Profile created. Baseline life expectancy: "
        f"*{profile.baseline_life_expectancy:.1f} years*."
        + _persistence_note(result),
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_name(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /name <nickname>."""
    nickname = " ".join(context.args or [])
    result = _manager(context).set_nickname(nickname)
    if not result.success:
        await update.message.reply_text(_failure_text(result))
        return
    await update.message.reply_text(
        f"✅ Nickname set to '{result.value.nickname}'." + _persistence_note(result)
    )


@authorized_only
async def cmd_log(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /log <habit> <value> — record a habit entry."""
    args = context.args or []
    if len(args) != 2:
        await update.message.reply_text(
            f"Usage: /log <habit> <value>\nHabits: {_habit_names()}"
        )
        return

    habit_type = parse_habit_type(args[0])
    if habit_type is None:
        await update.message.reply_text(f"Unknown habit '{args[0]}'. Habits: {_habit_names()}")
        return

    value = _parse_number(args[1])
    if value is None:
        low, high = VALID_RANGES[habit_type]
        await update.message.reply_text(f"Please enter a number between {low:g} and {high:g}.")
        return

    result = _manager(context).record_habit(habit_type, value)
    if not result.success:
        await update.message.reply_text(_failure_text(result))
        return

    entry = result.value
    display = HABIT_DISPLAY[habit_type]
    await update.message.reply_text(
        f"{display.emoji} {display.label}: {format_value(habit_type, value)} "
        f"→ {format_hours(entry.life_extension_hours)}"
        + _persistence_note(result)
    )


@authorized_only
async def cmd_timer(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /timer — show the remaining-lifetime countdown."""
    manager = _manager(context)
    remaining = manager.get_current_remaining_time()
    if remaining is None:
        await update.message.reply_text("No profile yet. Use /setup first.")
        return

    profile = manager.profile
    await update.message.reply_text(
        f"⏳ *{format_remaining_time(remaining)}* left\n"
        f"Projected life expectancy: {profile.current_life_expectancy:.4f} years "
        f"(baseline {profile.baseline_life_expectancy:.1f})",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /stats — totals, weekly/monthly counts and recent records."""
    manager = _manager(context)
    lines = [
        "*Statistics:*\n",
        f"Total life change: {format_hours(manager.total_life_extension_hours)}",
        f"Gained: {format_hours(manager.gained_hours)}  Lost: {format_hours(-manager.lost_hours)}",
        f"Records: {len(manager.habit_log)} "
        f"(week: {len(manager.weekly_improvements())}, "
        f"month: {len(manager.monthly_improvements())})",
        f"Goals: {len(manager.active_goals())} active, {len(manager.completed_goals())} completed",
    ]

    by_type = manager.improvements_by_type()
    if by_type:
        lines.append("\n*By habit:*")
        for habit_type, entries in by_type.items():
            hours = sum(e.life_extension_hours for e in entries)
            lines.append(
                f"{HABIT_DISPLAY[habit_type].emoji} {habit_type.value}: "
                f"{len(entries)} × → {format_hours(hours)}"
            )

    recent = manager.recent_improvements(5)
    if recent:
        lines.append("\n*Recent:*")
        for entry in reversed(recent):
            lines.append(
                f"• {entry.timestamp:%m-%d} {entry.habit_type.value} "
                f"{format_value(entry.habit_type, entry.raw_value)} "
                f"({format_hours(entry.life_extension_hours)})"
            )
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


@authorized_only
async def cmd_addgoal(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /addgoal <habit> <target> <YYYY-MM-DD> <title>."""
    args = context.args or []
    if len(args) < 4:
        await update.message.reply_text(
            "Usage: /addgoal <habit> <target> <YYYY-MM-DD> <title>\n"
            "Example: /addgoal steps 8000 2026-12-31 Walk every day"
        )
        return

    habit_type = parse_habit_type(args[0])
    if habit_type is None:
        await update.message.reply_text(f"Unknown habit '{args[0]}'. Habits: {_habit_names()}")
        return
    target = _parse_number(args[1])
    if target is None:
        await update.message.reply_text("The target must be a number.")
        return
    deadline = _parse_date(args[2])
    if deadline is None:
        await update.message.reply_text("Invalid deadline. Use the YYYY-MM-DD format.")
        return

    result = _manager(context).add_goal(" ".join(args[3:]), habit_type, target, deadline)
    if not result.success:
        await update.message.reply_text(_failure_text(result))
        return

    goal = result.value
    await update.message.reply_text(
        f"🎯 Goal added: *{_md(goal.title)}* ({format_value(habit_type, goal.target_value)} "
        f"by {goal.deadline:%Y-%m-%d})\nID: `{goal.id[:8]}`"
        + _persistence_note(result),
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_goals(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /goals — list active and completed goals."""
    manager = _manager(context)
    if not manager.goals:
        await update.message.reply_text("No goals yet. Add one with /addgoal.")
        return

    lines = ["*Goals:*\n"]
    for goal in manager.active_goals() + manager.completed_goals():
        mark = "✅" if goal.is_completed else "▫️"
        lines.append(
            f"{mark} `{goal.id[:8]}` {_md(goal.title)} — {int(goal.progress * 100)}% "
            f"({goal.current_value:g}/{goal.target_value:g}, due {goal.deadline:%Y-%m-%d})"
        )
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


@authorized_only
async def cmd_progress(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /progress <goal id> <value> — ids may be shortened to a prefix."""
    args = context.args or []
    if len(args) != 2:
        await update.message.reply_text("Usage: /progress <goal id> <value>\nUse /goals to see IDs.")
        return

    manager = _manager(context)
    matches = [g for g in manager.goals if g.id.startswith(args[0])]
    goal_id = matches[0].id if len(matches) == 1 else args[0]

    value = _parse_number(args[1])
    if value is None:
        await update.message.reply_text("The value must be a number.")
        return

    result = manager.update_goal_progress(goal_id, value)
    if not result.success:
        await update.message.reply_text(_failure_text(result))
        return

    goal = result.value
    status = "🎉 Completed!" if goal.is_completed else f"{int(goal.progress * 100)}% done"
    await update.message.reply_text(
        f"*{_md(goal.title)}*: {status}" + _persistence_note(result),
        parse_mode="Markdown",
    )


# ---------------------------------------------------------------------------
# AI coach
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_advice(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /advice — daily encouragement from the AI coach."""
    manager = _manager(context)
    if manager.profile is None:
        await update.message.reply_text("No profile yet. Use /setup first.")
        return
    try:
        text = await _advice(context).daily_advice(manager.profile, manager.habit_log)
    except Exception as exc:
        logger.error("/advice error: %s", exc)
        await update.message.reply_text(_COACH_UNAVAILABLE)
        return
    await update.message.reply_text(f"💬 {text}")


@authorized_only
async def cmd_review(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /review — AI review of goal progress."""
    manager = _manager(context)
    if not manager.goals:
        await update.message.reply_text("No goals to review yet. Add one with /addgoal.")
        return
    try:
        text = await _advice(context).request_goal_review(manager.goals, manager.habit_log)
    except Exception as exc:
        logger.error("/review error: %s", exc)
        await update.message.reply_text(_COACH_UNAVAILABLE)
        return
    await update.message.reply_text(f"💬 {text}")


@authorized_only
async def cmd_ask(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /ask <question> — free-form question to the AI coach."""
    question = " ".join(context.args or []).strip()
    if not question:
        await update.message.reply_text("Usage: /ask <question>")
        return

    manager = _manager(context)
    background = build_chat_context(
        manager.profile, manager.habit_log, datetime.now(timezone.utc),
    )
    try:
        text = await _advice(context).chat(question, background)
    except Exception as exc:
        logger.error("/ask error: %s", exc)
        await update.message.reply_text(_COACH_UNAVAILABLE)
        return
    await update.message.reply_text(f"💬 {text}")


# ---------------------------------------------------------------------------
# Reset (with confirmation)
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reset — ask for confirmation before wiping everything."""
    keyboard = [[
        InlineKeyboardButton("Delete everything", callback_data="reset:yes"),
        InlineKeyboardButton("Cancel", callback_data="reset:no"),
    ]]
    await update.message.reply_text(
        "This deletes your profile, all habit records and goals. Continue?",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


async def _handle_reset_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the inline confirm/cancel buttons of /reset."""
    query = update.callback_query
    await query.answer()

    user = query.from_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    if query.data != "reset:yes":
        await query.edit_message_text("Reset cancelled.")
        return

    result = _manager(context).reset_all()
    await query.edit_message_text("🗑 All data deleted." + _persistence_note(result))


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def build_app(
    manager: LifeDataManager | None = None,
    advice: AdviceClient | None = None,
) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        manager: Data manager. Defaults to one backed by the SQLite store.
        advice: Advice client. Defaults to one using the configured credentials.
    """
    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    if manager is None or advice is None:
        from src.data.db import KeyValueDB

        store = KeyValueDB()
        if manager is None:
            from src.core.life_manager import LifeDataManager

            manager = LifeDataManager(store)
            for error in manager.load_errors:
                logger.warning("Starting with partial data: %s", error)
        if advice is None:
            from src.adapters.credentials import create_credential_provider
            from src.integrations.advice_client import AdviceClient

            advice = AdviceClient(create_credential_provider(store))

    app.bot_data["manager"] = manager
    app.bot_data["advice"] = advice

    commands = {
        "start": cmd_start,
        "help": cmd_help,
        "setup": cmd_setup,
        "name": cmd_name,
        "log": cmd_log,
        "timer": cmd_timer,
        "stats": cmd_stats,
        "addgoal": cmd_addgoal,
        "goals": cmd_goals,
        "progress": cmd_progress,
        "advice": cmd_advice,
        "review": cmd_review,
        "ask": cmd_ask,
        "reset": cmd_reset,
    }
    for name, handler in commands.items():
        app.add_handler(CommandHandler(name, handler))
    app.add_handler(CallbackQueryHandler(_handle_reset_callback, pattern=r"^reset:(yes|no)$"))

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    token = settings.TELEGRAM_BOT_TOKEN
    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    logger.info("Starting LifeTune bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
