"""Telegram transport — draws the habit screen as one message with buttons.

This is the default transport. Requires TELEGRAM_BOT_TOKEN in .env.

Each chat has at most one live screen message. Store mutations mark the
transport dirty; after every handled update the live screens are edited in
place to match the store.
"""

import logging
from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import BadRequest, TelegramError
from telegram.ext import (
    Application, CallbackQueryHandler, CommandHandler, MessageHandler,
    ContextTypes, filters,
)

from streakly import config
from streakly.db import get_updated_at
from streakly.errors import StorageError
from streakly.stats import summary
from streakly.store import HabitStore
from streakly.transport import Transport
from streakly.view import (
    Screen, page_count, parse_action, render_add_prompt, render_confirm_delete, render_screen,
)

log = logging.getLogger(__name__)

_NOT_OWNER = "Sorry, this is a personal habit tracker."


def _markup(screen: Screen) -> InlineKeyboardMarkup | None:
    if not screen.buttons:
        return None
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(b.label, callback_data=b.data) for b in row]
        for row in screen.buttons
    ])


def _is_owner(user_id: int) -> bool:
    """Check if user_id matches the configured owner, claiming ownership if unset."""
    if not config.OWNER_USER_ID:
        config.set_owner_user_id(user_id)
        log.info("Owner auto-detected: user_id=%d", user_id)
        return True
    return user_id == config.OWNER_USER_ID


class TelegramTransport(Transport):
    """Telegram Bot API transport."""

    def __init__(self, store: HabitStore):
        self._store = store
        self._app: Application | None = None
        self._screens: dict[int, int] = {}     # chat_id -> message_id
        self._pages: dict[int, int] = {}       # chat_id -> page shown
        self._awaiting_name: set[int] = set()  # chats with the "New Habit" prompt open
        self._dirty = False
        store.subscribe(self._on_store_change)

    @property
    def name(self) -> str:
        return "telegram"

    async def start(self) -> None:
        if not config.TELEGRAM_BOT_TOKEN:
            log.warning("TELEGRAM_BOT_TOKEN not set, Telegram transport disabled")
            return

        self._app = Application.builder().token(config.TELEGRAM_BOT_TOKEN).build()

        # Register handlers
        self._app.add_handler(CommandHandler("start", self._cmd_start))
        self._app.add_handler(CommandHandler("help", self._cmd_help))
        self._app.add_handler(CommandHandler("add", self._cmd_add))
        self._app.add_handler(CommandHandler("cancel", self._cmd_cancel))
        self._app.add_handler(CommandHandler("stats", self._cmd_stats))
        self._app.add_handler(CallbackQueryHandler(self._handle_callback))
        self._app.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_message)
        )

        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling(drop_pending_updates=True)
        log.info("Telegram transport started")

    async def stop(self) -> None:
        self._store.unsubscribe(self._on_store_change)
        if self._app:
            await self._app.updater.stop()
            await self._app.stop()
            await self._app.shutdown()
            log.info("Telegram transport stopped")

    async def send_screen(self, chat_id: int) -> None:
        if not self._app:
            log.warning("Telegram not started, cannot send screen")
            return
        screen = self._render(chat_id)
        try:
            message = await self._app.bot.send_message(
                chat_id=chat_id,
                text=screen.text,
                reply_markup=_markup(screen),
            )
        except TelegramError as e:
            log.error("Failed to send habit screen: %s", e)
            return
        self._screens[chat_id] = message.message_id

    async def refresh(self) -> None:
        """Re-render every live screen from current store state."""
        for chat_id, message_id in list(self._screens.items()):
            await self._edit(chat_id, message_id, self._render(chat_id))

    # ── Rendering helpers ─────────────────────────────────────

    def _render(self, chat_id: int) -> Screen:
        screen = render_screen(self._store.habits, self._store.today(), self._pages.get(chat_id, 0))
        self._pages[chat_id] = screen.page
        return screen

    def _on_store_change(self, store: HabitStore) -> None:
        self._dirty = True

    async def _flush(self) -> None:
        if not self._dirty:
            return
        self._dirty = False
        await self.refresh()

    async def _edit(self, chat_id: int, message_id: int, screen: Screen) -> None:
        if not self._app:
            return
        try:
            await self._app.bot.edit_message_text(
                chat_id=chat_id,
                message_id=message_id,
                text=screen.text,
                reply_markup=_markup(screen),
            )
        except BadRequest as e:
            if "not modified" in str(e).lower():
                return
            log.warning("Could not update screen in chat %d: %s", chat_id, e)
            self._screens.pop(chat_id, None)
        except TelegramError as e:
            log.error("Failed to edit Telegram message: %s", e)

    # ── Handlers ──────────────────────────────────────────────

    async def _cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            await update.message.reply_text(_NOT_OWNER)
            return
        await self.send_screen(update.effective_chat.id)

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(
            "Track daily habits and keep your streaks going.\n\n"
            "Tap a day to mark it done (tap again to undo).\n\n"
            "Commands:\n"
            "/start — Show your habits\n"
            "/add <name> — Add a habit\n"
            "/cancel — Close the new habit prompt\n"
            "/stats — Today's summary\n"
            "/help — This message"
        )

    async def _cmd_add(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            await update.message.reply_text(_NOT_OWNER)
            return
        chat_id = update.effective_chat.id
        name = " ".join(context.args or [])
        if not name.strip():
            self._awaiting_name.add(chat_id)
            prompt = render_add_prompt()
            if chat_id in self._screens:
                await self._edit(chat_id, self._screens[chat_id], prompt)
            else:
                # The prompt becomes this chat's screen once the habit is added
                message = await update.message.reply_text(prompt.text, reply_markup=_markup(prompt))
                self._screens[chat_id] = message.message_id
            return
        await self._add_habit(chat_id, name)

    async def _cmd_cancel(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            return
        chat_id = update.effective_chat.id
        if chat_id in self._awaiting_name:
            self._awaiting_name.discard(chat_id)
            self._dirty = True
            await update.message.reply_text("Cancelled.")
        await self._flush()

    async def _cmd_stats(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not _is_owner(update.effective_user.id):
            return
        text = summary(self._store.habits, self._store.today()) or "No habits yet."
        try:
            saved_at = get_updated_at(config.STORAGE_KEY)
        except StorageError as e:
            log.warning("Could not read save time: %s", e)
            saved_at = None
        if saved_at:
            text += f"\nLast saved: {saved_at[:16].replace('T', ' ')}"
        await update.message.reply_text(text)

    async def _handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not update.message or not update.message.text:
            return
        if not _is_owner(update.effective_user.id):
            await update.message.reply_text(_NOT_OWNER)
            return

        chat_id = update.effective_chat.id
        if chat_id not in self._awaiting_name:
            await update.message.reply_text("Use /add <name> to add a habit, or /start to see your habits.")
            return

        if not update.message.text.strip():
            await update.message.reply_text("Habit name can't be empty.")
            return
        await self._add_habit(chat_id, update.message.text)

    async def _handle_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        if not _is_owner(update.effective_user.id):
            await query.answer(_NOT_OWNER)
            return
        await query.answer()

        chat_id = query.message.chat_id
        message_id = query.message.message_id
        self._screens[chat_id] = message_id

        action = parse_action(query.data)
        if action is None:
            log.warning("Unknown callback data: %r", query.data)
            return

        if action.kind == "toggle":
            if self._store.toggle(action.habit_id, action.day) is None:
                self._dirty = True  # stale screen, redraw it
        elif action.kind == "ask_delete":
            habit = self._store.get(action.habit_id)
            if habit is None:
                self._dirty = True
            else:
                # Dialog replaces the screen until Delete or Cancel
                await self._edit(chat_id, message_id, render_confirm_delete(habit))
                return
        elif action.kind == "delete":
            if not self._store.remove(action.habit_id):
                self._dirty = True
        elif action.kind == "page":
            self._pages[chat_id] = action.page
            self._dirty = True
        elif action.kind == "cancel":
            self._awaiting_name.discard(chat_id)
            self._dirty = True
        elif action.kind == "add":
            self._awaiting_name.add(chat_id)
            await self._edit(chat_id, message_id, render_add_prompt())
            return

        await self._flush()

    async def _add_habit(self, chat_id: int, name: str) -> None:
        habit = self._store.add(name)
        if habit is None:
            return
        self._awaiting_name.discard(chat_id)
        # Jump to the page holding the new habit
        self._pages[chat_id] = page_count(len(self._store.habits)) - 1
        await self._flush()
        if chat_id not in self._screens:
            await self.send_screen(chat_id)
