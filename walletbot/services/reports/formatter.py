from typing import List, Optional, Sequence, Tuple

from walletbot.core.config import get_settings
from walletbot.core.timezone_helper import TimezoneHelper
from walletbot.models.finance import Card, Transaction, TransactionType
from .aggregates import (
    LimitStatus,
    plan_status,
    progress_bar,
    scheduled_summary,
    total_balance,
    wish_progress,
)

settings = get_settings()

SEPARATOR = "━━━━━━━━━━━━━━━"
RECENT_TRANSACTIONS = 10
RECENT_CURRENT_TRANSACTIONS = 15

COMMAND_MENU = """💳 *Cards & Balance*
/cards - View your cards
/addcard - Add a new card
/balance - Check balances

📋 *Transactions*
/transactions - All transactions
/scheduled - Future transactions
/current - Applied transactions
/addtransaction - Add transaction

💰 *Limits & Goals*
/limits - View limits
/addlimit - Add a spending limit
/limitstatus - Spending vs limits
/plans - View balance goals
/addplan - Add a balance goal
/wishes - View wishes
/addwish - Add a wish
/wishstatus - Progress to wishes

📊 *Statistics*
/stats - Charts and graphs

❌ /cancel - Cancel the current operation
🚪 /logout - Sign out
❓ /help - All commands"""


class ReportFormatter:
    """
    Single responsibility: turn cards and transactions into chat text.
    Uses WhatsApp formatting (*bold*, _italic_).
    """

    @staticmethod
    def money(amount: float) -> str:
        return f"{amount:.2f} {settings.CURRENCY_SYMBOL}"

    @staticmethod
    def welcome_guest() -> str:
        return (
            "Hi! 👋 Welcome to *Wallet Bot*.\n\n"
            "This bot helps you manage your cards and transactions.\n\n"
            "🔐 *Getting Started:*\n"
            "• If you have an account, use /login\n"
            "• If you're new here, use /signup"
        )

    @staticmethod
    def welcome_back(name: str) -> str:
        return f"Welcome back, {name or 'User'}! 👋\n\nHere are the available commands:\n\n{COMMAND_MENU}"

    @staticmethod
    def logged_in(name: str) -> str:
        return f"✅ Welcome, *{name or 'User'}*! You are now logged in.\n\nHere are the available commands:\n\n{COMMAND_MENU}"

    @staticmethod
    def signed_up(name: str) -> str:
        return f"✅ Account created successfully! Welcome, *{name or 'User'}*, you are now logged in.\n\n{COMMAND_MENU}"

    @staticmethod
    def help_text(authenticated: bool) -> str:
        if not authenticated:
            return (
                "❓ *Available commands:*\n\n"
                "/start - Welcome message\n"
                "/login - Sign in\n"
                "/signup - Create an account\n"
                "/cancel - Cancel the current operation\n"
                "/help - This help"
            )
        return f"❓ *Available commands:*\n\n{COMMAND_MENU}"

    @staticmethod
    def no_cards() -> str:
        return "📭 You have no cards yet.\n\nUse /addcard to add your first card!"

    @staticmethod
    def transaction_line(tx: Transaction, show_scheduled: bool = False) -> str:
        icon = "🔴" if tx.type == TransactionType.COST else "🟢"
        sign = "-" if tx.type == TransactionType.COST else "+"
        scheduled = " ⏰" if show_scheduled and tx.scheduled else ""
        date = TimezoneHelper.format_date_for_chat(tx.date)
        return (
            f"{icon} {tx.title}{scheduled}\n"
            f"   {sign}{ReportFormatter.money(tx.amount)} • {tx.category} • {date}\n\n"
        )

    @staticmethod
    def cards(cards: Sequence[Card]) -> str:
        message = "💳 *Your Cards:*\n\n"
        for index, card in enumerate(cards, 1):
            message += f"{index}. Card {card.masked_number}\n"
            message += f"   💰 Balance: {ReportFormatter.money(card.current_amount)}\n\n"
        message += "_Use /balance to see detailed balance info_"
        return message

    @staticmethod
    def balance(cards: Sequence[Card]) -> str:
        message = "💰 *Card Balances:*\n\n"
        for index, card in enumerate(cards, 1):
            message += f"{index}. Card {card.masked_number}\n"
            message += f"   Balance: *{ReportFormatter.money(card.current_amount)}*\n\n"
        message += f"{SEPARATOR}\n"
        message += f"📊 *Total Balance: {ReportFormatter.money(total_balance(cards))}*"
        return message

    @staticmethod
    def transactions(card: Card, transactions: List[Transaction]) -> str:
        if not transactions:
            return f"📭 No transactions found for card {card.masked_number}.\n\nUse /addtransaction to add one!"

        message = f"📋 *Transactions for Card {card.masked_number}:*\n\n"
        for tx in transactions[:RECENT_TRANSACTIONS]:
            message += ReportFormatter.transaction_line(tx, show_scheduled=True)
        if len(transactions) > RECENT_TRANSACTIONS:
            message += f"_...and {len(transactions) - RECENT_TRANSACTIONS} more transactions_"
        return message.rstrip()

    @staticmethod
    def scheduled(card: Card, transactions: List[Transaction]) -> str:
        if not transactions:
            return (
                f"⏰ No scheduled transactions for card {card.masked_number}.\n\n"
                "Scheduled transactions are future-dated transactions that haven't been applied yet."
            )

        message = f"⏰ *Scheduled Transactions for {card.masked_number}:*\n\n"
        for tx in transactions:
            message += ReportFormatter.transaction_line(tx)

        summary = scheduled_summary(transactions)
        message += f"{SEPARATOR}\n"
        message += "📊 *Summary:*\n"
        message += f"Scheduled Income: +{ReportFormatter.money(summary.income)}\n"
        message += f"Scheduled Expense: -{ReportFormatter.money(summary.expense)}\n"
        message += f"Net Impact: {ReportFormatter.money(summary.net)}"
        return message

    @staticmethod
    def current(card: Card, transactions: List[Transaction]) -> str:
        if not transactions:
            return f"📋 No current transactions for card {card.masked_number}."

        message = f"📋 *Current Transactions for {card.masked_number}:*\n\n"
        for tx in transactions[:RECENT_CURRENT_TRANSACTIONS]:
            message += ReportFormatter.transaction_line(tx)
        if len(transactions) > RECENT_CURRENT_TRANSACTIONS:
            message += f"_...and {len(transactions) - RECENT_CURRENT_TRANSACTIONS} more transactions_"
        return message.rstrip()

    @staticmethod
    def limits(cards: Sequence[Card]) -> str:
        message = "⚙️ *Card Limits:*\n\n"
        for index, card in enumerate(cards, 1):
            message += f"{index}. Card {card.masked_number}\n"
            if card.limits:
                for limit in card.limits:
                    message += f"   📅 {limit.month}: {ReportFormatter.money(limit.amount)}\n"
            else:
                message += "   _No limits set_\n"
            message += "\n"
        message += "_Use /addlimit to add a new limit_\n"
        message += "_Use /limitstatus to see spending vs limits_"
        return message

    @staticmethod
    def limit_status(month: str, statuses: Sequence[Tuple[Card, Optional[LimitStatus]]]) -> str:
        message = "📊 *Spending vs Limits (Current Month):*\n\n"
        for card, status in statuses:
            message += f"💳 Card {card.masked_number}\n"
            if status is None:
                message += f"   _No limit set for {month}_\n\n"
                continue

            message += f"   Limit: {ReportFormatter.money(status.limit)}\n"
            message += f"   Spent: {ReportFormatter.money(status.spent)}\n"
            message += f"   {progress_bar(status.percentage)} {status.percentage:.0f}%\n"
            message += f"   Remaining: {ReportFormatter.money(status.remaining)}\n"
            if status.over_limit:
                message += f"   ⚠️ *OVER LIMIT by {ReportFormatter.money(status.over_by)}*\n"
            message += "\n"
        return message.rstrip()

    @staticmethod
    def plans(cards: Sequence[Card]) -> str:
        message = "📋 *Card Plans (Minimum Balance Goals):*\n\n"
        for index, card in enumerate(cards, 1):
            message += f"{index}. Card {card.masked_number}\n"
            message += f"   Current Balance: *{ReportFormatter.money(card.current_amount)}*\n"
            if card.plans:
                for plan in card.plans:
                    status = plan_status(card.current_amount, plan)
                    icon = "✅" if status.met else "⚠️"
                    message += f"   {icon} {status.month}: min {ReportFormatter.money(status.goal)}\n"
            else:
                message += "   _No plans set_\n"
            message += "\n"
        message += "_Use /addplan to add a new plan_"
        return message

    @staticmethod
    def wishes(cards: Sequence[Card]) -> str:
        message = "🌟 *Card Wishes (Savings Goals):*\n\n"
        for index, card in enumerate(cards, 1):
            message += f"{index}. Card {card.masked_number}\n"
            message += f"   Balance: *{ReportFormatter.money(card.current_amount)}*\n"
            if card.wishes:
                for wish in card.wishes:
                    progress = wish_progress(card.current_amount, wish)
                    icon = "✅" if progress.achieved else "🎯"
                    message += f"   {icon} {progress.name}: {ReportFormatter.money(progress.target)}\n"
                    message += f"      Progress: {progress.percentage:.0f}% ({ReportFormatter.money(progress.remaining)} remaining)\n"
            else:
                message += "   _No wishes set_\n"
            message += "\n"
        message += "_Use /addwish to add a new wish_\n"
        message += "_Use /wishstatus for detailed progress_"
        return message

    @staticmethod
    def wish_status(cards: Sequence[Card]) -> str:
        message = "🎯 *Wish Progress Status:*\n\n"
        has_wishes = False

        for card in cards:
            if not card.wishes:
                continue
            has_wishes = True

            message += f"💳 Card {card.masked_number}\n"
            message += f"Balance: *{ReportFormatter.money(card.current_amount)}*\n\n"
            for i, wish in enumerate(card.wishes, 1):
                progress = wish_progress(card.current_amount, wish)
                message += f"{i}. *{progress.name}*\n"
                message += f"   Target: {ReportFormatter.money(progress.target)}\n"
                message += f"   {progress_bar(progress.percentage)} {progress.percentage:.1f}%\n"
                if progress.achieved:
                    message += "   ✅ ACHIEVED!\n"
                else:
                    message += f"   💰 {ReportFormatter.money(progress.remaining)} more needed\n"
                message += "\n"

        if not has_wishes:
            message += "_No wishes set for any card._\n\nUse /addwish to create a savings goal!"
        return message.rstrip()
