"""Telegram message formatting for transaction notifications

Messages use Telegram MarkdownV2, so every dynamic value is escaped.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Union
from zoneinfo import ZoneInfo
from src.app.use_cases.webhook.dtos import TransactionNotificationDTO
from src.domain.transaction import TransactionStatus

MARKDOWN_V2_RESERVED = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")

STATUS_HEADERS = {
    TransactionStatus.SUKSES: ("✅", "*TRANSAKSI SUKSES*"),
    TransactionStatus.GAGAL: ("❌", "*TRANSAKSI GAGAL*"),
    TransactionStatus.PENDING: ("⏳", "*TRANSAKSI PENDING*"),
}


def escape_markdown_v2(value: Union[str, int, Decimal, None]) -> str:
    if value is None:
        return ""
    return MARKDOWN_V2_RESERVED.sub(r"\\\1", str(value))


def format_rupiah(amount: Decimal) -> str:
    """Format an amount the Indonesian way: 10.150 or 10.150,50"""
    if amount == amount.to_integral_value():
        text = f"{int(amount):,}"
        return text.replace(",", ".")
    text = f"{amount:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_local_time(timestamp: datetime, tz_name: str) -> str:
    """Render a (naive UTC or aware) timestamp in the given timezone"""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    local = timestamp.astimezone(ZoneInfo(tz_name))
    return local.strftime("%d/%m/%Y, %H.%M.%S")


def format_transaction_message(
    notification: TransactionNotificationDTO,
    tz_name: str = "Asia/Jakarta",
) -> str:
    time = escape_markdown_v2(format_local_time(notification.timestamp, tz_name))
    status = TransactionStatus(notification.status)
    icon, status_text = STATUS_HEADERS[status]

    message = f"{icon} {status_text}"
    if notification.additional_info:
        message += f" \\- _{escape_markdown_v2(notification.additional_info)}_"
    message += "\n\n"

    message += "*Detail Transaksi*\n"
    message += f"• 🆔 *Ref ID:* `{escape_markdown_v2(notification.ref_id)}`\n"
    if notification.provider_transaction_id:
        message += f"• 🔢 *Trx ID Provider:* `{escape_markdown_v2(notification.provider_transaction_id)}`\n"
    message += f"• 📦 *Produk:* {escape_markdown_v2(notification.product_name)}\n"
    message += f"• 🎯 *Tujuan:* {escape_markdown_v2(notification.customer_detail)}\n"
    message += f"• 🏢 *Provider:* {escape_markdown_v2(notification.provider)}\n"
    if notification.transacted_by:
        message += f"• 👤 *Oleh:* {escape_markdown_v2(notification.transacted_by)}\n"
    message += "\n"

    if status == TransactionStatus.SUKSES:
        message += "*Rincian Keuangan*\n"
        if notification.selling_price is not None:
            message += f"• 📈 *Harga Jual:* Rp {escape_markdown_v2(format_rupiah(notification.selling_price))}\n"
        if notification.cost_price is not None:
            message += f"• 📉 *Harga Modal:* Rp {escape_markdown_v2(format_rupiah(notification.cost_price))}\n"
        if notification.profit is not None and notification.profit >= 0:
            message += f"• 💰 *Profit:* *Rp {escape_markdown_v2(format_rupiah(notification.profit))}*\n"
        message += "\n"

        if notification.serial_number:
            message += "*Token/SN diterima:*\n"
            message += f"```\n{escape_markdown_v2(notification.serial_number)}\n```\n"
    elif status == TransactionStatus.GAGAL and notification.failure_reason:
        message += "*📝 Alasan Gagal:*\n"
        message += f"{escape_markdown_v2(notification.failure_reason)}\n\n"

    message += f"_ePulsaku \\| {time}_"
    return message


def unique_chat_ids(chat_ids: list[str], extra: Optional[str] = None) -> list[str]:
    """Merge admin chat ids with a personal one, keeping order and dropping duplicates"""
    merged: list[str] = []
    for chat_id in [*chat_ids, extra]:
        if chat_id and chat_id not in merged:
            merged.append(chat_id)
    return merged
