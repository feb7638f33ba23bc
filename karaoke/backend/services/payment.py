"""Subscription catalogue and manual checkout through a pre-filled WhatsApp chat.

There is no payment gateway: checkout only builds a ``wa.me`` deep link with
the order details so the admin can reply with payment instructions and
activate the account by hand.
"""

from typing import List, Optional
from urllib.parse import quote

from karaoke.backend import config
from karaoke.backend.schemas.auth import AuthUser
from karaoke.backend.schemas.payment import (
    AccountStatus,
    CheckoutResponse,
    FAQEntry,
    OrderSummary,
    PaymentMethod,
    Plan,
)

WHATSAPP_BASE_URL = "https://wa.me/"

CHECKOUT_STEPS = [
    'Klik "Lanjut ke WhatsApp" di bawah',
    "Chat admin untuk detail pembayaran",
    "Lakukan pembayaran sesuai instruksi",
    "Kirim bukti pembayaran ke admin",
]


def get_plans() -> List[Plan]:
    return [
        Plan(
            id="basic",
            name="Basic",
            price=config.PRICE_BASIC,
            duration="1 hari",
            features=[
                "Akses 50 lagu populer",
                "Rekam hingga 3 lagu per hari",
                "Kualitas audio standar",
                "Fitur dasar karaoke",
            ],
            color="#4caf50",
            icon="fas fa-music",
        ),
        Plan(
            id="premium",
            name="Premium",
            price=config.PRICE_PREMIUM,
            duration="30 hari",
            features=[
                "Akses semua lagu (unlimited)",
                "Rekam unlimited",
                "Kualitas audio HD",
                "Voice effects premium",
                "Download rekaman",
                "Prioritas customer service",
                "Akses tournament eksklusif",
            ],
            color="#ff9800",
            icon="fas fa-crown",
            popular=True,
        ),
        Plan(
            id="vip",
            name="VIP",
            price=config.PRICE_VIP,
            duration="30 hari",
            features=[
                "Semua fitur Premium",
                "Upload lagu custom",
                "Personal vocal coach (1 sesi)",
                "Akses beta features",
                "Profile badge eksklusif",
                "Monthly exclusive content",
                "Priority tournament entry",
                "24/7 dedicated support",
            ],
            color="#e91e63",
            icon="fas fa-gem",
        ),
    ]


def get_plan(plan_id: str) -> Optional[Plan]:
    for plan in get_plans():
        if plan.id == plan_id:
            return plan
    return None


def get_payment_methods() -> List[PaymentMethod]:
    return [
        PaymentMethod(
            title="GoPay",
            description="Transfer langsung ke nomor GoPay",
            number=config.GOPAY_NUMBER,
            color="#00AA13",
            icon="fas fa-mobile-alt",
        ),
        PaymentMethod(
            title="WhatsApp Konfirmasi",
            description="Hubungi admin untuk konfirmasi",
            number=config.WHATSAPP_NUMBER,
            color="#25D366",
            icon="fab fa-whatsapp",
        ),
        PaymentMethod(
            title="Transfer Bank",
            description="Detail rekening dari admin",
            number="Hubungi admin",
            color="#1976D2",
            icon="fas fa-university",
        ),
    ]


def get_faq() -> List[FAQEntry]:
    return [
        FAQEntry(
            question="Bagaimana cara berlangganan?",
            answer="Pilih paket, hubungi admin via WhatsApp, lakukan pembayaran, "
                   "dan akses premium akan diaktivasi dalam 1-24 jam.",
        ),
        FAQEntry(
            question="Apakah bisa refund?",
            answer="Refund dapat dilakukan dalam 3 hari pertama jika ada masalah teknis. "
                   "Hubungi admin untuk proses refund.",
        ),
        FAQEntry(
            question="Berapa lama proses aktivasi?",
            answer="Aktivasi premium dilakukan dalam 1-24 jam setelah konfirmasi pembayaran dari admin.",
        ),
        FAQEntry(
            question="Apakah auto-renewal?",
            answer="Tidak ada auto-renewal. Anda perlu memperpanjang secara manual "
                   "sebelum masa aktif berakhir.",
        ),
    ]


def get_free_account_status() -> AccountStatus:
    return AccountStatus(
        label="Free User",
        description="Akses terbatas",
        included=["10 lagu gratis per hari"],
        excluded=["Rekam maksimal 1 lagu per hari", "Tidak ada voice effects"],
    )


def format_rupiah(amount: int) -> str:
    """Group thousands with dots, the Indonesian way: 15000 -> '15.000'."""
    return f"{amount:,}".replace(",", ".")


def whatsapp_number(number: str) -> str:
    """Normalize a local Indonesian number to the international form wa.me expects.

    ``0812...`` becomes ``62812...``; numbers already starting with ``62``
    are kept; numbers stored without the leading ``6`` (``2812...``) get it
    prepended.
    """
    digits = "".join(ch for ch in number if ch.isdigit())
    if digits.startswith("62"):
        return digits
    if digits.startswith("0"):
        return "62" + digits[1:]
    if digits.startswith("2"):
        return "6" + digits
    return "62" + digits


def whatsapp_url(number: str, message: str) -> str:
    return f"{WHATSAPP_BASE_URL}{whatsapp_number(number)}?text={quote(message, safe='')}"


def build_subscription_message(plan: Plan, user: AuthUser) -> str:
    return (
        f"Halo Admin, saya ingin berlangganan paket {plan.name} ({plan.duration}) "
        f"dengan harga Rp {format_rupiah(plan.price)}.\n\n"
        f"Data Akun:\nNama: {user.display_name}\nEmail: {user.email}\n\n"
        "Mohon kirimkan detail pembayaran. Terima kasih!"
    )


def build_confirmation() -> str:
    return (
        "Permintaan berlangganan telah dikirim!\n\n"
        "Anda akan diarahkan ke WhatsApp admin untuk menyelesaikan pembayaran.\n\n"
        f"Metode Pembayaran:\n• GoPay: {config.GOPAY_NUMBER}\n"
        "• Transfer Bank (detail akan diberikan admin)\n\n"
        "Setelah pembayaran, akses premium akan diaktivasi dalam 1-24 jam."
    )


def checkout(plan: Plan, user: AuthUser) -> CheckoutResponse:
    message = build_subscription_message(plan, user)
    price = f"Rp {format_rupiah(plan.price)}"
    return CheckoutResponse(
        plan=plan,
        whatsapp_url=whatsapp_url(config.WHATSAPP_NUMBER, message),
        message=message,
        order=OrderSummary(
            item=f"Paket {plan.name} ({plan.duration})",
            price=price,
            total=f"Total: {price}",
        ),
        steps=CHECKOUT_STEPS,
        confirmation=build_confirmation(),
    )
