# services/receipt.py: single-page payment receipt drawn on a reportlab canvas
from __future__ import annotations
import io
import logging
import os
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from services import config
from services.financials import to_money
from services.words import rupees_in_words

logger = logging.getLogger("uvicorn")

PAGE_W, PAGE_H = A4
MARGIN = 20  # all layout numbers below are millimetres from the top-left corner

# ─── COLORS (0-255) ───
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
GREEN = (140, 198, 63)
CELL_BASE = (151, 175, 194)  # #97afc2
CELL_OPACITY = 0.29

# ─── TABLE ───
START_Y = 100
ROW_H = 15
LABEL_W = 80
DATA_W = 120
AMOUNT_BOX_W = 55
AMOUNT_BOX_H = ROW_H * 2
ADDRESS_SIZE = 11
MAX_ADDRESS_H = 25  # keeps the signature block on the page


def _blend(color: tuple[int, int, int], opacity: float) -> tuple[int, int, int]:
    return tuple(round(c * opacity + 255 * (1 - opacity)) for c in color)


CELL_BG = _blend(CELL_BASE, CELL_OPACITY)


def line_height(size: float) -> float:
    """Leading in millimetres for a font size in points."""
    return size * 1.2 / mm


@dataclass(frozen=True)
class ReceiptData:
    date: str  # DD-MM-YYYY
    amount: Decimal
    received_from: str
    payment_mode: str
    place_of_supply: str
    customer_address: str
    reference: str
    amount_in_words: str

    @property
    def filename(self) -> str:
        return receipt_filename(self.received_from, self.date)


def format_receipt_date(value: date | datetime | str) -> str:
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return value.strftime("%d-%m-%Y")


def format_rupees(amount: Any) -> str:
    """Indian digit grouping: 1234567 -> 12,34,567 (paise kept only when non-zero)."""
    amount = to_money(amount)
    whole, paise = divmod(abs(amount), 1)
    digits = str(int(whole))
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    text = ",".join(groups + [tail])
    if paise:
        text += f"{paise:.2f}"[1:]
    return f"-{text}" if amount < 0 else text


def reference_number(record_id: UUID | str, prefix: str = "") -> str:
    return f"{prefix}{str(record_id).replace('-', '')[:9].upper()}"


def receipt_filename(received_from: str, receipt_date: str) -> str:
    safe = received_from.replace("/", "-").replace("\\", "-").strip() or "customer"
    return f"{safe}-receipt-{receipt_date}.pdf"


def build_receipt(
    amount: Any,
    payment_date: date | datetime | str,
    received_from: str,
    payment_mode: str,
    customer_address: Optional[str],
    reference: str,
) -> ReceiptData:
    amount = to_money(amount)
    return ReceiptData(
        date=format_receipt_date(payment_date),
        amount=amount,
        received_from=received_from,
        payment_mode=payment_mode or "Cash",
        place_of_supply=f"{config.COMPANY_STATE} ({config.COMPANY_STATE_CODE})",
        customer_address=customer_address or "",
        reference=reference,
        amount_in_words=rupees_in_words(amount),
    )


def receipt_for_payment(project: Any, payment: Any) -> ReceiptData:
    mode = getattr(payment.payment_mode, "value", payment.payment_mode)
    return build_receipt(
        amount=payment.amount,
        payment_date=payment.payment_date or payment.created_at,
        received_from=project.customer_name,
        payment_mode=mode or "Cash",
        customer_address=project.address,
        reference=reference_number(payment.id),
    )


def receipt_for_advance(project: Any) -> ReceiptData:
    """The advance is not a payment_history row; it is dated by the project start."""
    return build_receipt(
        amount=project.advance_payment,
        payment_date=project.start_date or project.created_at,
        received_from=project.customer_name,
        payment_mode="Cash/UPI",
        customer_address=project.address,
        reference=reference_number(project.id, prefix="ADV"),
    )


# -----------------------------
# DRAWING
# -----------------------------
class ReceiptCanvas:
    """Top-left millimetre coordinates on top of a reportlab canvas."""

    def __init__(self, c):
        self.c = c

    def _y(self, y_mm: float) -> float:
        return PAGE_H - y_mm * mm

    def fill(self, rgb):
        self.c.setFillColorRGB(*(v / 255 for v in rgb))

    def rect(self, x, y, w, h, rgb):
        self.fill(rgb)
        self.c.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=0, fill=1)

    def text(self, s, x, y, font="Helvetica", size=12, rgb=BLACK, align="left"):
        self.c.setFont(font, size)
        self.fill(rgb)
        if align == "center":
            self.c.drawCentredString(x * mm, self._y(y), s)
        else:
            self.c.drawString(x * mm, self._y(y), s)

    def line(self, x1, y1, x2, y2, width=0.5):
        self.c.setLineWidth(width)
        self.c.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))

    def image(self, path: str, x, y, w, h) -> bool:
        if not path or not os.path.exists(path):
            logger.info(f"[receipt] image not found, skipped: {path}")
            return False
        self.c.drawImage(path, x * mm, self._y(y + h), w * mm, h * mm, mask="auto")
        return True

    def wrap(self, s, w, size=15) -> list[str]:
        return simpleSplit(s, "Helvetica-Bold", size, (w - 10) * mm) or [""]

    def cell(self, x, y, w, h, s, size=15) -> int:
        """Fill a tinted cell with wrapped text; returns how many lines did not fit."""
        self.rect(x, y, w, h, CELL_BG)
        lines = self.wrap(s, w, size)
        leading = line_height(size)
        fit = max(1, int(h // leading))
        dropped = max(len(lines) - fit, 0)
        if dropped:
            logger.warning(f"[receipt] {dropped} line(s) cut from {s[:40]!r}")
            lines = lines[:fit]
            lines[-1] = lines[-1].rstrip() + "..."
        top = y + h / 2 + size / 6 - (len(lines) - 1) * leading / 2
        for i, line in enumerate(lines):
            self.text(line, x + 5, top + i * leading, font="Helvetica-Bold", size=size)
        return dropped


def draw_receipt(c, data: ReceiptData, logo_path: Optional[str] = None, signature_path: Optional[str] = None) -> None:
    """Issue the fixed draw sequence for ``data`` on canvas ``c`` (one A4 page)."""
    rc = ReceiptCanvas(c)
    page_w = PAGE_W / mm
    logo_path = config.RECEIPT_LOGO_PATH if logo_path is None else logo_path
    signature_path = config.RECEIPT_SIGNATURE_PATH if signature_path is None else signature_path

    rc.rect(0, 0, page_w, PAGE_H / mm, WHITE)

    # company block + logo
    rc.text(config.COMPANY_NAME, MARGIN, 25, font="Helvetica-Bold", size=15)
    for i, s in enumerate((config.COMPANY_STATE, config.COMPANY_COUNTRY, f"GSTIN {config.COMPANY_GSTIN}",
                           config.COMPANY_EMAIL, config.COMPANY_WEBSITE)):
        rc.text(s, MARGIN, 32 + i * 7)
    rc.image(logo_path, page_w - MARGIN - 45, 25, 45, 30)
    rc.line(MARGIN, 70, page_w - MARGIN, 70)

    rc.text("PAYMENT RECEIPT", page_w / 2, 85, font="Helvetica-Bold", size=21, align="center")

    label_x = MARGIN
    data_x = MARGIN + LABEL_W
    box_x = data_x + DATA_W - AMOUNT_BOX_W

    for i, label in enumerate(("Payment Date", "Reference Number", "Payment Mode", "Place Of Supply",
                               "Amount Received In", "Words")):
        rc.text(label, label_x, START_Y + ROW_H * i + 7, size=15)

    # amount box sits beside the first two rows
    rc.rect(box_x, START_Y, AMOUNT_BOX_W, AMOUNT_BOX_H, GREEN)
    rc.text("Amount", box_x + 5, START_Y + 10, size=14, rgb=WHITE)
    rc.text("Received", box_x + 5, START_Y + 22, size=14, rgb=WHITE)
    rc.text(f"Rs.{format_rupees(data.amount)}", box_x + 5, START_Y + AMOUNT_BOX_H + 12, font="Helvetica-Bold", size=18)

    narrow = DATA_W - AMOUNT_BOX_W
    rc.cell(data_x, START_Y, narrow, ROW_H, data.date)
    rc.cell(data_x, START_Y + ROW_H, narrow, ROW_H, data.reference)
    rc.cell(data_x, START_Y + ROW_H * 2, DATA_W, ROW_H, data.payment_mode)
    rc.cell(data_x, START_Y + ROW_H * 3, DATA_W, ROW_H, data.place_of_supply)
    rc.cell(data_x, START_Y + ROW_H * 4, DATA_W, ROW_H * 2, data.amount_in_words, size=13)

    # received from
    from_y = START_Y + ROW_H * 7
    full_w = LABEL_W + DATA_W
    rc.text("Received From", label_x, from_y, size=15)
    rc.cell(label_x, from_y + 5, full_w, ROW_H, data.received_from)
    address_h = ROW_H
    if data.customer_address:
        n = len(rc.wrap(data.customer_address, full_w, ADDRESS_SIZE))
        address_h = min(max(ROW_H, n * line_height(ADDRESS_SIZE) + 6), MAX_ADDRESS_H)
        rc.cell(label_x, from_y + 5 + ROW_H, full_w, address_h, data.customer_address, size=ADDRESS_SIZE)

    # signature below the received-from block
    sig_y = from_y + 5 + ROW_H + address_h + 10
    rc.image(signature_path, box_x, sig_y, 50, 20)
    rc.text("Authorized Signature", box_x, sig_y + 27)


def render_receipt_pdf(data: ReceiptData, logo_path: Optional[str] = None, signature_path: Optional[str] = None) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(f"Payment receipt {data.reference}")
    c.setAuthor(config.COMPANY_NAME)
    draw_receipt(c, data, logo_path=logo_path, signature_path=signature_path)
    c.showPage()
    c.save()
    return buf.getvalue()


def save_receipt(data: ReceiptData, directory: str | Path | None = None, **kwargs) -> Path:
    out_dir = Path(directory or config.RECEIPTS_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / data.filename
    path.write_bytes(render_receipt_pdf(data, **kwargs))
    logger.info(f"[receipt] saved {path}")
    return path
