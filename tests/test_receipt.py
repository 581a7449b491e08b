"""Receipt data assembly and the canvas draw sequence."""

import logging
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from uuid import UUID

from services import config
from services.receipt import (
    CELL_BG,
    ROW_H,
    ReceiptCanvas,
    build_receipt,
    draw_receipt,
    format_receipt_date,
    format_rupees,
    receipt_for_advance,
    receipt_for_payment,
    receipt_filename,
    reference_number,
    render_receipt_pdf,
    save_receipt,
)

PROJECT_ID = UUID("3f2b8c1e-9a4d-4e7b-8c2a-1b2c3d4e5f60")
PAYMENT_ID = UUID("a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d")


class RecordingCanvas:
    """Stands in for reportlab's canvas; remembers every call in order."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
        return record

    def strings(self):
        return [args[2] for name, args, _ in self.calls if name in ("drawString", "drawCentredString")]


def project(**kw):
    base = dict(
        id=PROJECT_ID,
        customer_name="Ravi Kumar",
        address="Plot 12, Kondapur, Hyderabad",
        advance_payment=Decimal("20000"),
        start_date=date(2024, 3, 15),
        created_at=datetime(2024, 3, 14, 9, 30),
    )
    base.update(kw)
    return SimpleNamespace(**base)


class TestFormatting:

    def test_date(self):
        assert format_receipt_date(date(2024, 4, 1)) == "01-04-2024"
        assert format_receipt_date("2024-04-01T10:00:00") == "01-04-2024"

    def test_indian_grouping(self):
        assert format_rupees(1234567) == "12,34,567"
        assert format_rupees(999) == "999"
        assert format_rupees(Decimal("100000.50")) == "1,00,000.50"

    def test_reference(self):
        assert reference_number(PAYMENT_ID) == "A1B2C3D4E"
        assert reference_number(PROJECT_ID, prefix="ADV") == "ADV3F2B8C1E9"

    def test_filename(self):
        assert receipt_filename("Ravi Kumar", "01-04-2024") == "Ravi Kumar-receipt-01-04-2024.pdf"
        assert receipt_filename("A/B Traders", "01-04-2024") == "A-B Traders-receipt-01-04-2024.pdf"


class TestReceiptData:

    def test_payment(self):
        payment = SimpleNamespace(id=PAYMENT_ID, amount=Decimal("30000"), payment_date=date(2024, 4, 1),
                                  payment_mode="UPI", created_at=datetime(2024, 4, 1, 12, 0))
        data = receipt_for_payment(project(), payment)
        assert data.date == "01-04-2024"
        assert data.payment_mode == "UPI"
        assert data.amount_in_words == "Indian Rupee Thirty Thousand Only"
        assert data.place_of_supply == f"{config.COMPANY_STATE} ({config.COMPANY_STATE_CODE})"
        assert data.filename == "Ravi Kumar-receipt-01-04-2024.pdf"

    def test_advance_dated_by_start(self):
        data = receipt_for_advance(project())
        assert data.date == "15-03-2024"
        assert data.payment_mode == "Cash/UPI"
        assert data.reference.startswith("ADV")

    def test_advance_falls_back_to_creation(self):
        assert receipt_for_advance(project(start_date=None)).date == "14-03-2024"


class TestDrawing:

    def _data(self):
        return build_receipt(1234567, date(2024, 4, 1), "Ravi Kumar", "Cheque", "Kondapur", "A1B2C3D4E")

    def test_layout_content(self):
        c = RecordingCanvas()
        draw_receipt(c, self._data(), logo_path="", signature_path="")
        strings = c.strings()
        for expected in (config.COMPANY_NAME, "PAYMENT RECEIPT", "01-04-2024", "A1B2C3D4E", "Cheque",
                         "Rs.12,34,567", "Ravi Kumar", "Kondapur", "Authorized Signature"):
            assert expected in strings

    def test_missing_images_skipped(self):
        c = RecordingCanvas()
        draw_receipt(c, self._data(), logo_path="/nonexistent/logo.png", signature_path="/nonexistent/sig.png")
        assert not any(name == "drawImage" for name, _, _ in c.calls)

    def test_cells_use_blended_background(self):
        c = RecordingCanvas()
        draw_receipt(c, self._data(), logo_path="", signature_path="")
        fills = {args for name, args, _ in c.calls if name == "setFillColorRGB"}
        assert tuple(v / 255 for v in CELL_BG) in fills

    def test_pdf_bytes(self):
        pdf = render_receipt_pdf(self._data(), logo_path="", signature_path="")
        assert pdf.startswith(b"%PDF")

    def test_saved_under_payer_and_date(self, tmp_path):
        path = save_receipt(self._data(), directory=tmp_path, logo_path="", signature_path="")
        assert path.name == "Ravi Kumar-receipt-01-04-2024.pdf"
        assert path.read_bytes().startswith(b"%PDF")


class TestLongText:

    ADDRESS = ", ".join(["Flat 402, Sri Sai Residency, Road No. 7, Kondapur"] * 4) + ", Hyderabad 500084"

    def _signature_y(self, address):
        c = RecordingCanvas()
        draw_receipt(c, build_receipt(1500, date(2024, 4, 1), "Ravi Kumar", "UPI", address, "A1B2C3D4E"),
                     logo_path="", signature_path="")
        return next(args[1] for name, args, _ in c.calls if name == "drawString" and args[2] == "Authorized Signature")

    def test_long_address_fits_in_taller_cell(self, caplog):
        c = RecordingCanvas()
        with caplog.at_level(logging.WARNING, logger="uvicorn"):
            draw_receipt(c, build_receipt(1500, date(2024, 4, 1), "Ravi Kumar", "UPI", self.ADDRESS, "A1B2C3D4E"),
                         logo_path="", signature_path="")
        drawn = " ".join(c.strings())
        assert "Hyderabad 500084" in drawn
        assert not any(s.endswith("...") for s in c.strings())
        assert not caplog.records
        # pdf y grows upwards, so a taller address pushes the signature down
        assert self._signature_y(self.ADDRESS) < self._signature_y("Kondapur")

    def test_overflow_is_marked_and_logged(self, caplog):
        c = RecordingCanvas()
        with caplog.at_level(logging.WARNING, logger="uvicorn"):
            dropped = ReceiptCanvas(c).cell(10, 10, 100, ROW_H, "Survey No. 118, Gachibowli " * 30)
        assert dropped > 0
        assert c.strings()[-1].endswith("...")
        assert "line(s) cut" in caplog.text

    def test_short_text_untouched(self):
        c = RecordingCanvas()
        assert ReceiptCanvas(c).cell(10, 10, 100, ROW_H, "UPI") == 0
        assert c.strings() == ["UPI"]
