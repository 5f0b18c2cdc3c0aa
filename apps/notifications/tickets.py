"""PDF e-tickets: rendering with reportlab and storage through Django storage."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from io import BytesIO
from typing import List

from django.core.files.base import ContentFile  # type: ignore
from django.core.files.storage import default_storage  # type: ignore
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TicketLine:
    option_name: str
    date: str
    time: str | None
    adults: int
    children: int
    infants: int

    @property
    def guests(self) -> str:
        parts = [f"{self.adults} adult(s)"]
        if self.children:
            parts.append(f"{self.children} child(ren)")
        if self.infants:
            parts.append(f"{self.infants} infant(s)")
        return ", ".join(parts)


@dataclass(frozen=True)
class TicketDetails:
    reference: str
    attraction_title: str
    guest_name: str
    email: str
    total: Decimal
    currency: str
    lines: List[TicketLine] = field(default_factory=list)
    meeting_point: str = ''

    @property
    def first_date(self) -> str:
        return self.lines[0].date if self.lines else ''


def ticket_details(booking, attraction=None, fallback_email: str = '') -> TicketDetails:
    """Build ticket data from a booking and (optionally) its attraction"""
    guest = booking.guest_details
    return TicketDetails(
        reference=booking.reference,
        attraction_title=attraction.title if attraction else 'Experience',
        guest_name=guest.full_name if guest else '',
        email=guest.email if guest else fallback_email,
        total=booking.total,
        currency=booking.currency,
        meeting_point=attraction.meeting_point if attraction else '',
        lines=[
            TicketLine(
                option_name=item.option_name,
                date=item.date,
                time=item.time,
                adults=item.quantities.adults,
                children=item.quantities.children,
                infants=item.quantities.infants,
            )
            for item in booking.items
        ],
    )


class TicketRenderer(ABC):
    @abstractmethod
    def render_ticket(self, details: TicketDetails) -> bytes:
        ...


class PdfTicketRenderer(TicketRenderer):
    """A4 e-ticket: header, QR code with the reference, lines and total"""

    qr_size = 120

    def _qr(self, reference: str) -> Drawing:
        widget = QrCodeWidget(reference)
        x1, y1, x2, y2 = widget.getBounds()
        drawing = Drawing(
            self.qr_size,
            self.qr_size,
            transform=[self.qr_size / (x2 - x1), 0, 0, self.qr_size / (y2 - y1), 0, 0],
        )
        drawing.add(widget)
        return drawing

    def render_ticket(self, details: TicketDetails) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, title=f"Ticket {details.reference}")
        styles = getSampleStyleSheet()
        story = [
            Paragraph(f"<b>{details.attraction_title}</b>", styles["Title"]),
            Paragraph(f"Booking reference: <b>{details.reference}</b>", styles["Heading2"]),
            Spacer(1, 12),
            self._qr(details.reference),
            Spacer(1, 12),
            Paragraph(f"Lead guest: {details.guest_name or details.email}", styles["Normal"]),
        ]
        if details.meeting_point:
            story.append(Paragraph(f"Meeting point: {details.meeting_point}", styles["Normal"]))
        story.append(Spacer(1, 20))

        data = [["Ticket", "Date", "Time", "Guests"]]
        for line in details.lines:
            data.append([line.option_name, line.date, line.time or "-", line.guests])

        table = Table(data, colWidths=[170, 90, 60, 170])
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
                ]
            )
        )
        story.append(table)
        story.append(Spacer(1, 20))
        story.append(
            Paragraph(f"<b>Total paid: {details.total:,.2f} {details.currency}</b>", styles["Heading3"])
        )
        story.append(
            Paragraph("Show this ticket (printed or on your phone) at the entrance.", styles["Italic"])
        )

        doc.build(story)
        return buffer.getvalue()


class TicketStore:
    """Stores rendered tickets with the configured Django storage backend"""

    def __init__(self, prefix: str = 'tickets', storage=None):
        self.prefix = prefix.strip('/')
        self.storage = storage or default_storage

    def save(self, reference: str, pdf: bytes) -> str:
        name = self.storage.save(f"{self.prefix}/ticket-{reference}.pdf", ContentFile(pdf))
        url = self.storage.url(name)
        logger.info(f"Ticket for booking {reference} stored as {name}")
        return url
