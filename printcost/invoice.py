import re

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from printcost.pricing import breakdown_lines


def receipt_filename(print_name):
    safe_name = re.sub(r"\s", "_", print_name)
    return f"3D_Print_Receipt_{safe_name}.pdf"


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name='ReceiptTitle',
        parent=styles['Title'],
        fontName='Helvetica-Bold',
        fontSize=22,
        alignment=TA_CENTER,
        spaceAfter=12
    ))
    styles.add(ParagraphStyle(
        name='ReceiptHeading',
        parent=styles['Heading2'],
        fontName='Helvetica-Bold',
        fontSize=14,
        spaceAfter=4
    ))
    styles.add(ParagraphStyle(
        name='ReceiptBody',
        parent=styles['BodyText'],
        fontName='Helvetica',
        fontSize=11
    ))
    styles.add(ParagraphStyle(
        name='ReceiptFinal',
        parent=styles['BodyText'],
        fontName='Helvetica-Bold',
        fontSize=18,
        spaceBefore=10
    ))
    return styles


def build_receipt(entry, path):
    """Render a one-page PDF receipt for a saved calculation."""
    if not entry.data.print_name.strip():
        raise ValueError("A print name is required to generate a receipt")

    data, costs, currency = entry.data, entry.costs, entry.currency
    styles = _styles()

    doc = SimpleDocTemplate(
        str(path),
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=60,
        bottomMargin=60
    )
    separator = Table([[""]], colWidths=[500], style=[
        ('LINEBELOW', (0, 0), (-1, -1), 0.5, colors.black)
    ])

    story = [Paragraph("3D Print Receipt", styles['ReceiptTitle']), separator, Spacer(1, 15)]

    # Print details
    story.append(Paragraph("Print Details", styles['ReceiptHeading']))
    details = [
        ("Print Name", data.print_name),
        ("Customer Name", data.customer_name or "N/A"),
        ("Date", data.purchase_date or "N/A"),
    ]
    for label, value in details:
        story.append(Paragraph(f"{label}: {value}", styles['ReceiptBody']))
    story.append(Spacer(1, 15))

    # Cost breakdown, final price gets its own line below
    story.append(Paragraph("Cost Breakdown", styles['ReceiptHeading']))
    rows = [["Description", f"Amount ({currency.symbol})"]]
    for label, amount in breakdown_lines(costs, currency)[:-1]:
        if label == "Total Cost":
            label = "Total Cost (before markup)"
        rows.append([label, amount])

    pricing_table = Table(rows, colWidths=[350, 150])
    pricing_table.setStyle(TableStyle([
        ('FONT', (0, 0), (-1, 0), 'Helvetica-Bold', 11),
        ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('FONT', (0, -2), (-1, -2), 'Helvetica-Bold', 11),
    ]))
    story.append(pricing_table)
    story.append(Spacer(1, 15))
    story.append(separator)

    story.append(Paragraph(
        f"Final Price: {currency.symbol} {costs.final_price:.2f}", styles['ReceiptFinal']
    ))

    doc.build(story)
    return path
