import io
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet


def _amount(value: float) -> str:
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def generate_pdf_for_grocery_list(grocery_list, title: str = ""):
    """Generate a PDF table grouped by category: Item / Quantity / Unit / Price / Plans, with the total."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        rightMargin=20, leftMargin=20, topMargin=20, bottomMargin=20
    )

    styles = getSampleStyleSheet()
    elements = [
        Paragraph(title or grocery_list.name, styles["Title"]),
        Spacer(1, 16),
    ]

    data = [["Item", "Quantity", "Unit", "Price", "Plans"]]
    category_rows = []
    for category, items in grocery_list.by_category().items():
        category_rows.append(len(data))
        data.append([category.title(), "", "", "", ""])
        for item in items:
            name = item.name + (" *" if item.flags else "")
            data.append([
                name,
                _amount(item.purchase_quantity),
                item.unit,
                f"{item.estimated_price:.2f}",
                ", ".join(item.groups),
            ])
    data.append(["Total", "", "", f"{grocery_list.total_cost:.2f}", ""])

    style = [
        ("BACKGROUND", (0,0), (-1,0), colors.HexColor("#4CAF50")),
        ("TEXTCOLOR", (0,0), (-1,0), colors.whitesmoke),
        ("ALIGN", (1,0), (3,-1), "RIGHT"),
        ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
        ("FONTSIZE", (0,0), (-1,0), 12),
        ("BOTTOMPADDING", (0,0), (-1,0), 10),
        ("GRID", (0,0), (-1,-1), 0.5, colors.grey),
        ("FONTNAME", (0,-1), (-1,-1), "Helvetica-Bold"),
    ]
    for row in category_rows:
        style.append(("BACKGROUND", (0,row), (-1,row), colors.HexColor("#E8F5E9")))
        style.append(("FONTNAME", (0,row), (-1,row), "Helvetica-Oblique"))
        style.append(("SPAN", (0,row), (-1,row)))

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle(style))
    elements.append(table)
    if any(item.flags for item in grocery_list.items):
        elements.append(Spacer(1, 8))
        elements.append(Paragraph("* unpriced, or listed in more than one unit", styles["Normal"]))
    doc.build(elements)
    return buf.getvalue()
