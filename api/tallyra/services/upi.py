from decimal import Decimal
from urllib.parse import quote

from tallyra.schemas.session import ShopProfile

QR_SERVICES = (
    "https://api.qrserver.com/v1/create-qr-code/?size=300x300&data={data}&format=png&margin=10",
    "https://quickchart.io/qr?text={data}&size=300&margin=2&format=png",
    "https://chart.googleapis.com/chart?chs=300x300&cht=qr&chl={data}&choe=UTF-8",
)


def payment_uri(shop: ShopProfile, amount: Decimal) -> str:
    if not shop.upi_id:
        return ""
    name = quote(shop.name, safe="")
    note = quote(f"Payment to {shop.name}", safe="")
    return (
        f"upi://pay?pa={shop.upi_id}&pn={name}&am={amount}"
        f"&cu={shop.currency}&tn={note}"
    )


def qr_image_url(upi_string: str, service: int = 0) -> str:
    # a failed image load moves on to the next generator
    if not upi_string:
        return ""
    template = QR_SERVICES[service % len(QR_SERVICES)]
    return template.format(data=quote(upi_string, safe="-_.!~*'()"))
