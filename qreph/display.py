"""Terminal rendering of the note link."""

import qrcode
from rich.console import Console

from qreph.models import Endpoint


def render_endpoint(endpoint: Endpoint, console: Console, show_qr: bool = True) -> None:
    """Print the link and, unless disabled, a scannable QR code for it."""
    console.print(
        "Serving note at:", endpoint.url, markup=False, highlight=False, soft_wrap=True
    )
    if not show_qr:
        return

    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_L, border=2)
    qr.add_data(endpoint.url)
    qr.make(fit=True)
    qr.print_ascii(out=console.file, invert=True)
    console.file.flush()
