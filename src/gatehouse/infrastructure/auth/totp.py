"""Time-based one-time passwords using pyotp, with SVG QR codes from qrcode."""
import base64
import io
import logging

import pyotp
import qrcode
from qrcode.image.svg import SvgPathImage

logger = logging.getLogger(__name__)


class TotpService:
    def __init__(self, issuer_name: str = "Gatehouse", digits: int = 6, interval: int = 30) -> None:
        self.issuer_name = issuer_name
        self.digits = digits
        self.interval = interval

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval)

    def generate_secret(self) -> str:
        return pyotp.random_base32()

    def current_code(self, secret: str) -> str:
        return self._totp(secret).now()

    def verify(self, secret: str, code: str, window: int = 1) -> bool:
        """Check ``code`` against ``secret``, allowing ``window`` steps of clock drift."""
        if not code or not code.isdigit():
            return False
        return self._totp(secret).verify(code, valid_window=window)

    def provisioning_uri(self, secret: str, account_name: str) -> str:
        return self._totp(secret).provisioning_uri(name=account_name, issuer_name=self.issuer_name)

    def qr_code_data_url(self, secret: str, account_name: str) -> str:
        """Render the provisioning URI as an SVG QR code ``data:`` URL."""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=4,
        )
        qr.add_data(self.provisioning_uri(secret, account_name))
        qr.make(fit=True)

        stream = io.BytesIO()
        qr.make_image(image_factory=SvgPathImage).save(stream)
        encoded = base64.b64encode(stream.getvalue()).decode("ascii")
        return f"data:image/svg+xml;base64,{encoded}"
