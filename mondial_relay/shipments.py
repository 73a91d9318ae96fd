"""Shipment and label models for the Mondial Relay REST API."""

import base64
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

MAX_WEIGHT_GRAMS = 30000
MAX_DIMENSION_CM = 150
MAX_ORDER_REFERENCE_LENGTH = 35

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _parse_datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass(frozen=True)
class ShipmentRequest:
    """Everything needed to create an expedition to a relay point."""

    order_reference: str
    relay_point_id: str
    country_code: str
    recipient_name: str
    recipient_email: str
    recipient_phone: str
    recipient_address_line1: str
    recipient_address_line2: str | None
    recipient_postal_code: str
    recipient_city: str
    weight_grams: int
    delivery_mode: str = "24R"
    length_cm: int | None = None
    width_cm: int | None = None
    height_cm: int | None = None
    declared_value: int | None = None  # cents
    instructions: str | None = None
    collection_mode: bool = False
    custom_data: dict = field(default_factory=dict)

    __hash__ = None

    def __post_init__(self):
        if not 1 <= self.weight_grams <= MAX_WEIGHT_GRAMS:
            raise ValueError(
                f"Invalid weight: {self.weight_grams} grams. "
                f"Must be between 1 and {MAX_WEIGHT_GRAMS} (30kg)."
            )

        for label, value in (
            ("length", self.length_cm),
            ("width", self.width_cm),
            ("height", self.height_cm),
        ):
            if value is not None and not 1 <= value <= MAX_DIMENSION_CM:
                raise ValueError(
                    f"Invalid {label}: {value} cm. Must be between 1 and {MAX_DIMENSION_CM}."
                )

        if not _EMAIL_RE.match(self.recipient_email):
            raise ValueError(f"Invalid recipient email: {self.recipient_email}")

        if len(self.recipient_phone) < 10:
            raise ValueError("Recipient phone number must be at least 10 characters.")

        if len(self.order_reference) > MAX_ORDER_REFERENCE_LENGTH:
            raise ValueError(
                f"Order reference too long: {len(self.order_reference)} characters. "
                f"Maximum is {MAX_ORDER_REFERENCE_LENGTH}."
            )

    def to_payload(self) -> dict:
        """Serialize the request as a POST /shipments body.

        Top-level entries that are None, empty strings or empty
        containers are left out.
        """
        payload = {
            "orderReference": self.order_reference,
            "relayPoint": {
                "id": self.relay_point_id,
                "countryCode": self.country_code,
            },
            "recipient": {
                "name": self.recipient_name,
                "email": self.recipient_email,
                "phone": self.recipient_phone,
                "address": {
                    "line1": self.recipient_address_line1,
                    "line2": self.recipient_address_line2,
                    "postalCode": self.recipient_postal_code,
                    "city": self.recipient_city,
                    "countryCode": self.country_code,
                },
            },
            "package": {
                "weight": self.weight_grams,
                "length": self.length_cm,
                "width": self.width_cm,
                "height": self.height_cm,
            },
            "deliveryMode": self.delivery_mode,
            "declaredValue": self.declared_value,
            "instructions": self.instructions,
            "collectionMode": self.collection_mode,
            "customData": dict(self.custom_data),
        }
        return {k: v for k, v in payload.items() if v not in (None, "", {}, [])}


@dataclass(frozen=True)
class ShipmentResponse:
    """The expedition Mondial Relay created for a shipment request."""

    expedition_number: str
    tracking_url: str
    label_url: str
    qr_code: str | None = None
    created_at: datetime | None = None
    metadata: dict = field(default_factory=dict)

    __hash__ = None

    def has_qr_code(self) -> bool:
        return bool(self.qr_code)

    def short_expedition_number(self, length: int = 8) -> str:
        if len(self.expedition_number) <= length:
            return self.expedition_number
        return self.expedition_number[:length] + "..."

    @classmethod
    def from_api_response(cls, data: dict) -> "ShipmentResponse":
        """Build a response from a POST /shipments JSON body.

        ``createdAt`` is parsed as ISO-8601; when the API omits it the
        current UTC time is used.
        """
        created_at = _parse_datetime(data.get("createdAt"))
        return cls(
            expedition_number=str(data["expeditionNumber"]),
            tracking_url=str(data["trackingUrl"]),
            label_url=str(data["labelUrl"]),
            qr_code=data.get("qrCode"),
            created_at=created_at or datetime.now(timezone.utc),
            metadata=data.get("metadata") or {},
        )

    def to_dict(self) -> dict:
        return {
            "expeditionNumber": self.expedition_number,
            "trackingUrl": self.tracking_url,
            "labelUrl": self.label_url,
            "qrCode": self.qr_code,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class LabelResponse:
    """A shipping label document downloaded for an expedition."""

    content: bytes
    content_type: str = "application/pdf"
    expedition_number: str = ""
    format: str = "A4"
    size_bytes: int = 0
    expires_at: datetime | None = None

    def is_pdf(self) -> bool:
        return self.content_type == "application/pdf"

    def base64_content(self) -> str:
        return base64.b64encode(self.content).decode("ascii")

    def data_uri(self) -> str:
        return f"data:{self.content_type};base64,{self.base64_content()}"

    def human_readable_size(self) -> str:
        units = ["B", "KB", "MB"]
        size = float(self.size_bytes)
        unit_index = 0
        while size >= 1024 and unit_index < len(units) - 1:
            size /= 1024
            unit_index += 1
        return f"{size:.2f} {units[unit_index]}"

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        now = datetime.now(self.expires_at.tzinfo) if self.expires_at.tzinfo else datetime.now()
        return self.expires_at < now

    def save_to_file(self, path: str | Path) -> Path:
        """Write the label to ``path``, creating parent directories.

        Returns:
            The path the label was written to.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.content)
        return path

    def suggested_filename(self, prefix: str | None = None) -> str:
        prefix = f"{prefix}_" if prefix else ""
        extension = "pdf" if self.is_pdf() else "bin"
        return f"{prefix}label_{self.expedition_number}_{self.format}.{extension}"

    @classmethod
    def from_api_response(
        cls,
        content: bytes,
        expedition_number: str,
        content_type: str = "application/pdf",
        format: str = "A4",
        expires_at: datetime | None = None,
    ) -> "LabelResponse":
        return cls(
            content=content,
            content_type=content_type,
            expedition_number=expedition_number,
            format=format,
            size_bytes=len(content),
            expires_at=expires_at,
        )
