"""OTP Service - Email verification codes"""
from typing import Optional

from pymongo.database import Database

from ..config.settings import Settings
from ..domain.models import OtpRecord
from ..domain.errors import EmailSendError, ValidationError
from ..repositories.otp_repo import OtpRepository
from ..templates import EmailTemplateKey
from ..utils.idgen import generate_otp_id
from ..utils.passwords import generate_numeric_code
from ..utils.time import utc_now, add_minutes
from ..utils.validation import clean, normalize_email
from ..utils.logger import get_logger
from .mail_service import MailService

logger = get_logger(__name__)


class OtpService:
    """
    Issue and verify six-digit email codes

    Attempts are not throttled; every verify call is a single conditional
    update on the newest matching record.
    """

    def __init__(self, db: Database, settings: Settings, mail_service: MailService):
        self.settings = settings
        self.mail_service = mail_service
        self.otp_repo = OtpRepository(db)

    def issue(self, email: Optional[str]) -> OtpRecord:
        """
        Store a new code and email it before returning

        Raises:
            ValidationError: Missing or malformed email
            EmailSendError: Mail is configured but delivery failed
        """
        normalized_email = normalize_email(email)
        now = utc_now()
        record = OtpRecord(
            id=generate_otp_id(),
            email=normalized_email,
            otp=generate_numeric_code(6),
            expires_at=add_minutes(now, self.settings.otp_ttl_minutes),
            verified=False,
            created_at=now,
        )
        self.otp_repo.create_otp(record)

        payload = {"code": record.otp, "ttl_minutes": self.settings.otp_ttl_minutes}
        try:
            sent = self.mail_service.send_template(
                EmailTemplateKey.OTP_CODE, [normalized_email], payload
            )
        except EmailSendError as e:
            logger.error(
                f"OTP email to {normalized_email} failed: {e.message}",
                extra={"action": "otp_issued", "status": "failed"}
            )
            raise EmailSendError("Failed to send OTP. Please try again.")

        if sent:
            logger.info(
                f"OTP sent to {normalized_email}",
                extra={"action": "otp_issued", "status": "sent"}
            )
        else:
            logger.warning(
                f"OTP for {normalized_email}: {record.otp}",
                extra={"action": "otp_issued", "status": "logged"}
            )
        return record

    def verify(self, email: Optional[str], code: Optional[str]) -> OtpRecord:
        """
        Raises:
            ValidationError: Missing fields, or no unverified unexpired match
        """
        normalized_email = clean(email).lower()
        if not normalized_email:
            raise ValidationError("Email is required")
        otp = clean(code)
        if not otp:
            raise ValidationError("OTP is required")

        record = self.otp_repo.consume(normalized_email, otp)
        if record is None:
            raise ValidationError("Invalid or expired OTP")

        logger.info(
            f"OTP verified for {normalized_email}",
            extra={"action": "otp_verified"}
        )
        return record
