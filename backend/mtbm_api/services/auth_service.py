"""Auth Service - Signup, login, profile and password reset"""
from typing import Optional, Tuple

from pymongo.database import Database

from ..config.settings import Settings
from ..domain.models import User
from ..domain.enums import UserRole, SIGNUP_ROLES
from ..domain.errors import AuthenticationError, EmailSendError, ValidationError, UserNotFoundError
from ..repositories.user_repo import UserRepository
from ..repositories.otp_repo import OtpRepository
from ..templates import EmailTemplateKey
from ..utils.idgen import generate_user_id
from ..utils.jwt import TokenService
from ..utils.passwords import hash_password, verify_password, generate_numeric_code, hash_code
from ..utils.time import utc_now, add_minutes
from ..utils.validation import clean, normalize_email, require_password
from ..utils.logger import get_logger
from .mail_service import MailService

logger = get_logger(__name__)

WRONG_CREDENTIALS = "Wrong email or password"


class AuthService:
    """Account lifecycle and token issuance"""

    def __init__(
        self,
        db: Database,
        settings: Settings,
        token_service: TokenService,
        mail_service: MailService
    ):
        self.settings = settings
        self.token_service = token_service
        self.mail_service = mail_service
        self.user_repo = UserRepository(db)
        self.otp_repo = OtpRepository(db)

    # =========================================================================
    # Identity
    # =========================================================================

    def authenticate_token(self, token: str) -> User:
        """
        Resolve a bearer token to a live account

        Raises:
            AuthenticationError: Token invalid/expired or account gone
        """
        claims = self.token_service.decode(token)
        user = self.user_repo.get_user(str(claims["sub"]))
        if user is None:
            raise AuthenticationError("User not found")
        return user

    def _parse_role(self, value: Optional[str], allowed) -> UserRole:
        role = clean(value).lower()
        if not role:
            raise ValidationError("Role is required")
        if role not in [r.value for r in allowed]:
            raise ValidationError("Invalid role", details={"role": role})
        return UserRole(role)

    def signup(
        self,
        email: Optional[str],
        password: Optional[str],
        role: Optional[str],
        full_name: Optional[str],
        organization: Optional[str],
        photo_url: Optional[str] = None
    ) -> Tuple[str, User]:
        """
        Register an engineer or technician

        Returns:
            (token, user)

        Raises:
            ValidationError: Bad input or unverified email when verification is required
            AlreadyExistsError: (email, role) already registered
        """
        user_role = self._parse_role(role, SIGNUP_ROLES)
        name = clean(full_name)
        if not name:
            raise ValidationError("Full name is required")
        org = clean(organization)
        if not org:
            raise ValidationError("Organization is required")
        normalized_email = normalize_email(email)
        password = require_password(password)

        if self.settings.require_verified_email and not self.otp_repo.has_verified(normalized_email):
            raise ValidationError("Please verify your email first")

        now = utc_now()
        user = User(
            id=generate_user_id(),
            email=normalized_email,
            role=user_role,
            full_name=name,
            organization=org,
            photo_url=clean(photo_url),
            password_hash=hash_password(password),
            created_at=now,
            updated_at=now,
        )
        self.user_repo.create_user(user)
        return self.token_service.issue(user), user

    def login(
        self,
        email: Optional[str],
        password: Optional[str],
        role: Optional[str]
    ) -> Tuple[str, User]:
        """
        Raises:
            ValidationError: Missing fields
            AuthenticationError: No such account or wrong password
        """
        normalized_email = clean(email).lower()
        if not normalized_email:
            raise ValidationError("Email is required")
        if not password:
            raise ValidationError("Password is required")
        user_role = self._parse_role(role, list(UserRole))

        user = self.user_repo.get_by_email_and_role(normalized_email, user_role)
        if user is None or not verify_password(password, user.password_hash):
            logger.info(
                f"Failed login for {normalized_email}",
                extra={"actor_email": normalized_email, "role": user_role.value}
            )
            raise AuthenticationError(WRONG_CREDENTIALS)

        logger.info("User logged in", extra={"user_id": user.id, "role": user.role})
        return self.token_service.issue(user), user

    def update_profile(
        self,
        user: User,
        full_name: Optional[str] = None,
        organization: Optional[str] = None,
        photo_url: Optional[str] = None
    ) -> User:
        """Apply the provided profile fields; None leaves a field unchanged"""
        updates = {}
        if full_name is not None:
            name = clean(full_name)
            if not name:
                raise ValidationError("Full name is required")
            updates["full_name"] = name
        if organization is not None:
            org = clean(organization)
            if not org:
                raise ValidationError("Organization is required")
            updates["organization"] = org
        if photo_url is not None:
            updates["photo_url"] = clean(photo_url)

        if not updates:
            return user

        updated = self.user_repo.update_profile(user.id, updates)
        if updated is None:
            raise UserNotFoundError("User not found", details={"user_id": user.id})
        return updated

    # =========================================================================
    # Password reset
    # =========================================================================

    def forgot_password(self, email: Optional[str]) -> None:
        """
        Store and email a reset code for every account with this email

        Never reveals whether an account exists; mail failures are logged only.
        """
        normalized_email = clean(email).lower()
        if not normalized_email:
            raise ValidationError("Email is required")

        code = generate_numeric_code()
        expires_at = add_minutes(utc_now(), self.settings.reset_code_ttl_minutes)
        updated = self.user_repo.set_reset_code(normalized_email, hash_code(code), expires_at)
        if updated == 0:
            logger.info(f"Password reset requested for unknown email {normalized_email}")
            return

        payload = {"code": code, "ttl_minutes": self.settings.reset_code_ttl_minutes}
        try:
            sent = self.mail_service.send_template(
                EmailTemplateKey.PASSWORD_RESET_CODE, [normalized_email], payload
            )
        except EmailSendError as e:
            logger.error(
                f"Failed to send reset code to {normalized_email}: {e.message}",
                extra={"action": "password_reset"}
            )
            return

        if not sent:
            logger.warning(
                f"Password reset code for {normalized_email}: {code}",
                extra={"action": "password_reset"}
            )

    def verify_reset_code(self, email: Optional[str], code: Optional[str]) -> bool:
        normalized_email = clean(email).lower()
        reset_code = clean(code)
        if not normalized_email or not reset_code:
            raise ValidationError("Email and code are required")

        if not self.user_repo.find_by_reset_code(normalized_email, hash_code(reset_code)):
            raise ValidationError("Invalid or expired reset code")
        return True

    def reset_password(
        self,
        email: Optional[str],
        code: Optional[str],
        new_password: Optional[str]
    ) -> int:
        """
        Returns:
            Number of accounts whose password changed
        """
        normalized_email = clean(email).lower()
        if not normalized_email:
            raise ValidationError("Email is required")
        reset_code = clean(code)
        if not reset_code:
            raise ValidationError("Reset code is required")
        password = require_password(new_password, field="New password")

        updated = self.user_repo.reset_password(
            normalized_email, hash_code(reset_code), hash_password(password)
        )
        if updated == 0:
            raise ValidationError("Invalid or expired reset code")

        logger.info(
            f"Password reset for {normalized_email}",
            extra={"action": "password_reset", "status": "completed"}
        )
        return updated
