"""JWT access-token verification.

Tokens are issued by the identity service (OTP login lives there). This
service shares its HS256 secret and only decodes: signature, expiry and
the "type" claim are checked, nothing is ever signed here.
"""

from jose import JWTError, jwt

from config.settings import settings
from src.tw_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def decode_token(token: str, expected_type: str = "access") -> dict[str, str]:
    """Decode and validate a JWT token.

    Raises:
        InvalidCredentialsError: bad signature, expired, or wrong token type.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    # Refresh tokens must never authorise API calls
    if payload.get("type") != expected_type:
        raise InvalidCredentialsError()
    return payload
