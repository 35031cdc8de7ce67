from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
import logging

from teamup.config import settings

logger = logging.getLogger(__name__)


def create_access_token(
    uid: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    secret: Optional[str] = None,
) -> str:
    """
    Crée un token JWT local (développement, tests) au format d'un ID token Firebase.

    :param uid: Identifiant de l'utilisateur, placé dans ``sub`` et ``user_id``
    :param email: Email optionnel ajouté au payload
    :param expires_delta: Durée de validité du token (timedelta)
    :param secret: Clé de signature, ``settings.JWT_SECRET`` par défaut
    :return: Token JWT encodé
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": uid, "user_id": uid, "iat": now, "exp": expire}
    if email:
        to_encode["email"] = email

    token = jwt.encode(to_encode, secret or settings.JWT_SECRET, algorithm=settings.ALGORITHM)
    logger.debug(f"✅ Token généré pour uid={uid}, expire à {expire}")
    return token


def decode_access_token(token: str, secret: str, algorithm: str) -> Optional[dict]:
    """
    🔐 Décode et vérifie un token JWT.

    Retourne le payload si le token est valide, sinon None.
    Vérifie aussi la présence du champ 'sub' qui porte l'uid.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.warning(f"❌ Échec de décodage du token : {e}")
        return None

    if not payload.get("sub"):
        logger.warning("⚠️ Token valide mais champ 'sub' manquant dans le payload.")
        return None

    return payload
