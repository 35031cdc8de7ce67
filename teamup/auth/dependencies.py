from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import logging

from teamup.auth.schemas import Identity
from teamup.auth.verifier import CredentialVerifier
from teamup.errors import MissingCredential, ServiceUnavailable, VerifierUnavailable

logger = logging.getLogger(__name__)

# Extrait le token depuis le header "Authorization: Bearer <token>"
bearer_scheme = HTTPBearer(auto_error=False)


def get_verifier(request: Request) -> Optional[CredentialVerifier]:
    return getattr(request.app.state, "verifier", None)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: Optional[CredentialVerifier] = Depends(get_verifier),
) -> Identity:
    """
    🔐 Récupère l'identité de l'appelant à partir du token Bearer.
    """
    if credentials is None or not credentials.credentials:
        logger.warning("⛔ Accès refusé : token manquant")
        raise MissingCredential()

    if verifier is None:
        raise VerifierUnavailable()

    identity = await verifier.verify(credentials.credentials)
    logger.debug(f"✅ Utilisateur authentifié : uid={identity.uid}")
    return identity


async def get_service_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: Optional[CredentialVerifier] = Depends(get_verifier),
) -> Identity:
    """
    Variante pour les routes de notifications : un vérificateur non initialisé
    y est rendu en 503 plutôt qu'en 401.
    """
    if credentials is None or not credentials.credentials:
        raise MissingCredential("Token manquant")
    try:
        return await get_current_identity(credentials, verifier)
    except VerifierUnavailable as e:
        raise ServiceUnavailable() from e
