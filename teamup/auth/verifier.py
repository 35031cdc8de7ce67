"""
Vérification des tokens d'authentification.

Deux implémentations :
- ``FirebaseVerifier`` : ID tokens Firebase, vérifiés par firebase-admin ;
- ``JWTVerifier`` : tokens HS256 signés localement (développement, tests).

Aucune identité n'est mise en cache, chaque requête est revérifiée.
"""
import logging
from typing import Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from starlette.concurrency import run_in_threadpool

from teamup.auth.jwt_handler import decode_access_token
from teamup.auth.schemas import Identity
from teamup.config import Settings
from teamup.errors import Internal, InvalidCredential, VerifierUnavailable

logger = logging.getLogger(__name__)


class CredentialVerifier:
    async def verify(self, token: str) -> Identity:
        raise NotImplementedError


class FirebaseVerifier(CredentialVerifier):
    def __init__(self, app: Optional[firebase_admin.App]):
        self.app = app

    async def verify(self, token: str) -> Identity:
        if self.app is None:
            logger.error("⛔ Firebase Admin Auth non initialisé")
            raise VerifierUnavailable()

        try:
            decoded = await run_in_threadpool(firebase_auth.verify_id_token, token, app=self.app)
        except firebase_auth.CertificateFetchError as e:
            logger.error(f"❌ Certificats Firebase indisponibles : {e}")
            raise Internal() from e
        except (ValueError, firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError) as e:
            logger.warning(f"⛔ Token Firebase refusé : {e}")
            raise InvalidCredential() from e

        return Identity(uid=decoded["uid"], email=decoded.get("email"), claims=decoded)


class JWTVerifier(CredentialVerifier):
    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    async def verify(self, token: str) -> Identity:
        payload = decode_access_token(token, self.secret, self.algorithm)
        if payload is None:
            raise InvalidCredential()
        return Identity(uid=str(payload["sub"]), email=payload.get("email"), claims=payload)


def build_verifier(settings: Settings, firebase_app: Optional[firebase_admin.App]) -> CredentialVerifier:
    if settings.AUTH_PROVIDER == "jwt":
        logger.info("🔐 Vérification des tokens : JWT local")
        return JWTVerifier(settings.JWT_SECRET, settings.ALGORITHM)
    logger.info("🔐 Vérification des tokens : Firebase")
    return FirebaseVerifier(firebase_app)
