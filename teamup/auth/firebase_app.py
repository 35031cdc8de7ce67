import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials

from teamup.config import Settings

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "admin"


def init_firebase_app(settings: Settings) -> Optional[firebase_admin.App]:
    """
    Initialise l'application Firebase Admin une seule fois par processus.

    Sans fichier de compte de service, retourne None : la vérification des
    tokens Firebase et l'envoi de notifications sont alors indisponibles.
    """
    if not settings.FIREBASE_CREDENTIALS_FILE:
        logger.warning("⚠️ FIREBASE_CREDENTIALS_FILE absent : Firebase Admin non initialisé")
        return None

    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        pass

    cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_FILE)
    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    app = firebase_admin.initialize_app(cred, options, name=FIREBASE_APP_NAME)
    logger.info(f"✅ Firebase Admin initialisé (projet={app.project_id})")
    return app
