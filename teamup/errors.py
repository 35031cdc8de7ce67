"""
Erreurs métier exposées aux clients.

Chaque erreur porte un triplet stable (kind, message, status_code) ;
le gestionnaire d'exceptions de l'application le rend en ``{"error": message}``.
"""
from typing import Any, Dict, Optional


class TeamUpError(Exception):
    kind = "Internal"
    message = "Erreur interne du serveur"
    status_code = 500

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        body = {"error": self.message}
        body.update(self.extra)
        return body


class Unauthenticated(TeamUpError):
    kind = "Unauthenticated"
    message = "Token d'authentification requis"
    status_code = 401


class MissingCredential(Unauthenticated):
    kind = "MissingCredential"


class InvalidCredential(Unauthenticated):
    kind = "InvalidCredential"
    message = "Token invalide"


class VerifierUnavailable(InvalidCredential):
    kind = "VerifierUnavailable"


class InvalidPayload(TeamUpError):
    kind = "InvalidPayload"
    message = "Données invalides"
    status_code = 400


class Forbidden(TeamUpError):
    kind = "Forbidden"
    message = "Non autorisé"
    status_code = 403


class NotFound(TeamUpError):
    kind = "NotFound"
    message = "Ressource non trouvée"
    status_code = 404


class EventNotFoundError(NotFound):
    message = "Événement non trouvé"


class UserNotFoundError(NotFound):
    message = "Utilisateur non trouvé"


class AlreadyMember(TeamUpError):
    kind = "AlreadyMember"
    message = "Vous êtes déjà inscrit à cet événement"
    status_code = 400


class NotAMember(TeamUpError):
    kind = "NotAMember"
    message = "Vous n'êtes pas inscrit à cet événement"
    status_code = 400


class OrganizerCannotLeave(TeamUpError):
    kind = "OrganizerCannotLeave"
    message = "L'organisateur ne peut pas quitter son propre événement"
    status_code = 400


class EventFullError(TeamUpError):
    kind = "EventFull"
    message = "Cet événement est complet"
    status_code = 400


class ServiceUnavailable(TeamUpError):
    kind = "ServiceUnavailable"
    message = "Service non disponible"
    status_code = 503


class Internal(TeamUpError):
    pass


class PushDeliveryError(TeamUpError):
    """Échec d'envoi d'une notification, avec le code renvoyé au client."""
    kind = "PushDelivery"
    message = "Erreur lors de l'envoi de la notification de test"

    def __init__(self, message: Optional[str], error_code: str, status_code: int = 500):
        super().__init__(message, errorCode=error_code, apiVersion="FCM_V1")
        self.error_code = error_code
        self.status_code = status_code
