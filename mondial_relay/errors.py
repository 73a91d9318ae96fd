"""Mondial Relay error codes and the exceptions that carry them."""

from types import MappingProxyType

# Codes raised by the clients themselves, with user-facing French messages.
API_ERROR_MESSAGES = MappingProxyType({
    0: "Mode sandbox actif - Aucune erreur",
    1: "Identifiants API invalides. Veuillez vérifier votre configuration.",
    2: "Code postal non desservi par Mondial Relay.",
    3: "Service Mondial Relay temporairement indisponible. Veuillez réessayer ultérieurement.",
    9: "Le poids du colis dépasse les limites autorisées (max 30kg).",
    20: "Point relais temporairement inactif.",
    80: "Point relais introuvable. Veuillez vérifier l'identifiant.",
    81: "Point relais actuellement saturé. Veuillez sélectionner un autre point.",
})

# STAT codes returned by the SOAP web services.
SOAP_STATUS_MESSAGES = MappingProxyType({
    0: "Opération effectuée avec succès",
    1: "Enseigne invalide",
    2: "Numéro d'enseigne vide ou inexistant",
    3: "Compte enseigne non actif",
    5: "Numéro de Compte enseigne non autorisé",
    7: "Numéro de client invalide (non spécifié)",
    8: "Erreur SQL",
    9: "Enseigne non autorisée",
    10: "Expédition non autorisée",
    11: "Numéro de compte enseigne invalide",
    12: "Pays de livraison non autorisé",
    20: "Poids du colis invalide",
    21: "Taille du colis invalide",
    22: "Taille + Poids du colis invalide",
    24: "Numéro de Point Relais invalide",
    25: "Numéro de Point Relais non renseigné",
    26: "Point Relais indisponible",
    27: "Pays Point Relais invalide",
    28: "Poids ou Taille du colis invalide pour ce Point Relais",
    29: "Point Relais non autorisé",
    30: "Expédition non créée",
    31: "Colis inexistant",
    32: "Colis déjà existant",
    33: "Expédition trop ancienne",
    34: "Code de suivi invalide",
    35: "Plus de 200 colis dans la recherche",
    36: "Dates de recherche invalides",
    37: "Plage de dates trop grande",
    38: "Texte trop long",
    39: "Texte de notification trop long",
    40: "Adresse invalide",
    44: "Nombre de jours avant livraison invalide",
    45: "Nombre de jours avant disponibilité invalide",
    46: "Instruction de livraison invalide",
    47: "Enseigne de retour non autorisée",
    48: "Mode de collecte invalide",
    49: "Mode de livraison invalide",
    60: "Code Pays invalide",
    61: "Ville invalide",
    62: "Code Postal invalide",
    63: "Adresse invalide",
    64: "Adresse1 invalide",
    65: "Adresse2 invalide",
    66: "Nom invalide",
    67: "Prénom invalide",
    68: "Adresse non trouvée par Street Matching",
    69: "Rayon de recherche trop élevé",
    70: "Données manquantes pour la recherche",
    71: "Coordonnées GPS invalides",
    74: "Langue invalide",
    78: "Mode de collecte invalide pour les retours",
    79: "Assurance non autorisée",
    80: "Code tracing invalide",
    81: "Code postal invalide",
    82: "Ville invalide",
    83: "Pays invalide",
    84: "Numéro de téléphone invalide",
    85: "Adresse e-mail invalide",
    86: "Code postal invalide pour le pays",
    87: "Format de téléphone invalide",
    88: "Numéro de mobile invalide",
    89: "Format de mobile invalide",
    90: "Pas de Point Relais dans la zone",
    94: "Le Pays du destinataire n'est pas autorisé par l'enseigne",
    95: "Numéro de compte incorrect",
    96: "Paramètre Action invalide",
    97: "Clé de sécurité invalide",
    98: "Erreur de service",
    99: "Erreur générique",
})

TEMPORARY_CODES = frozenset({3, 81})
CONFIGURATION_CODES = frozenset({1})
VALIDATION_CODES = frozenset({2, 9, 20, 80})

# STAT codes reuse numbers of the REST codes with other meanings
# (STAT 3 is an inactive account, STAT 81 an invalid postal code).
SOAP_TEMPORARY_CODES = frozenset({8, 98, 99})
SOAP_CONFIGURATION_CODES = frozenset({1, 2, 3, 5, 9, 11, 95, 97})
SOAP_VALIDATION_CODES = frozenset({
    20, 21, 22, 24, 25, 26, 27, 28, 29, 60, 61, 62, 69, 70, 71, 81, 82, 83, 86, 90,
})

AUTHENTICATION_ERROR_CODE = 1


def soap_status_message(code: int) -> str:
    """Return the message for a SOAP STAT code."""
    return SOAP_STATUS_MESSAGES.get(code, f"Erreur inconnue (code {code})")


class MondialRelayApiError(Exception):
    """Raised when a Mondial Relay API call fails.

    Attributes:
        code: Mondial Relay error code.
        message: Human-readable (French) message.
        context: Request details useful for diagnostics.
    """

    temporary_codes = TEMPORARY_CODES
    configuration_codes = CONFIGURATION_CODES
    validation_codes = VALIDATION_CODES

    def __init__(self, code: int, message: str | None = None, context: dict | None = None):
        self.code = code
        self.message = message or self._default_message(code)
        self.context = dict(context or {})
        super().__init__(f"[MR Error {code}] {self.message}")

    @staticmethod
    def _default_message(code: int) -> str:
        return API_ERROR_MESSAGES.get(code, f"Erreur API Mondial Relay inconnue (code {code})")

    @property
    def is_temporary(self) -> bool:
        """True when the call may succeed if retried later."""
        return self.code in self.temporary_codes

    @property
    def is_configuration_error(self) -> bool:
        return self.code in self.configuration_codes

    @property
    def is_validation_error(self) -> bool:
        return self.code in self.validation_codes


class MondialRelaySoapError(MondialRelayApiError):
    """Raised for a non-zero STAT code from the SOAP web services.

    The code is the STAT value, classified with the SOAP code sets.
    """

    temporary_codes = SOAP_TEMPORARY_CODES
    configuration_codes = SOAP_CONFIGURATION_CODES
    validation_codes = SOAP_VALIDATION_CODES

    @staticmethod
    def _default_message(code: int) -> str:
        return soap_status_message(code)


class MondialRelayAuthenticationError(MondialRelayApiError):
    """Raised when the API rejects the credentials or the signature."""

    def __init__(
        self,
        message: str = (
            "Échec de l'authentification API Mondial Relay. "
            "Veuillez vérifier vos identifiants."
        ),
        context: dict | None = None,
    ):
        super().__init__(AUTHENTICATION_ERROR_CODE, message, context)
