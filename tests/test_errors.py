import pytest

from mondial_relay.errors import (
    MondialRelayApiError,
    MondialRelayAuthenticationError,
    MondialRelaySoapError,
    soap_status_message,
)


def test_known_code_uses_translated_message():
    error = MondialRelayApiError(80, context={"relayPointId": "123"})

    assert error.code == 80
    assert error.message == "Point relais introuvable. Veuillez vérifier l'identifiant."
    assert str(error) == "[MR Error 80] Point relais introuvable. Veuillez vérifier l'identifiant."
    assert error.context == {"relayPointId": "123"}


def test_custom_message_overrides_table():
    error = MondialRelayApiError(3, "Échec de la recherche des points relais.")

    assert str(error) == "[MR Error 3] Échec de la recherche des points relais."


def test_unknown_code_falls_back_to_generic_message():
    error = MondialRelayApiError(42)

    assert error.message == "Erreur API Mondial Relay inconnue (code 42)"
    assert error.context == {}


@pytest.mark.parametrize(
    "code, temporary, configuration, validation",
    [
        (1, False, True, False),
        (2, False, False, True),
        (3, True, False, False),
        (9, False, False, True),
        (20, False, False, True),
        (80, False, False, True),
        (81, True, False, False),
        (97, False, False, False),
    ],
)
def test_classification(code, temporary, configuration, validation):
    error = MondialRelayApiError(code)

    assert error.is_temporary is temporary
    assert error.is_configuration_error is configuration
    assert error.is_validation_error is validation


def test_authentication_error_always_uses_credentials_code():
    error = MondialRelayAuthenticationError(context={"statusCode": 403})

    assert isinstance(error, MondialRelayApiError)
    assert error.code == 1
    assert error.is_configuration_error
    assert "authentification" in error.message
    assert error.context == {"statusCode": 403}


def test_soap_status_message():
    assert soap_status_message(97) == "Clé de sécurité invalide"
    assert soap_status_message(24) == "Numéro de Point Relais invalide"
    assert soap_status_message(6) == "Erreur inconnue (code 6)"


@pytest.mark.parametrize(
    "code, temporary, configuration, validation",
    [
        (3, False, True, False),
        (81, False, False, True),
        (97, False, True, False),
        (24, False, False, True),
        (98, True, False, False),
    ],
)
def test_soap_status_classification(code, temporary, configuration, validation):
    error = MondialRelaySoapError(code)

    assert isinstance(error, MondialRelayApiError)
    assert error.message == soap_status_message(code)
    assert error.is_temporary is temporary
    assert error.is_configuration_error is configuration
    assert error.is_validation_error is validation
