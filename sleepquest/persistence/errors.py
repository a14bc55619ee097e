# sleepquest/persistence/errors.py
# -*- coding: utf-8 -*-
from sleepquest.services.score_engine import ValidationError


class StoreError(RuntimeError):
    """La couche de persistance a échoué (connexion, sérialisation, contrainte...)."""


class NotFoundError(LookupError):
    """L'enregistrement ciblé n'existe pas (ou n'appartient pas à l'utilisateur)."""


class DuplicateEntryError(ValidationError):
    """Une nuit existe déjà pour cet utilisateur à cette date."""
