"""
Catégories d'erreurs métier.
- ValidationError: entrée manquante ou invalide, remontée immédiatement (pas de retry).
- PersistenceError: échec d'insert/update en base, la commande n'est pas considérée comme passée.
- ProviderError: échec du prestataire de paiement, la commande reste en pending/pending (retry possible).
L'épuisement des tentatives de numéro de commande n'est pas une erreur (repli horodaté).
"""


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    status_code = 400


class PersistenceError(StorefrontError):
    status_code = 500


class ProviderError(StorefrontError):
    status_code = 502
