"""Backend de la vitrine de commande de blanchisserie (catalogue, commandes, paiement hébergé)."""

__version__ = "0.1.0"
