"""
Génération du numéro de commande lisible (ex: EZY482913).

Politique de retry bornée, aléa et horloge injectables:
- candidat = préfixe + nombre aléatoire à 6 chiffres
- vérification d'existence en base, au plus max_attempts recherches
- repli déterministe sur préfixe + 6 derniers chiffres du timestamp (ms)
  si toutes les tentatives entrent en collision ou si une recherche échoue.
Le repli peut lui-même collisionner (probabilité faible, volume de commandes réduit).
"""
import logging
import random
import time
from typing import Callable, Optional

from laundry.config import ORDER_NUMBER_PREFIX, ORDER_NUMBER_MAX_ATTEMPTS

logger = logging.getLogger(__name__)


class OrderNumberPolicy:
    def __init__(
        self,
        exists: Callable[[str], bool],
        prefix: str = ORDER_NUMBER_PREFIX,
        max_attempts: int = ORDER_NUMBER_MAX_ATTEMPTS,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.exists = exists
        self.prefix = prefix
        self.max_attempts = max(1, int(max_attempts))
        self.rng = rng or random.SystemRandom()
        self.clock = clock

    def candidate(self) -> str:
        return f"{self.prefix}{self.rng.randint(100000, 999999)}"

    def fallback(self) -> str:
        millis = str(int(self.clock() * 1000))
        return f"{self.prefix}{millis[-6:]}"

    def generate(self) -> str:
        for attempt in range(1, self.max_attempts + 1):
            number = self.candidate()
            try:
                taken = self.exists(number)
            except Exception:
                logger.exception("order number lookup failed attempt=%s", attempt)
                break
            if not taken:
                return number
            logger.info("order number collision number=%s attempt=%s", number, attempt)
        fallback = self.fallback()
        logger.warning("order number falling back to timestamp number=%s", fallback)
        return fallback
