# laundry.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Racine du projet puis chargement explicite du .env
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du service.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, webhook catalogue)
- Paramètres métier: préfixe des numéros de commande, TVA, frais de livraison
- Paramètres du checkout: moyens de paiement, locale, chemins de redirection
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces, guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _split_env(name: str, default: str) -> list[str]:
    return [p.strip() for p in os.getenv(name, default).split(",") if p.strip()]

# Supabase: URL et clés (anon/service)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("VITE_SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Cookies / session
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = _clean_env(os.getenv("SESSION_SECRET_KEY") or "replace_me_with_a_long_random_secret")

# CORS / hôtes
CORS_ORIGINS = _split_env("CORS_ORIGINS", "*")
ALLOWED_HOSTS = _split_env("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

# Stripe: clé privée et secret webhook
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")

# Secret partagé des webhooks base de données (changements du catalogue)
CATALOG_WEBHOOK_SECRET = _clean_env(os.getenv("CATALOG_WEBHOOK_SECRET") or "")

# Commandes
ORDER_NUMBER_PREFIX = _clean_env(os.getenv("ORDER_NUMBER_PREFIX") or "EZY")
ORDER_NUMBER_MAX_ATTEMPTS = int(os.getenv("ORDER_NUMBER_MAX_ATTEMPTS", "10"))
VAT_RATE = os.getenv("VAT_RATE", "0.21")
SHIPPING_FEE = os.getenv("SHIPPING_FEE", "0")

# Checkout hébergé
PAYMENT_METHODS = _split_env("PAYMENT_METHODS", "card,ideal,bancontact")
PAYMENT_LOCALE = _clean_env(os.getenv("PAYMENT_LOCALE") or "nl")

# Chemins du front (navigation après confirmation / login)
ORDER_SUCCESS_PATH = os.getenv("ORDER_SUCCESS_PATH", "/order/success")
LOGIN_PATH = os.getenv("LOGIN_PATH", "/login")

BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000")
