# module laundry.app
from laundry.app_setup.factory import create_app

# App globale
app = create_app()
