# module travel_api.app
from travel_api.app_setup.factory import create_app

# App globale
app = create_app()
