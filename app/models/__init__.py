# Food Bank Registration: database models
# Import all models here for SQLAlchemy discovery

from app.models.user import User, Role                         # noqa
from app.models.event import Event, EventStatus                # noqa
from app.models.qr_session import QRSession                    # noqa
from app.models.citizen_profile import CitizenProfile          # noqa
from app.models.registration import Registration               # noqa
from app.models.admin_settings import AdminSettings            # noqa
