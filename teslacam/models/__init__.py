# TeslaCam Viewer — Database Models
# Import all models here for SQLAlchemy discovery

from teslacam.models.event import Event      # noqa
from teslacam.models.clip import Clip        # noqa
from teslacam.models.camera import Camera    # noqa
