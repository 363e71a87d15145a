from .errors import SouvyError, AssetFetchError
from .state import APP_TITLE, REFERENCE_DESIGN_WIDTH, Settings, load_settings
