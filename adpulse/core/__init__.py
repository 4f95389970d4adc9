# Core module - config, database
from adpulse.core.config import settings
from adpulse.core.database import Base, AsyncSessionLocal, init_models
