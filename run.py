"""
Run the AdPulse API
"""
import uvicorn
from adpulse.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "adpulse.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
