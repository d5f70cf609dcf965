import uvicorn
from bus_tracker.config import settings

if __name__ == "__main__":
    # Production configuration
    uvicorn.run(
        "bus_tracker.main:app",
        host="0.0.0.0",  # Allow connections from any IP
        port=8000,
        reload=False,
        workers=1,        # The memory backend is per process
        log_level=settings.log_level.lower(),
        access_log=True
    )
