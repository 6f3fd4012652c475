import os

import uvicorn

from lababil.core.logging import setup_logging

if __name__ == "__main__":
    setup_logging()

    # State is warmed in the app lifespan (migration, load, low-stock check)
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(
        "lababil.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.environ.get("ENVIRONMENT", "development") == "development",
        log_level="info",
    )
