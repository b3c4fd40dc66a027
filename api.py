"""ePulsaku webhook service entrypoint"""

import uvicorn
from config import ApplicationConfig
from src.api.app import create_app

app = create_app(ApplicationConfig)

if __name__ == "__main__":
    # Webhook IP checks read X-Forwarded-For themselves; keep the raw peer
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=ApplicationConfig.API_PORT,
        reload=ApplicationConfig.API_RELOAD,
        proxy_headers=False,
        log_level=ApplicationConfig.LOG_LEVEL.lower(),
    )
