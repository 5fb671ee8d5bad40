"""Head Cook AI - Recipe Suggestion Service.

Single entry point for the backend:
- Verifies Firebase ID tokens on every protected endpoint
- Counts searches per user in Firestore and applies the quota policy
- Generates recipes with Gemini and recipe photos with Imagen

Run with: python app.py
Or: uvicorn app:app --port 8080
"""

import uvicorn

from headcook.api.server import create_app
from headcook.utils.config import config
from headcook.utils.logger import logger


app = create_app()


if __name__ == "__main__":
    logger.info(f"Starting Head Cook AI on port {config.PORT}")
    logger.info(f"Quota policy: {config.QUOTA_POLICY} (limit: {config.SEARCH_LIMIT or 'unlimited'})")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT, log_level="warning")
