import uvicorn
from app.core.config import settings

def main():
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENV == "local",
        log_config=None,  # keep the request-id format from setup_logging
    )

if __name__ == "__main__":
    main()
