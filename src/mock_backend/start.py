#!/usr/bin/env python
def main():
    """Start the mock backend"""
    import uvicorn
    from mock_backend.config.settings import settings
    from mock_backend.utils.logger import setup_logger

    setup_logger(settings.LOG_LEVEL)

    print("=" * 50)
    print(f"Starting {settings.APP_NAME}")
    print(f"Database: {settings.DB_PATH}")
    print(f"Listening: http://{settings.HOST}:{settings.PORT}{settings.API_PREFIX}")
    print(f"Login: POST {settings.login_route}")
    print("=" * 50)

    uvicorn.run(
        "mock_backend.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
