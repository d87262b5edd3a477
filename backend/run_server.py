from certhub.config import settings

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "certhub.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=False
    )
