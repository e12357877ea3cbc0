import os
import uvicorn

if __name__ == "__main__":
    dev = os.environ.get("ENV", "dev") == "dev"
    port = int(os.environ.get("PORT", 8000))
    log_level = os.environ.get("LOG_LEVEL", "info").lower()

    if dev:
        # Local dev with reload
        uvicorn.run("app.main:app", host="127.0.0.1", port=port, reload=True, log_level=log_level)
    else:
        # Container / hosted: bind all interfaces, single process, judge calls are async
        uvicorn.run("app.main:app", host="0.0.0.0", port=port, log_level=log_level, proxy_headers=True)
