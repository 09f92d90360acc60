#!/usr/bin/env python3
"""Development server startup script."""

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "http_source.interfaces.http.rest:create_app",
        factory=True,
        host="127.0.0.1",
        port=8080,
        reload=True,
        log_level="debug",
    )
