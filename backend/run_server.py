#!/usr/bin/env python3
"""Production server runner for the Mediator API"""

import uvicorn

if __name__ == "__main__":  # pragma: no cover
    uvicorn.run(
        "app:create_app",
        factory=True,
        host="127.0.0.1",
        port=3001,
        reload=False,
        workers=2,
        log_level="info",
        proxy_headers=True,
    )
