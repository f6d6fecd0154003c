#!/usr/bin/env python3
"""
Admin backend startup wrapper.

    salespath-admin            # console script
    python -m salespath_admin.start_backend
"""
import os
import sys


def main():
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    print("[Backend] Starting SalesPath admin backend")
    print(f"[Backend] Server: http://localhost:{port}")
    print("[Backend] Press CTRL+C to stop")
    print()

    try:
        import uvicorn
        uvicorn.run(
            "salespath_admin.main:app",
            host=host,
            port=port,
            reload=False,
            log_level="info",
            access_log=True,
        )
    except KeyboardInterrupt:
        print("\n[Backend] Shutting down...")
        sys.exit(0)


if __name__ == "__main__":
    main()
