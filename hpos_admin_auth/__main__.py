"""
HPOS Admin auth sidecar entry point.

Usage:
    HPOS_STATE_PATH=/run/hpos-state.json python -m hpos_admin_auth
"""
from hpos_admin_auth.api.main import main

if __name__ == "__main__":
    main()
