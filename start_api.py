#!/usr/bin/env python3
"""
Startup script for the Blynt Directory Taxonomy API.
"""

import sys
import uvicorn
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

if __name__ == "__main__":
    print("Starting Blynt Directory Taxonomy API...")
    print("API Documentation: http://localhost:8000/docs")
    print("Health Check: http://localhost:8000/health")
    print("\nPress CTRL+C to stop\n")

    uvicorn.run(
        "blynt.api.directory_api:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
